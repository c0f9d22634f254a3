"""
Conversation context assembly

Single entry point for everything a conversation agent needs about an ASK
session. The chat stream, the voice-agent initialiser and the admin test
harness all call ContextAssembler.assemble(); none of them resolves names,
picks threads or merges messages on its own, so identical data yields
identical sender names, plan step ids and ordering in every mode.

Order of work:
    1. participants (+ their profiles, one batched query)
    2. conversation thread (find or create)
    3. messages for that thread (+ missing sender profiles, one query)
    4. project and challenge, concurrently
    5. conversation plan, only when a thread exists

Steps 1-3 are fatal on failure. Steps 4-5 are enrichment: a storage
failure there is logged and the field comes back as None.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from types import MappingProxyType
from typing import Awaitable, Callable, Mapping, Optional, Tuple, TypeVar

from apps.common.exceptions import StorageUnavailable
from apps.common.logging_utils import build_log_extra

from .identity import build_participant_summary
from .locator import SessionLocator, SessionLookup
from .messages import MessageAggregator
from .modes import ThreadModeConfig
from .plans import ConversationPlanService
from .records import (
    AskSessionRecord,
    ChallengeRecord,
    ConversationMessageSummary,
    ConversationParticipantSummary,
    ConversationPlanRecord,
    ProjectRecord,
    ThreadRecord,
    UserRecord,
)
from .store import ConversationStore
from .threads import ThreadResolver

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class ConversationContext:
    """
    Snapshot of one context resolution. Valid for that call only; do not
    cache it across changes to the session.
    """
    ask_session: AskSessionRecord
    participants: Tuple[ConversationParticipantSummary, ...]
    messages: Tuple[ConversationMessageSummary, ...]
    project: Optional[ProjectRecord]
    challenge: Optional[ChallengeRecord]
    conversation_plan: Optional[ConversationPlanRecord]
    conversation_thread: Optional[ThreadRecord]
    users_by_id: Mapping[uuid.UUID, UserRecord]


class ContextAssembler:
    """
    Builds ConversationContext objects on top of an injected store.
    """

    def __init__(
        self,
        store: ConversationStore,
        plan_service: Optional[ConversationPlanService] = None,
        thread_resolver: Optional[ThreadResolver] = None,
        aggregator: Optional[MessageAggregator] = None,
        locator: Optional[SessionLocator] = None,
    ):
        self.store = store
        self.plan_service = plan_service or ConversationPlanService(store)
        self.thread_resolver = thread_resolver or ThreadResolver(store)
        self.aggregator = aggregator or MessageAggregator(store)
        self.locator = locator or SessionLocator(store)

    async def resolve_session(self, raw_key_or_token: Optional[str]) -> Optional[SessionLookup]:
        return await self.locator.resolve(raw_key_or_token)

    async def assemble(
        self,
        session: AskSessionRecord,
        requesting_user_id: Optional[uuid.UUID] = None,
    ) -> ConversationContext:
        """
        Assemble the conversation context for a session.

        Args:
            session: The located ASK session
            requesting_user_id: Profile id of the requester, None when anonymous

        Returns:
            A fully populated, immutable ConversationContext
        """
        # 1. Participants
        participant_rows = await self.store.list_participants(session.id)
        participant_users = await self.store.get_users(row.user_id for row in participant_rows)
        participants = tuple(
            build_participant_summary(row, participant_users.get(row.user_id) if row.user_id else None, index)
            for index, row in enumerate(participant_rows)
        )

        # 2. Thread
        thread = await self.thread_resolver.resolve(
            session.id,
            requesting_user_id,
            ThreadModeConfig.from_session(session),
        )

        # 3. Messages
        aggregated = await self.aggregator.load(session.id, thread, participant_users)

        # 4. Project and challenge
        project, challenge = await asyncio.gather(
            self._enrich('project', self.store.get_project, session.project_id, session),
            self._enrich('challenge', self.store.get_challenge, session.challenge_id, session),
        )

        # 5. Plan
        conversation_plan = None
        if thread is not None:
            conversation_plan = await self._enrich(
                'conversation_plan', self.plan_service.get_plan_with_steps, thread.id, session
            )

        logger.info(
            "conversation_context_assembled",
            extra=build_log_extra(
                ask_session_id=session.id,
                thread_id=thread.id if thread else None,
                participant_count=len(participants),
                message_count=len(aggregated.messages),
                has_plan=conversation_plan is not None,
            ),
        )

        return ConversationContext(
            ask_session=session,
            participants=participants,
            messages=aggregated.messages,
            project=project,
            challenge=challenge,
            conversation_plan=conversation_plan,
            conversation_thread=thread,
            users_by_id=MappingProxyType(dict(aggregated.users_by_id)),
        )

    async def _enrich(
        self,
        field_name: str,
        fetch: Callable[[uuid.UUID], Awaitable[Optional[T]]],
        record_id: Optional[uuid.UUID],
        session: AskSessionRecord,
    ) -> Optional[T]:
        if record_id is None:
            return None
        try:
            return await fetch(record_id)
        except StorageUnavailable:
            logger.warning(
                "context_enrichment_failed",
                extra=build_log_extra(ask_session_id=session.id, field=field_name, record_id=record_id),
            )
            return None


async def resolve_session_by_key_or_token(
    store: ConversationStore,
    raw_key_or_token: Optional[str],
) -> Optional[SessionLookup]:
    """Locate a session from whatever identifier a caller was given."""
    return await SessionLocator(store).resolve(raw_key_or_token)
