"""
Message aggregation - the ordered, canonically shaped message list for a
session as seen from one conversation thread.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from apps.common.logging_utils import build_log_extra

from .identity import build_message_summary
from .records import ConversationMessageSummary, MessageRecord, ThreadRecord, UserRecord
from .store import ConversationStore

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _chronological_key(message: MessageRecord) -> Tuple[bool, datetime]:
    # Rows without a timestamp go after timestamped ones
    if message.created_at is None:
        return (True, _EPOCH)
    created_at = message.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return (False, created_at)


def merge_messages(
    thread_messages: Sequence[MessageRecord],
    legacy_messages: Sequence[MessageRecord],
) -> List[MessageRecord]:
    """
    Concatenate thread-scoped and legacy rows, then sort by creation time.

    sorted() is stable: equal timestamps keep their fetch order (thread
    rows first, then legacy rows), so repeated calls give the same list.
    A row present in both inputs is kept once.
    """
    seen = set()
    combined = []
    for message in (*thread_messages, *legacy_messages):
        if message.id in seen:
            continue
        seen.add(message.id)
        combined.append(message)
    return sorted(combined, key=_chronological_key)


@dataclass(frozen=True)
class AggregatedMessages:
    messages: Tuple[ConversationMessageSummary, ...]
    users_by_id: Dict[uuid.UUID, UserRecord]


class MessageAggregator:
    """Loads, merges and projects messages for one context resolution."""

    def __init__(self, store: ConversationStore):
        self.store = store

    async def fetch_rows(
        self,
        session_id: uuid.UUID,
        thread: Optional[ThreadRecord],
    ) -> List[MessageRecord]:
        if thread is None:
            return await self.store.list_session_messages(session_id)

        thread_messages = await self.store.list_thread_messages(thread.id)
        legacy_messages = await self.store.list_unthreaded_messages(session_id)
        return merge_messages(thread_messages, legacy_messages)

    async def load(
        self,
        session_id: uuid.UUID,
        thread: Optional[ThreadRecord],
        known_users: Optional[Mapping[uuid.UUID, UserRecord]] = None,
    ) -> AggregatedMessages:
        """
        Load the merged message list for a session.

        Args:
            session_id: ASK session id
            thread: Resolved thread, or None to read every message of the session
            known_users: Profiles already loaded (e.g. for participants);
                only senders missing from it are fetched, in one query

        Returns:
            AggregatedMessages with summaries and the combined profile lookup
        """
        rows = await self.fetch_rows(session_id, thread)

        users_by_id: Dict[uuid.UUID, UserRecord] = dict(known_users or {})
        missing_user_ids = {
            row.user_id for row in rows
            if row.user_id and row.user_id not in users_by_id
        }
        if missing_user_ids:
            users_by_id.update(await self.store.get_users(missing_user_ids))

        summaries = tuple(
            build_message_summary(row, users_by_id.get(row.user_id) if row.user_id else None, index)
            for index, row in enumerate(rows)
        )

        logger.debug(
            "conversation_messages_loaded",
            extra=build_log_extra(
                ask_session_id=session_id,
                thread_id=thread.id if thread else None,
                message_count=len(summaries),
                fetched_user_count=len(missing_user_ids),
            ),
        )
        return AggregatedMessages(messages=summaries, users_by_id=users_by_id)
