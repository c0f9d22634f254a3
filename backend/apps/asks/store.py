"""
Conversation store - the storage client behind the conversation core.

Constructed explicitly and handed to the resolver, aggregator, locator
and assembler; nothing in the core reaches for the ORM directly. Every
public method is async: the synchronous ORM call runs through
sync_to_async and its rows come back as records.

Error translation:
    unknown requesting profile on thread insert -> ProfileNotFound
    IntegrityError on thread insert, with a winner row -> ThreadRaceConflict
    any other driver/database error -> StorageUnavailable
"""
import functools
import logging
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from asgiref.sync import sync_to_async
from django.db import DatabaseError, IntegrityError, InterfaceError, transaction

from apps.auth_app.models import Profile
from apps.common.exceptions import ProfileNotFound, StorageUnavailable, ThreadRaceConflict
from apps.common.logging_utils import build_log_extra
from apps.projects.models import Challenge, Project

from .models import AskParticipant, AskSession, ConversationPlan, ConversationThread, Message
from .records import (
    AskSessionRecord,
    ChallengeRecord,
    ConversationPlanRecord,
    MessageRecord,
    ParticipantRecord,
    ProjectRecord,
    ThreadRecord,
    UserRecord,
)

logger = logging.getLogger(__name__)


def _storage_call(operation):
    """Run a synchronous ORM method off the event loop and translate driver errors."""

    @functools.wraps(operation)
    async def wrapper(*args, **kwargs):
        try:
            return await sync_to_async(operation)(*args, **kwargs)
        except (DatabaseError, InterfaceError) as exc:
            logger.warning(
                "conversation_store_failed",
                extra=build_log_extra(operation=operation.__name__, error=repr(exc)),
            )
            raise StorageUnavailable() from exc

    return wrapper


class ConversationStore:
    """Django ORM implementation of the storage the conversation core needs."""

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    @_storage_call
    def get_session(self, session_id: uuid.UUID) -> Optional[AskSessionRecord]:
        session = AskSession.objects.filter(id=session_id).first()
        return AskSessionRecord.from_model(session) if session else None

    @_storage_call
    def get_session_by_key(self, key: str) -> Optional[AskSessionRecord]:
        session = AskSession.objects.filter(key=key).first()
        return AskSessionRecord.from_model(session) if session else None

    @_storage_call
    def find_session_by_key_insensitive(self, key: str) -> Optional[AskSessionRecord]:
        """
        Case-insensitive key match, newest session first.

        iexact escapes LIKE wildcards in the value, so a key containing
        % or _ only ever matches those literal characters.
        """
        session = (
            AskSession.objects
            .filter(key__iexact=key)
            .order_by('-created_at', '-id')
            .first()
        )
        return AskSessionRecord.from_model(session) if session else None

    @_storage_call
    def get_participant_by_token(
        self, token: str
    ) -> Optional[Tuple[ParticipantRecord, AskSessionRecord]]:
        participant = (
            AskParticipant.objects
            .select_related('ask_session')
            .filter(invite_token=token)
            .first()
        )
        if participant is None:
            return None
        return (
            ParticipantRecord.from_model(participant),
            AskSessionRecord.from_model(participant.ask_session),
        )

    # ------------------------------------------------------------------
    # Participants and profiles
    # ------------------------------------------------------------------

    @_storage_call
    def list_participants(self, session_id: uuid.UUID) -> List[ParticipantRecord]:
        rows = AskParticipant.objects.filter(ask_session_id=session_id).order_by('joined_at', 'id')
        return [ParticipantRecord.from_model(row) for row in rows]

    async def get_users(self, user_ids: Iterable[Optional[uuid.UUID]]) -> Dict[uuid.UUID, UserRecord]:
        """Fetch profiles in one query; no query at all for an empty id set."""
        ids = sorted({user_id for user_id in user_ids if user_id}, key=str)
        if not ids:
            return {}
        return await self._get_users(ids)

    @_storage_call
    def _get_users(self, ids: List[uuid.UUID]) -> Dict[uuid.UUID, UserRecord]:
        return {
            profile.id: UserRecord.from_model(profile)
            for profile in Profile.objects.filter(id__in=ids)
        }

    @_storage_call
    def get_profile_id_for_account(self, account_id: int) -> Optional[uuid.UUID]:
        return Profile.objects.filter(user_id=account_id).values_list('id', flat=True).first()

    # ------------------------------------------------------------------
    # Threads
    # ------------------------------------------------------------------

    @_storage_call
    def find_thread(
        self,
        session_id: uuid.UUID,
        user_id: Optional[uuid.UUID],
        is_shared: bool,
    ) -> Optional[ThreadRecord]:
        thread = (
            ConversationThread.objects
            .filter(ask_session_id=session_id, user_id=user_id, is_shared=is_shared)
            .order_by('created_at', 'id')
            .first()
        )
        return ThreadRecord.from_model(thread) if thread else None

    @_storage_call
    def create_thread(
        self,
        session_id: uuid.UUID,
        user_id: Optional[uuid.UUID],
        is_shared: bool,
    ) -> ThreadRecord:
        if user_id is not None and not Profile.objects.filter(id=user_id).exists():
            raise ProfileNotFound()
        try:
            # Savepoint: a lost race must not poison an enclosing transaction
            with transaction.atomic():
                thread = ConversationThread.objects.create(
                    ask_session_id=session_id,
                    user_id=user_id,
                    is_shared=is_shared,
                )
        except IntegrityError as exc:
            winner_exists = ConversationThread.objects.filter(
                ask_session_id=session_id,
                user_id=user_id,
                is_shared=is_shared,
            ).exists()
            if not winner_exists:
                # Not a uniqueness race; the wrapper reports it as StorageUnavailable
                raise
            raise ThreadRaceConflict() from exc
        return ThreadRecord.from_model(thread)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    @_storage_call
    def list_thread_messages(self, thread_id: uuid.UUID) -> List[MessageRecord]:
        rows = Message.objects.filter(conversation_thread_id=thread_id).order_by('created_at', 'id')
        return [MessageRecord.from_model(row) for row in rows]

    @_storage_call
    def list_unthreaded_messages(self, session_id: uuid.UUID) -> List[MessageRecord]:
        rows = (
            Message.objects
            .filter(ask_session_id=session_id, conversation_thread__isnull=True)
            .order_by('created_at', 'id')
        )
        return [MessageRecord.from_model(row) for row in rows]

    @_storage_call
    def list_session_messages(self, session_id: uuid.UUID) -> List[MessageRecord]:
        rows = Message.objects.filter(ask_session_id=session_id).order_by('created_at', 'id')
        return [MessageRecord.from_model(row) for row in rows]

    # ------------------------------------------------------------------
    # Enrichment
    # ------------------------------------------------------------------

    @_storage_call
    def get_project(self, project_id: uuid.UUID) -> Optional[ProjectRecord]:
        project = Project.objects.filter(id=project_id).first()
        return ProjectRecord.from_model(project) if project else None

    @_storage_call
    def get_challenge(self, challenge_id: uuid.UUID) -> Optional[ChallengeRecord]:
        challenge = Challenge.objects.filter(id=challenge_id).first()
        return ChallengeRecord.from_model(challenge) if challenge else None

    @_storage_call
    def get_conversation_plan(self, thread_id: uuid.UUID) -> Optional[ConversationPlanRecord]:
        plan = ConversationPlan.objects.filter(conversation_thread_id=thread_id).first()
        if plan is None:
            return None
        steps = plan.steps.order_by('step_order', 'id')
        return ConversationPlanRecord.from_model(plan, steps)
