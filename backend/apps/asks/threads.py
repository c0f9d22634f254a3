"""
Thread resolution - find-or-create the single conversation thread for a
(session, user-or-none, shared) scope.
"""
import logging
import uuid
from typing import Optional

from django.conf import settings

from apps.common.exceptions import ThreadRaceConflict
from apps.common.logging_utils import build_log_extra

from .modes import UNCONFIGURED_THREAD_SHARED, ThreadModeConfig, is_shared_thread
from .records import ThreadRecord
from .store import ConversationStore

logger = logging.getLogger(__name__)


class ThreadResolver:
    """
    Idempotent thread lookup with lazy creation.

    Safe under concurrent first access: two requests racing to create the
    same scope both end up with the row the partial unique constraint let
    through. The loser re-fetches once; if that also comes back empty the
    ThreadRaceConflict propagates.
    """

    def __init__(self, store: ConversationStore, unconfigured_shared: Optional[bool] = None):
        self.store = store
        if unconfigured_shared is None:
            unconfigured_shared = getattr(
                settings, 'ASK_UNCONFIGURED_THREAD_SHARED', UNCONFIGURED_THREAD_SHARED
            )
        self.unconfigured_shared = unconfigured_shared

    def is_shared(self, config: Optional[ThreadModeConfig]) -> bool:
        return is_shared_thread(config, default=self.unconfigured_shared)

    async def resolve(
        self,
        session_id: uuid.UUID,
        requesting_user_id: Optional[uuid.UUID],
        config: Optional[ThreadModeConfig],
    ) -> Optional[ThreadRecord]:
        """
        Resolve the thread a requester should see.

        Returns None only in individual mode without a requester and
        without an existing shared thread; callers then read every
        message of the session.
        """
        shared = self.is_shared(config)
        scope_user_id = None if shared else requesting_user_id

        if not shared and requesting_user_id is None:
            thread = await self.store.find_thread(session_id, None, True)
            logger.warning(
                "conversation_thread_shared_fallback",
                extra=build_log_extra(
                    ask_session_id=session_id,
                    thread_id=thread.id if thread else None,
                ),
            )
            return thread

        thread = await self.store.find_thread(session_id, scope_user_id, shared)
        if thread is not None:
            return thread

        try:
            thread = await self.store.create_thread(session_id, scope_user_id, shared)
        except ThreadRaceConflict:
            logger.info(
                "conversation_thread_race_lost",
                extra=build_log_extra(ask_session_id=session_id, user_id=scope_user_id, is_shared=shared),
            )
            thread = await self.store.find_thread(session_id, scope_user_id, shared)
            if thread is None:
                raise
            return thread

        logger.info(
            "conversation_thread_created",
            extra=build_log_extra(
                ask_session_id=session_id,
                thread_id=thread.id,
                user_id=scope_user_id,
                is_shared=shared,
            ),
        )
        return thread
