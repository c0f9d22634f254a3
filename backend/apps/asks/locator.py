"""
Session location - find the ASK session a request is about, from a public
key or a participant invite token.

Blank input is "not found", never an error. Any stored key can be looked up;
the key format check belongs to the HTTP route (is_valid_ask_key).
"""
import logging
import re
import uuid
from dataclasses import dataclass
from typing import Optional

from django.conf import settings

from apps.common.logging_utils import build_log_extra, mask_token

from .records import AskSessionRecord
from .store import ConversationStore

logger = logging.getLogger(__name__)

_ASK_KEY_PATTERN = re.compile(r'^[A-Za-z0-9._-]+$')
_HAS_ALPHANUMERIC = re.compile(r'[A-Za-z0-9]')

MIN_ASK_KEY_LENGTH = 3


def is_valid_ask_key(key: Optional[str]) -> bool:
    """
    Format accepted on the public key route: at least three characters
    of letters, digits, '.', '_' or '-', with at least one letter or digit.
    """
    if not isinstance(key, str):
        return False
    key = key.strip()
    if len(key) < MIN_ASK_KEY_LENGTH:
        return False
    return bool(_ASK_KEY_PATTERN.match(key) and _HAS_ALPHANUMERIC.search(key))


class MatchedBy:
    KEY = 'key'
    FUZZY_KEY = 'fuzzy_key'
    TOKEN = 'token'


@dataclass(frozen=True)
class SessionLookup:
    """
    A located session. participant_id / participant_user_id are set when
    the session was found through a participant's invite token.
    """
    session: AskSessionRecord
    matched_by: str
    participant_id: Optional[uuid.UUID] = None
    participant_user_id: Optional[uuid.UUID] = None


class SessionLocator:

    def __init__(self, store: ConversationStore, fuzzy_match: Optional[bool] = None):
        self.store = store
        if fuzzy_match is None:
            fuzzy_match = getattr(settings, 'ASK_KEY_FUZZY_MATCH', True)
        self.fuzzy_match = fuzzy_match

    async def find_by_key(self, raw_key: Optional[str]) -> Optional[SessionLookup]:
        """
        Exact key match first; then, if enabled, a case-insensitive match
        that prefers the most recently created session.
        """
        key = (raw_key or '').strip()
        if not key:
            return None

        session = await self.store.get_session_by_key(key)
        if session is not None:
            return SessionLookup(session=session, matched_by=MatchedBy.KEY)

        if not self.fuzzy_match:
            return None

        session = await self.store.find_session_by_key_insensitive(key)
        if session is None:
            return None

        logger.info(
            "ask_session_fuzzy_key_match",
            extra=build_log_extra(requested_key=key, matched_key=session.key, ask_session_id=session.id),
        )
        return SessionLookup(session=session, matched_by=MatchedBy.FUZZY_KEY)

    async def find_by_token(self, token: Optional[str]) -> Optional[SessionLookup]:
        """
        Resolve an invite token to its session and participant in one lookup.
        """
        token = (token or '').strip()
        if not token:
            return None

        found = await self.store.get_participant_by_token(token)
        if found is None:
            logger.info("invite_token_not_found", extra=build_log_extra(token=mask_token(token)))
            return None

        participant, session = found
        return SessionLookup(
            session=session,
            matched_by=MatchedBy.TOKEN,
            participant_id=participant.id,
            participant_user_id=participant.user_id,
        )

    async def resolve(self, raw_key_or_token: Optional[str]) -> Optional[SessionLookup]:
        """Try the value as an ASK key, then as an invite token."""
        lookup = await self.find_by_key(raw_key_or_token)
        if lookup is not None:
            return lookup
        return await self.find_by_token(raw_key_or_token)
