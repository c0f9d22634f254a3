"""
Thread mode classification: does an ASK session share one conversation
thread between all participants, or give each participant their own?

Two generations of configuration decide it, in this order:

    1. conversation_mode (current field)
    2. audience_scope + response_mode (legacy pair)
    3. UNCONFIGURED_THREAD_SHARED when neither is set
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .models import AudienceScope, ConversationMode, ResponseMode

# Modes where each participant talks to the agent in isolation
INDIVIDUAL_MODES = frozenset({
    ConversationMode.INDIVIDUAL_PARALLEL.value,
    ConversationMode.CONSULTANT.value,
})

# Sessions with no conversation_mode and no legacy fields get individual
# threads. Override per deployment with ASK_UNCONFIGURED_THREAD_SHARED.
UNCONFIGURED_THREAD_SHARED = False


@dataclass(frozen=True)
class ThreadModeConfig:
    conversation_mode: Optional[str] = None
    audience_scope: Optional[str] = None
    response_mode: Optional[str] = None

    @classmethod
    def from_session(cls, session) -> ThreadModeConfig:
        return cls(
            conversation_mode=getattr(session, 'conversation_mode', None),
            audience_scope=getattr(session, 'audience_scope', None),
            response_mode=getattr(session, 'response_mode', None),
        )

    @property
    def is_configured(self) -> bool:
        return any(
            _normalise(value)
            for value in (self.conversation_mode, self.audience_scope, self.response_mode)
        )


def _normalise(value) -> str:
    if not isinstance(value, str):
        return ''
    return value.strip()


def is_shared_thread(
    config: Optional[ThreadModeConfig],
    default: bool = UNCONFIGURED_THREAD_SHARED,
) -> bool:
    """
    Decide whether a session uses one shared thread.

    Unknown conversation modes resolve to shared. Never raises.
    """
    if config is None or not config.is_configured:
        return default

    mode = _normalise(config.conversation_mode)
    if mode:
        return mode not in INDIVIDUAL_MODES

    return (
        _normalise(config.audience_scope) == AudienceScope.GROUP
        and _normalise(config.response_mode) == ResponseMode.COLLECTIVE
    )
