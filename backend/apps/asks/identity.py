"""
Display-name resolution for participants and message senders.

One priority chain backs both the participant roster and message sender
names, so every caller (chat stream, voice agent, admin harness) shows
the same person under the same name:

    1. explicit name on the record (participant_name / metadata.senderName)
    2. "Agent" for AI messages (messages only)
    3. user.full_name
    4. user.first_name + user.last_name
    5. user.email
    6. "Participant {index + 1}"

Every candidate is trimmed; blank candidates are skipped.
"""
from typing import Optional

from .models import SenderType
from .records import (
    ConversationMessageSummary,
    ConversationParticipantSummary,
    MessageRecord,
    ParticipantRecord,
    UserRecord,
)

AGENT_SENDER_NAME = 'Agent'


def _clean(value: Optional[str]) -> str:
    if not isinstance(value, str):
        return ''
    return value.strip()


def _name_from_user(user: Optional[UserRecord]) -> str:
    if user is None:
        return ''

    full_name = _clean(user.full_name)
    if full_name:
        return full_name

    parts = [part for part in (_clean(user.first_name), _clean(user.last_name)) if part]
    if parts:
        return ' '.join(parts)

    return _clean(user.email)


def resolve_display_name(
    explicit_name: Optional[str],
    user: Optional[UserRecord],
    fallback_index: int,
    sender_type: Optional[str] = None,
) -> str:
    """
    Resolve the name to display for a participant or a message sender.

    Args:
        explicit_name: Name stored on the record itself, if any
        user: Linked profile record, if any
        fallback_index: Zero-based position, used for "Participant N"
        sender_type: Message sender type; None for participants

    Returns:
        A non-empty display name
    """
    name = _clean(explicit_name)
    if name:
        return name

    if sender_type == SenderType.AI:
        return AGENT_SENDER_NAME

    name = _name_from_user(user)
    if name:
        return name

    return f"Participant {fallback_index + 1}"


def build_participant_display_name(
    participant: ParticipantRecord,
    user: Optional[UserRecord],
    index: int,
) -> str:
    return resolve_display_name(participant.participant_name, user, index)


def build_message_sender_name(
    message: MessageRecord,
    user: Optional[UserRecord],
    index: int,
) -> str:
    sender_name = message.metadata.get('senderName')
    return resolve_display_name(
        sender_name if isinstance(sender_name, str) else None,
        user,
        index,
        sender_type=message.sender_type,
    )


def build_participant_summary(
    participant: ParticipantRecord,
    user: Optional[UserRecord],
    index: int,
) -> ConversationParticipantSummary:
    return ConversationParticipantSummary(
        name=build_participant_display_name(participant, user, index),
        role=participant.role or None,
        description=user.description if user else None,
    )


def build_message_summary(
    message: MessageRecord,
    user: Optional[UserRecord],
    index: int,
) -> ConversationMessageSummary:
    return ConversationMessageSummary(
        id=message.id,
        sender_type=message.sender_type or SenderType.USER.value,
        sender_name=build_message_sender_name(message, user, index),
        content=message.content,
        timestamp=message.created_at,
        plan_step_id=message.plan_step_id,
    )
