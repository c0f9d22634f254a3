"""
Shared fixtures for asks tests.
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from itertools import count

from apps.asks.models import AskParticipant, AskSession, Message, SenderType
from apps.auth_app.models import Profile

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=dt_timezone.utc)

_sequence = count(1)


def at(minutes: int) -> datetime:
    """A fixed timestamp, `minutes` after BASE_TIME."""
    return BASE_TIME + timedelta(minutes=minutes)


def make_session(key=None, **kwargs) -> AskSession:
    defaults = {
        'question': "How should we prioritise the roadmap?",
    }
    defaults.update(kwargs)
    return AskSession.objects.create(key=key or f"ask-{next(_sequence)}", **defaults)


def make_profile(**kwargs) -> Profile:
    defaults = {
        'email': f"person{next(_sequence)}@example.com",
    }
    defaults.update(kwargs)
    return Profile.objects.create(**defaults)


def make_participant(session, user=None, joined_minutes=0, **kwargs) -> AskParticipant:
    return AskParticipant.objects.create(
        ask_session=session,
        user=user,
        joined_at=at(joined_minutes),
        **kwargs,
    )


def make_message(session, content, minutes, thread_id=None, user=None, sender_type=SenderType.USER, **kwargs) -> Message:
    return Message.objects.create(
        ask_session=session,
        conversation_thread_id=thread_id,
        user=user,
        sender_type=sender_type,
        content=content,
        created_at=at(minutes),
        **kwargs,
    )
