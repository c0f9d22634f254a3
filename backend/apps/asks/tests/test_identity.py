"""
Tests for display-name resolution.
"""
import uuid

from django.test import SimpleTestCase

from apps.asks.identity import (
    AGENT_SENDER_NAME,
    build_message_summary,
    build_participant_summary,
    resolve_display_name,
)
from apps.asks.records import MessageRecord, ParticipantRecord, UserRecord, normalise_metadata


def _user(**kwargs) -> UserRecord:
    return UserRecord(id=uuid.uuid4(), **kwargs)


def _message(**kwargs) -> MessageRecord:
    defaults = {
        'id': uuid.uuid4(),
        'ask_session_id': uuid.uuid4(),
        'content': "Hello",
    }
    defaults.update(kwargs)
    return MessageRecord(**defaults)


class ResolveDisplayNameTest(SimpleTestCase):
    """The priority chain shared by participants and messages."""

    def test_priority_table(self):
        full = _user(full_name="Grace Hopper", first_name="Grace", last_name="H", email="grace@example.com")
        split = _user(first_name="Ada", last_name="Lovelace", email="ada@example.com")
        first_only = _user(first_name="Linus", last_name="  ")
        email_only = _user(email="anon@example.com")
        empty = _user()

        cases = [
            # (explicit, user, index, sender_type, expected)
            ("Alice", full, 0, None, "Alice"),
            ("  Alice  ", full, 0, None, "Alice"),
            ("   ", full, 0, None, "Grace Hopper"),
            (None, full, 0, None, "Grace Hopper"),
            (None, split, 0, None, "Ada Lovelace"),
            (None, first_only, 0, None, "Linus"),
            (None, email_only, 0, None, "anon@example.com"),
            (None, empty, 2, None, "Participant 3"),
            (None, None, 0, None, "Participant 1"),
            (None, full, 0, 'ai', AGENT_SENDER_NAME),
            ("Facilitator", None, 0, 'ai', "Facilitator"),
            (None, full, 0, 'user', "Grace Hopper"),
        ]
        for explicit, user, index, sender_type, expected in cases:
            with self.subTest(explicit=explicit, expected=expected):
                self.assertEqual(resolve_display_name(explicit, user, index, sender_type), expected)

    def test_never_empty_and_deterministic(self):
        user = _user(full_name=" ", first_name="", email="")
        first = resolve_display_name("", user, 4)
        second = resolve_display_name("", user, 4)
        self.assertEqual(first, "Participant 5")
        self.assertEqual(first, second)


class SummaryBuilderTest(SimpleTestCase):

    def test_participant_summary_uses_profile_description(self):
        user = _user(full_name="Grace Hopper", description="Compiler pioneer")
        participant = ParticipantRecord(
            id=uuid.uuid4(),
            ask_session_id=uuid.uuid4(),
            role="Engineer",
            user_id=user.id,
        )

        summary = build_participant_summary(participant, user, 0)

        self.assertEqual(summary.name, "Grace Hopper")
        self.assertEqual(summary.role, "Engineer")
        self.assertEqual(summary.description, "Compiler pioneer")

    def test_participant_summary_without_profile(self):
        participant = ParticipantRecord(id=uuid.uuid4(), ask_session_id=uuid.uuid4())

        summary = build_participant_summary(participant, None, 1)

        self.assertEqual(summary.name, "Participant 2")
        self.assertIsNone(summary.role)
        self.assertIsNone(summary.description)

    def test_sender_name_from_metadata(self):
        message = _message(metadata=normalise_metadata({'senderName': "Room 4"}))
        summary = build_message_summary(message, _user(full_name="Grace Hopper"), 0)
        self.assertEqual(summary.sender_name, "Room 4")

    def test_sender_name_from_json_string_metadata(self):
        message = _message(metadata=normalise_metadata('{"senderName": "Zed"}'))
        self.assertEqual(build_message_summary(message, None, 0).sender_name, "Zed")

    def test_non_string_sender_name_is_ignored(self):
        message = _message(metadata=normalise_metadata({'senderName': 42}))
        summary = build_message_summary(message, _user(email="x@example.com"), 0)
        self.assertEqual(summary.sender_name, "x@example.com")

    def test_ai_message_is_agent(self):
        message = _message(sender_type='ai')
        summary = build_message_summary(message, None, 0)
        self.assertEqual(summary.sender_name, AGENT_SENDER_NAME)
        self.assertEqual(summary.sender_type, 'ai')

    def test_missing_sender_type_defaults_to_user(self):
        summary = build_message_summary(_message(sender_type=None), None, 0)
        self.assertEqual(summary.sender_type, 'user')

    def test_plan_step_id_always_present(self):
        step_id = uuid.uuid4()
        untied = build_message_summary(_message(), None, 0)
        tied = build_message_summary(_message(plan_step_id=step_id), None, 0)

        self.assertTrue(hasattr(untied, 'plan_step_id'))
        self.assertIsNone(untied.plan_step_id)
        self.assertEqual(tied.plan_step_id, step_id)


class NormaliseMetadataTest(SimpleTestCase):

    def test_shapes(self):
        self.assertEqual(dict(normalise_metadata({'a': 1})), {'a': 1})
        self.assertEqual(dict(normalise_metadata('{"a": 1}')), {'a': 1})
        self.assertEqual(dict(normalise_metadata('not json')), {})
        self.assertEqual(dict(normalise_metadata('[1, 2]')), {})
        self.assertEqual(dict(normalise_metadata(None)), {})
