"""
Tests for locating sessions by key and invite token.
"""
from datetime import timedelta
from unittest.mock import patch

from asgiref.sync import async_to_sync
from django.db import OperationalError
from django.test import SimpleTestCase, TestCase

from apps.asks.locator import MatchedBy, SessionLocator, is_valid_ask_key
from apps.asks.models import AskSession
from apps.asks.store import ConversationStore
from apps.common.exceptions import StorageUnavailable

from .helpers import BASE_TIME, make_participant, make_profile, make_session


class AskKeyFormatTest(SimpleTestCase):

    def test_key_table(self):
        cases = [
            ("team-2024", True),
            ("Team.Q1_review", True),
            ("  team-2024  ", True),
            ("abc", True),
            ("ab", False),
            ("---", False),
            ("._-", False),
            ("te%m", False),
            ("team 2024", False),
            ("team/2024", False),
            ("", False),
            ("   ", False),
            (None, False),
        ]
        for key, valid in cases:
            with self.subTest(key=key):
                self.assertEqual(is_valid_ask_key(key), valid)


class SessionLocatorTest(TestCase):

    def setUp(self):
        self.store = ConversationStore()
        self.locator = SessionLocator(self.store, fuzzy_match=True)

    def _by_key(self, key, locator=None):
        return async_to_sync((locator or self.locator).find_by_key)(key)

    def test_exact_key(self):
        session = make_session(key="Team-2024")

        lookup = self._by_key("Team-2024")

        self.assertEqual(lookup.session.id, session.id)
        self.assertEqual(lookup.matched_by, MatchedBy.KEY)
        self.assertIsNone(lookup.participant_id)

    def test_case_mismatch_falls_back_to_insensitive_match(self):
        session = make_session(key="Team-2024")

        with self.assertLogs('apps.asks.locator', level='INFO'):
            lookup = self._by_key("team-2024")

        self.assertEqual(lookup.session.id, session.id)
        self.assertEqual(lookup.matched_by, MatchedBy.FUZZY_KEY)

    def test_insensitive_match_prefers_most_recent(self):
        older = make_session(key="Team-2024")
        newer = make_session(key="TEAM-2024")
        AskSession.objects.filter(id=older.id).update(created_at=BASE_TIME)
        AskSession.objects.filter(id=newer.id).update(created_at=BASE_TIME + timedelta(days=1))

        first = self._by_key("team-2024")
        second = self._by_key("team-2024")

        self.assertEqual(first.session.id, newer.id)
        self.assertEqual(second.session.id, newer.id)

    def test_fuzzy_match_can_be_disabled(self):
        make_session(key="Team-2024")
        strict = SessionLocator(self.store, fuzzy_match=False)

        self.assertIsNone(self._by_key("team-2024", strict))
        self.assertIsNotNone(self._by_key("Team-2024", strict))

    def test_underscore_is_not_a_wildcard(self):
        make_session(key="a_c")

        self.assertIsNone(self._by_key("abc"))
        self.assertEqual(self._by_key("A_C").session.key, "a_c")

    def test_blank_key_is_not_found(self):
        make_session(key="team-2024")
        for key in (None, "", "   "):
            with self.subTest(key=key):
                self.assertIsNone(self._by_key(key))

    def test_any_stored_key_resolves(self):
        resolve = async_to_sync(self.locator.resolve)
        for key in ("ab", "Q1 review", "équipe-1"):
            with self.subTest(key=key):
                session = make_session(key=key)

                lookup = resolve(key)

                self.assertEqual(lookup.session.id, session.id)
                self.assertEqual(lookup.matched_by, MatchedBy.KEY)

    def test_percent_is_not_a_wildcard(self):
        make_session(key="team")

        self.assertIsNone(self._by_key("te%m"))

    def test_unknown_key(self):
        self.assertIsNone(self._by_key("nobody-home"))

    def test_invite_token_resolves_session_and_participant_in_one_query(self):
        session = make_session(key="team-2024")
        profile = make_profile()
        participant = make_participant(session, user=profile, invite_token="tok_abcdef123456")

        with self.assertNumQueries(1):
            lookup = async_to_sync(self.locator.find_by_token)("tok_abcdef123456")

        self.assertEqual(lookup.session.id, session.id)
        self.assertEqual(lookup.matched_by, MatchedBy.TOKEN)
        self.assertEqual(lookup.participant_id, participant.id)
        self.assertEqual(lookup.participant_user_id, profile.id)

    def test_unknown_or_blank_token(self):
        find = async_to_sync(self.locator.find_by_token)
        self.assertIsNone(find(""))
        self.assertIsNone(find(None))
        with self.assertLogs('apps.asks.locator', level='INFO') as logs:
            self.assertIsNone(find("tok_missing_value"))
        # Only a prefix of the token reaches the logs
        self.assertNotIn("tok_missing_value", logs.output[0])

    def test_resolve_tries_key_then_token(self):
        by_key = make_session(key="team-2024")
        by_token = make_session(key="other-ask")
        make_participant(by_token, invite_token="inv-7f3a9c")

        resolve = async_to_sync(self.locator.resolve)

        self.assertEqual(resolve("team-2024").session.id, by_key.id)
        token_lookup = resolve("inv-7f3a9c")
        self.assertEqual(token_lookup.session.id, by_token.id)
        self.assertEqual(token_lookup.matched_by, MatchedBy.TOKEN)
        self.assertIsNone(resolve("nothing-here"))

    def test_storage_failure_is_typed(self):
        with patch.object(AskSession.objects, 'filter', side_effect=OperationalError("connection refused")):
            with self.assertRaises(StorageUnavailable):
                self._by_key("team-2024")
