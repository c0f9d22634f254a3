"""
Tests for thread mode classification.
"""
import uuid
from unittest.mock import MagicMock

from django.test import SimpleTestCase, override_settings

from apps.asks.models import ConversationMode
from apps.asks.modes import ThreadModeConfig, is_shared_thread
from apps.asks.records import AskSessionRecord
from apps.asks.threads import ThreadResolver


class IsSharedThreadTest(SimpleTestCase):

    def test_conversation_modes(self):
        expected = {
            ConversationMode.INDIVIDUAL_PARALLEL: False,
            ConversationMode.CONSULTANT: False,
            ConversationMode.COLLABORATIVE: True,
            ConversationMode.GROUP_REPORTER: True,
        }
        for mode, shared in expected.items():
            with self.subTest(mode=mode):
                self.assertEqual(is_shared_thread(ThreadModeConfig(conversation_mode=mode.value)), shared)

    def test_unknown_mode_is_shared(self):
        self.assertTrue(is_shared_thread(ThreadModeConfig(conversation_mode='workshop')))

    def test_conversation_mode_wins_over_legacy_fields(self):
        individual = ThreadModeConfig(
            conversation_mode='individual_parallel',
            audience_scope='group',
            response_mode='collective',
        )
        collaborative = ThreadModeConfig(
            conversation_mode='collaborative',
            audience_scope='individual',
            response_mode='individual',
        )
        self.assertFalse(is_shared_thread(individual))
        self.assertTrue(is_shared_thread(collaborative))

    def test_legacy_combinations(self):
        cases = [
            ('group', 'collective', True),
            ('group', 'individual', False),
            ('individual', 'collective', False),
            ('individual', 'individual', False),
            ('group', None, False),
            (None, 'collective', False),
        ]
        for audience_scope, response_mode, shared in cases:
            with self.subTest(audience_scope=audience_scope, response_mode=response_mode):
                config = ThreadModeConfig(audience_scope=audience_scope, response_mode=response_mode)
                self.assertEqual(is_shared_thread(config), shared)

    def test_unconfigured_uses_default(self):
        for config in (None, ThreadModeConfig(), ThreadModeConfig(conversation_mode='  ', audience_scope='')):
            with self.subTest(config=config):
                self.assertFalse(is_shared_thread(config))
                self.assertTrue(is_shared_thread(config, default=True))

    def test_from_session(self):
        session = AskSessionRecord(
            id=uuid.uuid4(),
            key='team-2024',
            audience_scope='group',
            response_mode='collective',
        )
        config = ThreadModeConfig.from_session(session)
        self.assertIsNone(config.conversation_mode)
        self.assertTrue(config.is_configured)
        self.assertTrue(is_shared_thread(config))


class ResolverDefaultTest(SimpleTestCase):
    """The unconfigured default is a deployment setting."""

    def test_explicit_argument(self):
        resolver = ThreadResolver(MagicMock(), unconfigured_shared=True)
        self.assertTrue(resolver.is_shared(ThreadModeConfig()))

    @override_settings(ASK_UNCONFIGURED_THREAD_SHARED=True)
    def test_setting_override(self):
        self.assertTrue(ThreadResolver(MagicMock()).is_shared(ThreadModeConfig()))

    @override_settings(ASK_UNCONFIGURED_THREAD_SHARED=False)
    def test_setting_default(self):
        resolver = ThreadResolver(MagicMock())
        self.assertFalse(resolver.is_shared(ThreadModeConfig()))
        # A configured session ignores the default
        self.assertTrue(resolver.is_shared(ThreadModeConfig(conversation_mode='collaborative')))
