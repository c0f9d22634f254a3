"""
Tests for the context HTTP endpoints and the ask_context command.
"""
import json
import uuid
from io import StringIO
from unittest.mock import AsyncMock, patch

from django.contrib.auth.models import User
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework_simplejwt.tokens import RefreshToken

from apps.asks.models import ConversationPlan, ConversationPlanStep, ConversationThread, PlanStepStatus
from apps.common.exceptions import StorageUnavailable

from .helpers import make_message, make_participant, make_profile, make_session


class AskContextViewTest(TestCase):

    def setUp(self):
        self.session = make_session(key="team-2024", conversation_mode='individual_parallel')
        self.alice = make_profile(full_name="Alice")
        self.participant = make_participant(self.session, user=self.alice, invite_token="inv-alice-0001")
        make_message(self.session, "hello", 0, user=self.alice)

    def test_context_by_key(self):
        response = self.client.get('/api/asks/team-2024/context/')

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['ask_session']['key'], "team-2024")
        self.assertEqual(body['matched_by'], 'key')
        self.assertIsNone(body['participant_id'])
        self.assertEqual([p['name'] for p in body['participants']], ["Alice"])
        self.assertEqual(body['messages'][0]['content'], "hello")
        self.assertIn('plan_step_id', body['messages'][0])
        self.assertIsNone(body['conversation_thread'])

    def test_response_carries_correlation_id(self):
        response = self.client.get('/api/asks/team-2024/context/', HTTP_X_CORRELATION_ID="corr-123")
        self.assertEqual(response['X-Correlation-ID'], "corr-123")

    def test_case_mismatch_key(self):
        response = self.client.get('/api/asks/TEAM-2024/context/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['matched_by'], 'fuzzy_key')

    def test_malformed_key(self):
        response = self.client.get('/api/asks/ab/context/')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['code'], 'malformed_ask_key')

    def test_unknown_key(self):
        response = self.client.get('/api/asks/no-such-ask/context/')
        self.assertEqual(response.status_code, 404)

    def test_post_not_allowed(self):
        response = self.client.post('/api/asks/team-2024/context/')
        self.assertEqual(response.status_code, 405)

    def test_invite_token_header_sets_requester(self):
        response = self.client.get('/api/asks/team-2024/context/', HTTP_X_INVITE_TOKEN="inv-alice-0001")

        self.assertEqual(response.status_code, 200)
        thread = ConversationThread.objects.get(ask_session=self.session)
        self.assertEqual(thread.user_id, self.alice.id)
        self.assertEqual(response.json()['conversation_thread']['id'], str(thread.id))
        self.assertEqual(response.json()['participant_id'], str(self.participant.id))

    def test_invite_token_from_other_session_is_forbidden(self):
        other = make_session(key="other-ask")
        make_participant(other, invite_token="inv-other-0001")

        response = self.client.get('/api/asks/team-2024/context/', HTTP_X_INVITE_TOKEN="inv-other-0001")

        self.assertEqual(response.status_code, 403)
        self.assertFalse(ConversationThread.objects.exists())

    def test_unknown_invite_token_is_forbidden(self):
        response = self.client.get('/api/asks/team-2024/context/', HTTP_X_INVITE_TOKEN="inv-nobody")
        self.assertEqual(response.status_code, 403)

    def test_jwt_bearer_maps_to_profile(self):
        user = User.objects.create_user(username="bob", email="bob@example.com", password="secret-pass")
        access = str(RefreshToken.for_user(user).access_token)

        response = self.client.get('/api/asks/team-2024/context/', HTTP_AUTHORIZATION=f"Bearer {access}")

        self.assertEqual(response.status_code, 200)
        thread = ConversationThread.objects.get(ask_session=self.session)
        self.assertEqual(thread.user_id, user.profile.id)

    def test_invalid_jwt_is_anonymous(self):
        response = self.client.get('/api/asks/team-2024/context/', HTTP_AUTHORIZATION="Bearer not-a-jwt")

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()['conversation_thread'])

    @patch('apps.asks.views.ContextAssembler.assemble', new_callable=AsyncMock)
    def test_storage_failure_is_503(self, mock_assemble):
        mock_assemble.side_effect = StorageUnavailable()

        response = self.client.get('/api/asks/team-2024/context/')

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['code'], 'storage_unavailable')

    def test_context_by_token(self):
        response = self.client.get('/api/asks/token/inv-alice-0001/context/')

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['matched_by'], 'token')
        self.assertEqual(body['participant_id'], str(self.participant.id))
        self.assertEqual(body['conversation_thread']['user_id'], str(self.alice.id))

    def test_context_by_unknown_token(self):
        response = self.client.get('/api/asks/token/inv-nobody/context/')
        self.assertEqual(response.status_code, 404)


class AskContextCommandTest(TestCase):

    def setUp(self):
        self.session = make_session(key="team-2024", conversation_mode='collaborative')
        self.profile = make_profile(full_name="Dana")
        self.participant = make_participant(self.session, user=self.profile, invite_token="inv-dana-0001")

    def _run(self, *args):
        out = StringIO()
        call_command('ask_context', *args, stdout=out)
        return json.loads(out.getvalue())

    def test_prints_context_json(self):
        payload = self._run("team-2024")

        self.assertEqual(payload['ask_session']['key'], "team-2024")
        self.assertEqual(payload['participants'][0]['name'], "Dana")
        self.assertTrue(payload['conversation_thread']['is_shared'])

    def test_token_and_profile_arguments(self):
        self.assertEqual(self._run("inv-dana-0001")['matched_by'], 'token')
        self.assertEqual(self._run("team-2024", "--profile", str(self.profile.id))['matched_by'], 'key')

    def test_unknown_key(self):
        with self.assertRaises(CommandError):
            call_command('ask_context', "missing-ask", stdout=StringIO())

    def test_invalid_profile(self):
        with self.assertRaises(CommandError):
            call_command('ask_context', "team-2024", "--profile", "not-a-uuid", stdout=StringIO())

    def test_unknown_profile(self):
        with self.assertRaises(CommandError):
            call_command('ask_context', "team-2024", "--profile", str(uuid.uuid4()), stdout=StringIO())

        self.assertFalse(ConversationThread.objects.exists())

    def test_key_outside_route_format_resolves(self):
        make_session(key="Q1 review")

        payload = self._run("Q1 review")

        self.assertEqual(payload['ask_session']['key'], "Q1 review")
        self.assertEqual(payload['matched_by'], 'key')

    def test_token_reports_participant(self):
        payload = self._run("inv-dana-0001")

        self.assertEqual(payload['participant_id'], str(self.participant.id))
        self.assertIsNone(self._run("team-2024")['participant_id'])

    def test_plan_current_step_and_progress(self):
        thread = ConversationThread.objects.create(ask_session=self.session, is_shared=True)
        plan = ConversationPlan.objects.create(
            conversation_thread=thread,
            title="Discovery",
            total_steps=4,
            completed_steps=1,
        )
        ConversationPlanStep.objects.create(
            plan=plan, step_identifier='step_1', step_order=1, title="Context", status=PlanStepStatus.COMPLETED
        )
        ConversationPlanStep.objects.create(
            plan=plan, step_identifier='step_2', step_order=2, title="Pain points", status=PlanStepStatus.ACTIVE
        )

        plan_payload = self._run("team-2024")['conversation_plan']

        self.assertEqual(plan_payload['current_step']['step_identifier'], 'step_2')
        self.assertEqual(plan_payload['current_step']['title'], "Pain points")
        self.assertEqual(plan_payload['progress'], "Plan progress: 1/4 steps (25%)")
