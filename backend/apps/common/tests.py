"""
Tests for logging helpers and request logging middleware
"""
import logging
import uuid

from django.http import HttpResponse
from django.test import RequestFactory, SimpleTestCase

from apps.common.correlation import get_correlation_id, set_correlation_id
from apps.common.logging_utils import CorrelationIdFilter, build_log_extra, mask_token
from apps.common.middleware.request_logging import RequestLoggingMiddleware


class LoggingUtilsTests(SimpleTestCase):

    def tearDown(self):
        set_correlation_id(None)

    def test_mask_token(self):
        self.assertIsNone(mask_token(None))
        self.assertEqual(mask_token("short"), "*****")
        self.assertEqual(mask_token("inv-0123456789abcdef"), "inv-0123...")

    def test_build_log_extra_stringifies_ids(self):
        session_id = uuid.uuid4()
        extra = build_log_extra(ask_session_id=session_id, duration_ms=1.5, thread_id=None)

        self.assertEqual(extra['ask_session_id'], str(session_id))
        self.assertEqual(extra['duration_ms'], 1.5)
        self.assertIsNone(extra['thread_id'])
        self.assertNotIn('correlation_id', extra)

    def test_build_log_extra_picks_up_correlation_id(self):
        set_correlation_id("corr-1")
        self.assertEqual(build_log_extra()['correlation_id'], "corr-1")
        self.assertEqual(build_log_extra(correlation_id="explicit")['correlation_id'], "explicit")

    def test_filter_sets_correlation_id(self):
        set_correlation_id("corr-2")
        record = logging.LogRecord("apps", logging.INFO, __file__, 1, "event", None, None)

        self.assertTrue(CorrelationIdFilter().filter(record))
        self.assertEqual(record.correlation_id, "corr-2")


class RequestLoggingMiddlewareTests(SimpleTestCase):

    def setUp(self):
        self.factory = RequestFactory()

    def test_propagates_correlation_header(self):
        middleware = RequestLoggingMiddleware(lambda request: HttpResponse("ok"))
        request = self.factory.get('/api/asks/team-2024/context/', HTTP_X_CORRELATION_ID="corr-abc")

        with self.assertLogs('apps.common.middleware.request_logging', level='INFO') as logs:
            response = middleware(request)

        self.assertEqual(response['X-Correlation-ID'], "corr-abc")
        self.assertEqual(request.correlation_id, "corr-abc")
        self.assertIn("request_completed", logs.output[0])
        self.assertIsNone(get_correlation_id())

    def test_generates_correlation_id(self):
        middleware = RequestLoggingMiddleware(lambda request: HttpResponse("ok"))

        with self.assertLogs('apps.common.middleware.request_logging', level='INFO'):
            response = middleware(self.factory.get('/'))

        self.assertTrue(response['X-Correlation-ID'])

    def test_logs_and_reraises_failures(self):
        def boom(request):
            raise RuntimeError("view exploded")

        middleware = RequestLoggingMiddleware(boom)

        with self.assertLogs('apps.common.middleware.request_logging', level='ERROR') as logs:
            with self.assertRaises(RuntimeError):
                middleware(self.factory.get('/'))

        self.assertIn("request_failed", logs.output[0])
