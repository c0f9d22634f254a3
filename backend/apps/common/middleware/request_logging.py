import time
import uuid
from typing import Callable, Optional

from asgiref.sync import iscoroutinefunction, markcoroutinefunction
from django.http import HttpRequest, HttpResponse

from apps.common.correlation import set_correlation_id
from apps.common.logging_utils import build_log_extra, get_logger


logger = get_logger(__name__)


def _get_user_id(request: HttpRequest, is_async: bool = False) -> Optional[int]:
    # The lazy auth user hits the database; never force it from async code
    if is_async:
        return None
    user = getattr(request, "user", None)
    if user and getattr(user, "is_authenticated", False):
        return user.id
    return None


class RequestLoggingMiddleware:
    """
    Logs one line per request and propagates X-Correlation-ID.

    Works for both sync views (admin) and the async ASK context views,
    so the correlation id set here is visible to the context assembler's
    log lines for the same request.
    """
    sync_capable = True
    async_capable = True

    def __init__(self, get_response: Callable) -> None:
        self.get_response = get_response
        self.is_async = iscoroutinefunction(get_response)
        if self.is_async:
            markcoroutinefunction(self)

    def __call__(self, request: HttpRequest):
        if self.is_async:
            return self.__acall__(request)

        start_time, correlation_id = self._begin(request)
        try:
            response = self.get_response(request)
        except Exception:
            self._log_failure(request, correlation_id, start_time)
            raise
        return self._finish(request, response, correlation_id, start_time)

    async def __acall__(self, request: HttpRequest) -> HttpResponse:
        start_time, correlation_id = self._begin(request)
        try:
            response = await self.get_response(request)
        except Exception:
            self._log_failure(request, correlation_id, start_time)
            raise
        return self._finish(request, response, correlation_id, start_time)

    def _begin(self, request: HttpRequest):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        request.correlation_id = correlation_id
        set_correlation_id(correlation_id)
        return time.monotonic(), correlation_id

    def _log_failure(self, request: HttpRequest, correlation_id: str, start_time: float) -> None:
        duration_ms = (time.monotonic() - start_time) * 1000.0
        extra = build_log_extra(
            correlation_id=correlation_id,
            method=request.method,
            path=request.path,
            status_code=500,
            duration_ms=round(duration_ms, 2),
            user_id=_get_user_id(request, self.is_async),
        )
        logger.exception("request_failed", extra=extra)
        set_correlation_id(None)

    def _finish(
        self,
        request: HttpRequest,
        response: HttpResponse,
        correlation_id: str,
        start_time: float,
    ) -> HttpResponse:
        duration_ms = (time.monotonic() - start_time) * 1000.0
        extra = build_log_extra(
            correlation_id=correlation_id,
            method=request.method,
            path=request.path,
            status_code=getattr(response, "status_code", None),
            duration_ms=round(duration_ms, 2),
            user_id=_get_user_id(request, self.is_async),
        )
        logger.info("request_completed", extra=extra)
        response["X-Correlation-ID"] = correlation_id
        set_correlation_id(None)
        return response
