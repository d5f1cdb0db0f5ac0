import logging
import time
from typing import Callable

from django.conf import settings
from django.http import HttpRequest, HttpResponse

logger = logging.getLogger('django.request')

MUTATING_METHODS = ('POST', 'PUT', 'PATCH', 'DELETE')


def _username(request: HttpRequest) -> str:
    user = getattr(request, 'user', None)
    if user is not None and getattr(user, 'is_authenticated', False):
        return getattr(user, 'username', 'anonymous')
    return 'anonymous'


class SlowRequestLoggingMiddleware:
    """Log API requests that are slow, and failed writes against the registrar API.

    Enrollment, payment and schedule writes are not retried automatically, so a
    rejected write is logged with enough context for support to find it.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest):
        if not getattr(settings, 'SLOW_REQUEST_LOG_ENABLED', True):
            return self.get_response(request)

        threshold_ms = int(getattr(settings, 'SLOW_REQUEST_LOG_MS', 1200))
        started = time.perf_counter()
        response = self.get_response(request)
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        status_code = getattr(response, 'status_code', 0)

        if elapsed_ms >= threshold_ms:
            logger.warning(
                'SLOW_REQUEST method=%s path=%s status=%s duration_ms=%.2f user=%s',
                request.method,
                request.path,
                status_code,
                elapsed_ms,
                _username(request),
            )
        elif request.method in MUTATING_METHODS and request.path.startswith('/api/') and status_code >= 400:
            logger.info(
                'REJECTED_WRITE method=%s path=%s status=%s user=%s',
                request.method,
                request.path,
                status_code,
                _username(request),
            )
        return response
