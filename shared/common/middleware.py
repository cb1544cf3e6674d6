# shared/common/middleware.py
"""
Request tracing middleware
"""

import logging
import time
import uuid
from typing import Callable

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = 'X-Request-ID'
SILENT_PATH_PREFIX = '/health/'


def client_ip(request: HttpRequest) -> str:
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')


class RequestIDMiddleware:
    """
    Tags each request with an ID, reusing the caller's X-Request-ID when
    present, and echoes it back on the response.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request.request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        response = self.get_response(request)
        response[REQUEST_ID_HEADER] = request.request_id
        return response


class LoggingMiddleware:
    """Logs one line per API call; health probes are not logged."""

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if request.path.startswith(SILENT_PATH_PREFIX):
            return self.get_response(request)

        started = time.perf_counter()
        response = self.get_response(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.path} -> {response.status_code} ({duration_ms}ms)",
            extra={
                'request_id': getattr(request, 'request_id', None),
                'status_code': response.status_code,
                'duration_ms': duration_ms,
                'ip_address': client_ip(request),
            }
        )
        return response
