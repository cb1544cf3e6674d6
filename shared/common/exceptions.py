# shared/common/exceptions.py
"""
Error envelope shared by the platform services.

Every failed request answers with::

    {"success": false, "error": {"code", "message", "details", "request_id"}}
"""

import logging
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

STATUS_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: 'VALIDATION_ERROR',
    status.HTTP_401_UNAUTHORIZED: 'UNAUTHORIZED',
    status.HTTP_403_FORBIDDEN: 'FORBIDDEN',
    status.HTTP_404_NOT_FOUND: 'NOT_FOUND',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'METHOD_NOT_ALLOWED',
    status.HTTP_429_TOO_MANY_REQUESTS: 'THROTTLED',
}


def error_payload(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the response body for a failed request."""
    return {
        'success': False,
        'error': {
            'code': code,
            'message': message,
            'details': details or {},
            'request_id': request_id,
        }
    }


class ServiceAPIException(APIException):
    """API exception carrying a machine-readable error code and details."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'An unexpected error occurred.'
    error_code = 'INTERNAL_ERROR'

    def __init__(
        self,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(detail=detail)
        self.error_code = error_code or self.error_code
        self.details = details or {}


class BadRequestException(ServiceAPIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request.'
    error_code = 'BAD_REQUEST'


class NotFoundException(ServiceAPIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'The requested resource was not found.'
    error_code = 'NOT_FOUND'


def custom_exception_handler(exc, context) -> Optional[Response]:
    """DRF exception handler that renders every error in the shared envelope."""
    request = context.get('request')
    request_id = getattr(request, 'request_id', None)

    response = exception_handler(exc, context)
    if response is not None:
        response.data = error_payload(
            code=getattr(exc, 'error_code', None) or STATUS_ERROR_CODES.get(response.status_code, 'ERROR'),
            message=_message_for(exc, response.data),
            details=_details_for(exc, response.data),
            request_id=request_id,
        )
        return response

    if isinstance(exc, DjangoValidationError):
        details = exc.message_dict if hasattr(exc, 'message_dict') else {'non_field_errors': exc.messages}
        return Response(
            error_payload('VALIDATION_ERROR', 'Validation error', details, request_id),
            status=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, Http404):
        return Response(
            error_payload('NOT_FOUND', str(exc) or 'Resource not found', request_id=request_id),
            status=status.HTTP_404_NOT_FOUND
        )

    logger.exception(
        f"Unhandled exception: {exc}",
        extra={'request_id': request_id, 'exception_type': type(exc).__name__}
    )
    message = str(exc) if settings.DEBUG else 'An unexpected error occurred. Please try again later.'
    details = {'type': type(exc).__name__} if settings.DEBUG else None
    return Response(
        error_payload('INTERNAL_ERROR', message, details, request_id),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def _message_for(exc, data) -> str:
    detail = getattr(exc, 'detail', data)
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail:
        return str(detail[0])
    if isinstance(detail, dict):
        return str(detail.get('detail', 'Validation error'))
    return str(detail)


def _details_for(exc, data) -> Dict[str, Any]:
    if getattr(exc, 'details', None):
        return exc.details
    # Serializer field errors
    if isinstance(data, dict) and 'detail' not in data:
        return data
    return {}
