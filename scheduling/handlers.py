"""
DRF exception handler rendering every error as ``{"error": {...}}``.
"""

import logging

from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import SchedulingError

logger = logging.getLogger(__name__)


def scheduling_exception_handler(exc, context):
    """
    Render domain errors with their status code and details; wrap DRF's own
    errors (serializer validation, 404, auth) in the same envelope.
    """
    view = context.get('view')
    view_name = type(view).__name__ if view is not None else None

    if isinstance(exc, SchedulingError):
        log = logger.error if exc.retryable else logger.warning
        log(
            "scheduling_request_failed",
            extra={
                'view': view_name,
                'error_type': type(exc).__name__,
                'code': exc.code,
                'status_code': exc.status_code,
                'details': exc.details,
            },
        )
        return Response({'error': exc.to_dict()}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, drf_exceptions.ValidationError):
        error = {
            'message': 'Invalid request',
            'code': 'invalid',
            'fields': response.data,
        }
    else:
        detail = response.data.get('detail', '') if isinstance(response.data, dict) else ''
        error = {
            'message': str(detail),
            'code': getattr(detail, 'code', None) or 'error',
        }

    response.data = {'error': error}
    return response
