"""Domain error taxonomy shared by the registrar services.

Services raise these; the DRF exception handler below renders them as JSON.
"""
import logging
from typing import Any, List, Optional

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class RegistrarError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Request could not be processed'

    def __init__(self, message: Optional[str] = None, conflicts: Optional[List[Any]] = None):
        self.message = message or self.default_message
        self.conflicts = conflicts
        super().__init__(self.message)


class ValidationError(RegistrarError):
    """Malformed or missing fields, or a subject outside the student's department."""
    default_message = 'Invalid request'


class NotFoundError(RegistrarError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class AuthorizationError(RegistrarError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Not authorized'


class ConflictError(RegistrarError):
    """Schedule overlap, duplicate enrollment or duplicate calendar entry."""
    default_message = 'Conflict detected'

    def __init__(self, message: Optional[str] = None, conflicts: Optional[List[Any]] = None):
        super().__init__(message, conflicts=conflicts if conflicts is not None else [])


class StateError(RegistrarError):
    """Operation not allowed in the current lifecycle state or calendar window."""
    default_message = 'Operation not allowed in the current state'


def custom_exception_handler(exc, context):
    if isinstance(exc, RegistrarError):
        data = {
            'message': exc.message,
            'detail': exc.message,
            'status_code': exc.status_code,
        }
        if exc.conflicts is not None:
            data['conflicts'] = exc.conflicts
        return Response(data, status=exc.status_code)

    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(response.data, dict):
            detail = response.data.get('detail')
            response.data['message'] = str(detail) if detail is not None else 'Invalid request'
            response.data['status_code'] = response.status_code
        else:
            response.data = {
                'message': 'Invalid request',
                'errors': response.data,
                'status_code': response.status_code,
            }
        return response

    view = context.get('view')
    logger.exception('Unhandled error in %s', view.__class__.__name__ if view is not None else 'unknown view')
    return Response(
        {'message': 'Server error', 'status_code': status.HTTP_500_INTERNAL_SERVER_ERROR},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
