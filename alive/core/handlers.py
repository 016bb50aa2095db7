"""
Global error handler.

Registered as ``REST_FRAMEWORK['EXCEPTION_HANDLER']``; every exception raised
inside an API view ends up here and is rendered as::

    {"success": false, "error": {"message": ..., "status_code": ...}}
"""
import logging
import traceback

from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.db import IntegrityError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import set_rollback

from .errors import ConflictError, ForbiddenError, NotFoundError

logger = logging.getLogger('alive.errors')


def first_error_message(detail):
    """Pull the first human readable message out of a DRF error detail"""
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = first_error_message(value)
            if message is None:
                continue
            if field in ('non_field_errors', 'detail'):
                return message
            return f"{field}: {message}"
        return None
    if isinstance(detail, (list, tuple)):
        for value in detail:
            message = first_error_message(value)
            if message is not None:
                return message
        return None
    return str(detail)


def build_error_payload(message, status_code, details=None, exc=None):
    error = {
        'message': message,
        'status_code': status_code,
    }
    if details:
        error['details'] = details
    if exc is not None and settings.DEBUG:
        error['stack'] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return {'success': False, 'error': error}


def _translate(exc):
    """Map framework and database exceptions onto the typed API errors"""
    if isinstance(exc, Http404):
        return NotFoundError(str(exc) or 'Resource not found')
    if isinstance(exc, DjangoPermissionDenied):
        return ForbiddenError(str(exc) or 'Forbidden')
    if isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error: {exc}")
        return ConflictError('Resource already exists or conflicts with existing data')
    return exc


def api_exception_handler(exc, context):
    exc = _translate(exc)
    view = context.get('view')
    view_name = view.__class__.__name__ if view is not None else 'unknown'

    if not isinstance(exc, exceptions.APIException):
        logger.error(f"Unhandled error in {view_name}: {exc}", exc_info=exc)
        set_rollback()
        payload = build_error_payload('Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR, exc=exc)
        return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    headers = {}
    auth_header = getattr(exc, 'auth_header', None)
    if auth_header:
        headers['WWW-Authenticate'] = auth_header
    wait = getattr(exc, 'wait', None)
    if wait:
        headers['Retry-After'] = '%d' % wait

    details = None
    if isinstance(exc, exceptions.NotAuthenticated):
        message = 'No authentication token provided'
    elif isinstance(exc, exceptions.ParseError):
        message = 'Invalid JSON'
    elif isinstance(exc, exceptions.ValidationError):
        message = first_error_message(exc.detail) or 'Validation failed'
        if isinstance(exc.detail, dict):
            details = exc.detail
    else:
        message = first_error_message(exc.detail) or 'Internal server error'

    status_code = exc.status_code
    if status_code >= 500:
        logger.error(f"{view_name} failed with {status_code}: {message}", exc_info=exc)
    else:
        logger.warning(f"{view_name} returned {status_code}: {message}")

    set_rollback()
    payload = build_error_payload(message, status_code, details=details, exc=exc if status_code >= 500 else None)
    return Response(payload, status=status_code, headers=headers)
