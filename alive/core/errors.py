"""
Typed API errors.

Each class carries its HTTP status code; the global handler in
``alive.core.handlers`` turns any of them into the standard error envelope.
The DRF base classes are mixed in where DRF itself treats the status
specially (401 responses get a ``WWW-Authenticate`` header).
"""
from rest_framework import exceptions, status


class AppError(exceptions.APIException):
    """Base application error; all custom errors extend from this"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'error'


class ValidationError(AppError):
    """400 - invalid request data, missing fields, etc."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Validation failed'
    default_code = 'validation_error'


class AuthError(AppError, exceptions.AuthenticationFailed):
    """401 - user is not authenticated"""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Unauthorized'
    default_code = 'auth_error'


class ForbiddenError(AppError, exceptions.PermissionDenied):
    """403 - authenticated but not allowed"""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Forbidden'
    default_code = 'forbidden'


class NotFoundError(AppError, exceptions.NotFound):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found'
    default_code = 'not_found'


class ConflictError(AppError):
    """409 - duplicate entry or a state that does not allow the operation"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource conflict'
    default_code = 'conflict'


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'internal_error'


class ServiceUnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Service temporarily unavailable'
    default_code = 'service_unavailable'
