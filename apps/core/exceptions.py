"""
Custom Exception Handler for DRF and the service-layer error taxonomy
"""

from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated, PermissionDenied, Throttled
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
import logging

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security.audit")


class ErrorKind:
    VALIDATION = 'validation_error'
    SEAT_LIMIT_EXCEEDED = 'seat_limit_exceeded'
    PROVIDER = 'provider_error'
    TRANSIENT = 'transient_error'
    NOT_FOUND = 'not_found'
    PERMISSION = 'permission_denied'
    SUBSCRIPTION_SUSPENDED = 'subscription_suspended'


def custom_exception_handler(exc, context):
    """
    Custom exception handler that provides consistent error responses.
    """
    if isinstance(exc, APIException):
        return _service_error_response(exc, context)

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        _log_security_event(exc, context, response.status_code)
        response.data = {
            'success': False,
            'error': {
                'code': response.status_code,
                'message': get_error_message(response.data),
                'details': response.data if isinstance(response.data, dict) else {'detail': response.data},
            }
        }
        return response

    if isinstance(exc, DjangoValidationError):
        logger.warning("Validation error: %s", exc)
        return Response(
            {
                'success': False,
                'error': {
                    'code': 400,
                    'message': exc.messages[0] if getattr(exc, 'messages', None) else 'Validation Error',
                    'details': {
                        'kind': ErrorKind.VALIDATION,
                        'validation_errors': exc.messages if hasattr(exc, 'messages') else [str(exc)],
                    },
                }
            },
            status=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, Http404):
        return Response(
            {
                'success': False,
                'error': {
                    'code': 404,
                    'message': 'Not Found',
                    'details': {'kind': ErrorKind.NOT_FOUND, 'detail': str(exc)},
                }
            },
            status=status.HTTP_404_NOT_FOUND
        )

    logger.exception("Unexpected error: %s", exc)

    return Response(
        {
            'success': False,
            'error': {
                'code': 500,
                'message': 'Internal Server Error',
                'details': {'detail': 'An unexpected error occurred.'},
            }
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def _service_error_response(exc, context):
    _log_security_event(exc, context, exc.status_code)
    if exc.status_code >= 500:
        logger.warning("service_error kind=%s message=%s", exc.code, exc.message)
    details = {'kind': exc.code}
    if getattr(exc, 'field', None):
        details['field'] = exc.field
    details.update(exc.extra)
    return Response(
        {
            'success': False,
            'error': {
                'code': exc.status_code,
                'message': exc.message,
                'details': details,
            }
        },
        status=exc.status_code,
    )


def _log_security_event(exc, context, status_code):
    if status_code not in (401, 403, 429):
        return

    request = context.get("request")
    if request is None:
        return

    user = getattr(request, "user", None)
    user_id = getattr(user, "id", None) if user and getattr(user, "is_authenticated", False) else None
    exc_name = exc.__class__.__name__
    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        event_type = "auth_failed"
    elif isinstance(exc, (PermissionDenied, PermissionDeniedException)):
        event_type = "permission_denied"
    elif isinstance(exc, Throttled):
        event_type = "throttled"
    else:
        event_type = "security_event"

    security_logger.warning(
        "api_security_event type=%s status=%s method=%s path=%s user_id=%s ip=%s error=%s",
        event_type,
        status_code,
        request.method,
        request.path,
        user_id,
        request.META.get("REMOTE_ADDR"),
        exc_name,
    )


def get_error_message(data):
    """Extract a user-friendly error message from response data"""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        if 'non_field_errors' in data:
            return str(data['non_field_errors'][0])
        for key, value in data.items():
            if isinstance(value, list) and value:
                return f"{key}: {value[0]}"
            elif isinstance(value, str):
                return f"{key}: {value}"
    elif isinstance(data, list) and data:
        return str(data[0])
    return str(data)


class APIException(Exception):
    """Base exception for service-layer errors"""

    def __init__(self, message, code=None, status_code=status.HTTP_400_BAD_REQUEST, **extra):
        self.message = message
        self.code = code or 'error'
        self.status_code = status_code
        self.extra = extra
        super().__init__(message)


class ValidationException(APIException):
    """Bad input caught before any I/O"""

    def __init__(self, message, field=None, code=ErrorKind.VALIDATION, **extra):
        super().__init__(message, code=code, status_code=status.HTTP_400_BAD_REQUEST, **extra)
        self.field = field


class SeatLimitExceeded(ValidationException):
    """Raised when a plan capacity limit would be breached."""

    def __init__(self, message, limit_type=None, used=None, maximum=None):
        super().__init__(
            message,
            code=ErrorKind.SEAT_LIMIT_EXCEEDED,
            limit_type=limit_type,
            used=used,
            max=maximum,
        )
        self.limit_type = limit_type
        self.used = used
        self.maximum = maximum


class ProviderException(APIException):
    """Payment provider explicitly rejected the request"""

    def __init__(self, message, provider=None):
        super().__init__(
            message,
            code=ErrorKind.PROVIDER,
            status_code=status.HTTP_502_BAD_GATEWAY,
            provider=provider,
        )
        self.provider = provider


class TransientException(APIException):
    """Network or timeout failure talking to the store or a provider"""

    def __init__(self, message="Service temporarily unavailable. Please try again."):
        super().__init__(
            message,
            code=ErrorKind.TRANSIENT,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            retryable=True,
        )


class PermissionDeniedException(APIException):
    """Permission denied exception"""

    def __init__(self, message="You do not have permission to perform this action"):
        super().__init__(message, code=ErrorKind.PERMISSION, status_code=status.HTTP_403_FORBIDDEN)


class ResourceNotFoundException(APIException):
    """Resource not found exception"""

    def __init__(self, resource_type, resource_id=None):
        message = f"{resource_type} not found"
        if resource_id:
            message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message, code=ErrorKind.NOT_FOUND, status_code=status.HTTP_404_NOT_FOUND)


class SubscriptionSuspendedException(APIException):
    """Access gate denied the requested area"""

    def __init__(self, message, **decision):
        super().__init__(
            message,
            code=ErrorKind.SUBSCRIPTION_SUSPENDED,
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            **decision,
        )
