import json
import logging

from django.conf import settings
from django.core.exceptions import MiddlewareNotUsed

from .utils import get_client_ip

logger = logging.getLogger('alive.requests')

REDACTED_FIELDS = {'otp', 'refresh', 'token', 'refresh_token', 'api_key'}


class RequestLoggingMiddleware:
    """Log method, path, query, body and client IP of every request (development only)"""

    def __init__(self, get_response):
        if not settings.REQUEST_LOGGING:
            raise MiddlewareNotUsed()
        self.get_response = get_response

    def __call__(self, request):
        body = None
        if request.method != 'GET' and request.content_type == 'application/json':
            body = self._parse_body(request)
        logger.info(f"{request.method} {request.path} query={dict(request.GET)} body={body} ip={get_client_ip(request)}")
        return self.get_response(request)

    @staticmethod
    def _parse_body(request):
        try:
            data = json.loads(request.body or b'{}')
        except (ValueError, UnicodeDecodeError):
            return '<invalid json>'
        if isinstance(data, dict):
            return {key: ('***' if key in REDACTED_FIELDS else value) for key, value in data.items()}
        return data
