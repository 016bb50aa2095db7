import logging

from django.contrib.auth.models import AnonymousUser
from rest_framework.authentication import BaseAuthentication

from alive.core.errors import AuthError
from alive.core.utils import get_client_ip
from .models import AdScreen

logger = logging.getLogger('alive.screens')

SCREEN_KEY_HEADER = 'X-Screen-Key'


class ScreenKeyAuthentication(BaseAuthentication):
    """
    Device authentication for ad screens.

    The raw key issued at registration is sent in ``X-Screen-Key``; on
    success ``request.auth`` is the screen and ``request.user`` stays
    anonymous.
    """

    def authenticate(self, request):
        raw_key = request.headers.get(SCREEN_KEY_HEADER)
        if not raw_key:
            raise AuthError('Screen key is required')

        screen = AdScreen.objects.for_key(raw_key)
        if screen is None:
            logger.warning(f"Heartbeat with unknown screen key from {get_client_ip(request)}")
            raise AuthError('Invalid screen key')
        return AnonymousUser(), screen

    def authenticate_header(self, request):
        return SCREEN_KEY_HEADER
