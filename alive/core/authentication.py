"""
JWT authentication for the API.

Bearer tokens are issued by ``alive.core.tokens``; failures are reported with
the messages the mobile and dashboard clients display verbatim.
"""
import logging
import time

import jwt
from rest_framework import exceptions
from rest_framework.permissions import SAFE_METHODS
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .errors import AuthError

logger = logging.getLogger('alive.auth')

TOKEN_EXPIRED_MESSAGE = 'Token has expired. Please login again.'
TOKEN_INVALID_MESSAGE = 'Invalid token. Please login again.'


def token_is_expired(raw_token):
    """Read the ``exp`` claim without verifying the signature"""
    if isinstance(raw_token, bytes):
        raw_token = raw_token.decode('utf-8', errors='ignore')
    try:
        claims = jwt.decode(raw_token, options={'verify_signature': False})
    except jwt.PyJWTError:
        return False
    exp = claims.get('exp')
    return isinstance(exp, (int, float)) and exp < time.time()


class AliveJWTAuthentication(JWTAuthentication):
    """simplejwt authentication with the API's own 401 messages"""

    def get_validated_token(self, raw_token):
        try:
            return AccessToken(raw_token)
        except TokenError:
            if token_is_expired(raw_token):
                raise AuthError(TOKEN_EXPIRED_MESSAGE)
            raise AuthError(TOKEN_INVALID_MESSAGE)

    def get_user(self, validated_token):
        try:
            user = super().get_user(validated_token)
        except (InvalidToken, AuthenticationFailed) as e:
            logger.warning(f"Rejected token for missing or inactive user: {e}")
            raise AuthError(TOKEN_INVALID_MESSAGE)
        return user


class OptionalJWTAuthentication(AliveJWTAuthentication):
    """Public endpoints: a bad or expired token is treated as anonymous"""

    def authenticate(self, request):
        try:
            return super().authenticate(request)
        except exceptions.AuthenticationFailed:
            return None


class ReadOptionalJWTAuthentication(AliveJWTAuthentication):
    """Bad tokens are ignored on reads and rejected on writes"""

    def authenticate(self, request):
        if request.method in SAFE_METHODS:
            try:
                return super().authenticate(request)
            except exceptions.AuthenticationFailed:
                return None
        return super().authenticate(request)
