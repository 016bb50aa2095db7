"""
OTP service.

One-time passwords are kept in the Django cache (Redis in production) keyed
by phone number; the cache timeout doubles as expired-entry cleanup.
"""
import logging
import math
import secrets
import time

from django.conf import settings
from django.core.cache import cache

from .errors import ValidationError

logger = logging.getLogger('alive.otp')

OTP_LENGTH = 6
OTP_EXPIRY_MINUTES = 5
MAX_ATTEMPTS = 3
# entries outlive expires_at so an expired code is reported as expired
CACHE_GRACE_SECONDS = 60


def _cache_key(phone):
    return f'otp:{phone}'


def generate_otp(length=OTP_LENGTH):
    """Random numeric code without a leading zero"""
    first = str(secrets.randbelow(9) + 1)
    rest = ''.join(str(secrets.randbelow(10)) for _ in range(length - 1))
    return first + rest


def send_otp(phone):
    if not phone or len(phone) < 10:
        raise ValidationError('Invalid phone number')

    otp = generate_otp()
    now = time.time()
    cache.set(_cache_key(phone), {
        'otp': otp,
        'expires_at': now + OTP_EXPIRY_MINUTES * 60,
        'attempts': 0,
        'created_at': now,
    }, timeout=OTP_EXPIRY_MINUTES * 60 + CACHE_GRACE_SECONDS)

    # SMS delivery is not wired up; the code goes to the log
    logger.info(f"OTP for {phone}: {otp} (expires in {OTP_EXPIRY_MINUTES} minutes)")

    result = {
        'success': True,
        'message': f'OTP sent to {phone}',
    }
    if settings.OTP_DEBUG_EXPOSE:
        result['otp'] = otp
    return result


def verify_otp(phone, otp):
    key = _cache_key(phone)
    stored = cache.get(key)

    if not stored:
        raise ValidationError('No OTP found for this phone number. Please request a new OTP.')

    now = time.time()
    if now > stored['expires_at']:
        cache.delete(key)
        raise ValidationError('OTP has expired. Please request a new OTP.')

    if stored['attempts'] >= MAX_ATTEMPTS:
        cache.delete(key)
        raise ValidationError('Maximum verification attempts exceeded. Please request a new OTP.')

    stored['attempts'] += 1

    if not secrets.compare_digest(str(stored['otp']), str(otp)):
        remaining_ttl = max(math.ceil(stored['expires_at'] - now), 1) + CACHE_GRACE_SECONDS
        cache.set(key, stored, timeout=remaining_ttl)
        raise ValidationError(f"Invalid OTP. {MAX_ATTEMPTS - stored['attempts']} attempts remaining.")

    cache.delete(key)
    return {
        'success': True,
        'message': 'OTP verified successfully',
    }


def has_otp(phone):
    stored = cache.get(_cache_key(phone))
    return bool(stored) and time.time() <= stored['expires_at']


def clear_otp(phone):
    cache.delete(_cache_key(phone))
