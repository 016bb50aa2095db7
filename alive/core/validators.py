"""
Validation utilities for phone numbers, addresses and coordinates.

Each validator raises ``alive.core.errors.ValidationError`` with a message
that is safe to show to the end user, and returns True otherwise.
"""
import math
import re
from decimal import Decimal, InvalidOperation

from .errors import ValidationError

PHONE_REGEX = re.compile(r'^[6-9]\d{9}$')
EMAIL_REGEX = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
GST_REGEX = re.compile(r'^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z]{1}[1-9A-Z]{1}Z[0-9A-Z]{1}$')
PINCODE_REGEX = re.compile(r'^[1-9][0-9]{5}$')


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def to_float(value):
    """Parse a coordinate-like value, returning None unless it is a finite number"""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def to_decimal(value):
    """Parse a money-like value, returning None when it is not numeric"""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def to_int(value):
    """Parse an integer, returning None for anything that is not a whole number"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def validate_phone(phone):
    if is_blank(phone):
        raise ValidationError('Phone number is required')
    if not isinstance(phone, str) or not PHONE_REGEX.match(phone):
        raise ValidationError('Invalid phone number. Must be 10 digits starting with 6-9')
    return True


def validate_email(email, required=False):
    if is_blank(email):
        if required:
            raise ValidationError('Email is required')
        return True
    if not isinstance(email, str) or not EMAIL_REGEX.match(email):
        raise ValidationError('Invalid email format')
    return True


def validate_gst(gstin, required=False):
    """GST format: 2 digits (state) + 10 chars (PAN) + 1 digit + Z + check char"""
    if is_blank(gstin):
        if required:
            raise ValidationError('GST number is required')
        return True
    if not isinstance(gstin, str) or not GST_REGEX.match(gstin):
        raise ValidationError('Invalid GST format. Expected: 22AAAAA0000A1Z5')
    return True


def validate_pincode(pincode):
    if is_blank(pincode):
        raise ValidationError('Pincode is required')
    if not PINCODE_REGEX.match(str(pincode)):
        raise ValidationError('Invalid pincode. Must be 6 digits')
    return True


def validate_latitude(lat):
    if lat is None or lat == '':
        raise ValidationError('Latitude is required')
    latitude = to_float(lat)
    if latitude is None or latitude < -90 or latitude > 90:
        raise ValidationError('Invalid latitude. Must be between -90 and 90')
    return True


def validate_longitude(lng):
    if lng is None or lng == '':
        raise ValidationError('Longitude is required')
    longitude = to_float(lng)
    if longitude is None or longitude < -180 or longitude > 180:
        raise ValidationError('Invalid longitude. Must be between -180 and 180')
    return True


def validate_required(value, field_name, min_length=1):
    if not isinstance(value, str) or len(value.strip()) < min_length:
        raise ValidationError(f'{field_name} is required (minimum {min_length} characters)')
    return True
