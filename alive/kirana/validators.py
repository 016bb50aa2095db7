"""Request payload checks for store create/update"""
from alive.core.errors import ValidationError
from alive.core.validators import (
    validate_email, validate_gst, validate_latitude, validate_longitude,
    validate_phone, validate_pincode, validate_required,
)

STORE_TYPES = ['general', 'grocery', 'medical', 'electronics', 'other']
STORE_TYPE_MESSAGE = 'Invalid store type. Must be: general, grocery, medical, electronics, or other'


def validate_store_type(store_type):
    if store_type not in STORE_TYPES:
        raise ValidationError(STORE_TYPE_MESSAGE)
    return True


def validate_kirana_store(data):
    validate_required(data.get('name'), 'Store name', 2)
    validate_required(data.get('owner_name'), 'Owner name', 2)
    validate_phone(data.get('owner_phone'))
    validate_required(data.get('address'), 'Address', 10)
    validate_required(data.get('city'), 'City', 2)
    validate_required(data.get('state'), 'State', 2)
    validate_pincode(data.get('pincode'))
    validate_latitude(data.get('latitude'))
    validate_longitude(data.get('longitude'))

    if data.get('email'):
        validate_email(data['email'])
    if data.get('gstin'):
        validate_gst(data['gstin'])
    if data.get('store_type'):
        validate_store_type(data['store_type'])
    return True


def validate_kirana_store_update(data):
    """Same rules as create, applied only to the fields present"""
    if 'name' in data:
        validate_required(data['name'], 'Store name', 2)
    if 'owner_name' in data:
        validate_required(data['owner_name'], 'Owner name', 2)
    if 'owner_phone' in data:
        validate_phone(data['owner_phone'])
    if 'address' in data:
        validate_required(data['address'], 'Address', 10)
    if 'email' in data:
        validate_email(data['email'])
    if 'city' in data:
        validate_required(data['city'], 'City', 2)
    if 'state' in data:
        validate_required(data['state'], 'State', 2)
    if 'pincode' in data:
        validate_pincode(data['pincode'])
    if 'latitude' in data:
        validate_latitude(data['latitude'])
    if 'longitude' in data:
        validate_longitude(data['longitude'])
    if data.get('gstin') is not None:
        validate_gst(data['gstin'])
    if 'store_type' in data:
        validate_store_type(data['store_type'])
    return True
