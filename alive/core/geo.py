"""Great-circle distance helpers used by the nearby store/product search"""
import math

from .errors import ValidationError
from .validators import to_float

EARTH_RADIUS_KM = 6371
KM_PER_DEGREE_LAT = 111.32
DEFAULT_SEARCH_RADIUS_KM = 5


def haversine_distance(lat1, lon1, lat2, lon2):
    """Distance in kilometers between two (lat, lon) points"""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bounding_box(latitude, longitude, radius_km):
    """
    Coarse (min_lat, max_lat, min_lng, max_lng) box around a point.

    Used only to narrow the database query before the exact Haversine check.
    The longitude bounds are None when the box would wrap the antimeridian or
    touch a pole, in which case callers must not filter on longitude.
    """
    lat_delta = radius_km / KM_PER_DEGREE_LAT
    min_lat = max(latitude - lat_delta, -90.0)
    max_lat = min(latitude + lat_delta, 90.0)

    cos_lat = math.cos(math.radians(latitude))
    if cos_lat <= 1e-6 or min_lat <= -90.0 or max_lat >= 90.0:
        return min_lat, max_lat, None, None

    lng_delta = radius_km / (KM_PER_DEGREE_LAT * cos_lat)
    min_lng = longitude - lng_delta
    max_lng = longitude + lng_delta
    if min_lng < -180.0 or max_lng > 180.0:
        return min_lat, max_lat, None, None
    return min_lat, max_lat, min_lng, max_lng


def parse_location_query(params, default_radius=DEFAULT_SEARCH_RADIUS_KM):
    """
    Read ``lat``, ``lng`` and optional ``radius`` from query params.

    Returns (latitude, longitude, radius_km).
    """
    lat = params.get('lat')
    lng = params.get('lng')
    if not lat or not lng:
        raise ValidationError('Latitude and longitude are required')

    latitude = to_float(lat)
    longitude = to_float(lng)
    radius = to_float(params.get('radius', default_radius))
    if latitude is None or longitude is None or radius is None:
        raise ValidationError('Invalid coordinates or radius')
    if radius < 0:
        raise ValidationError('Invalid coordinates or radius')
    return latitude, longitude, radius


def within_radius(queryset, latitude, longitude, radius_km, lat_field='latitude', lng_field='longitude'):
    """Apply the bounding box prefilter to a queryset"""
    min_lat, max_lat, min_lng, max_lng = bounding_box(latitude, longitude, radius_km)
    queryset = queryset.filter(**{f'{lat_field}__gte': min_lat, f'{lat_field}__lte': max_lat})
    if min_lng is not None:
        queryset = queryset.filter(**{f'{lng_field}__gte': min_lng, f'{lng_field}__lte': max_lng})
    return queryset
