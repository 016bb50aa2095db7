"""Offset/limit pagination shared by the list endpoints"""
from .errors import ValidationError
from .validators import to_int

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def parse_pagination(params, default_limit=DEFAULT_LIMIT, max_limit=MAX_LIMIT):
    limit = to_int(params.get('limit', default_limit))
    offset = to_int(params.get('offset', 0))
    if limit is None or offset is None or limit < 1 or offset < 0:
        raise ValidationError('limit must be a positive integer and offset a non-negative integer')
    return min(limit, max_limit), offset


def paginate(queryset, params, default_limit=DEFAULT_LIMIT):
    """
    Slice a queryset (or list) using ``limit``/``offset`` query params.

    Returns (page_items, pagination_dict).
    """
    limit, offset = parse_pagination(params, default_limit=default_limit)
    total = queryset.count() if hasattr(queryset, 'count') and not isinstance(queryset, list) else len(queryset)
    items = queryset[offset:offset + limit]
    return items, {
        'total': total,
        'limit': limit,
        'offset': offset,
        'has_more': offset + limit < total,
    }
