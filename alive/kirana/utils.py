"""
Store lookups shared by the kirana, products, orders and analytics code
"""
import logging

from alive.core.errors import ForbiddenError, NotFoundError
from alive.core.geo import haversine_distance, within_radius
from alive.core.permissions import can_manage_store
from .models import KiranaStore

logger = logging.getLogger('alive.kirana')


def get_store_or_404(pk):
    try:
        return KiranaStore.objects.get(pk=pk)
    except KiranaStore.DoesNotExist:
        raise NotFoundError('Store not found')


def get_managed_store(user, pk, message='You can only update your own store'):
    """Load a store the user owns (admins may act on any store)"""
    store = get_store_or_404(pk)
    if not can_manage_store(user, store):
        logger.warning(f"User {user.phone} denied access to store {pk}")
        raise ForbiddenError(message)
    return store


def nearby_stores(latitude, longitude, radius, exclude_id=None):
    """Active stores within ``radius`` km, nearest first, each with ``distance`` set"""
    queryset = within_radius(KiranaStore.objects.filter(is_active=True), latitude, longitude, radius)
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)

    stores = []
    for store in queryset:
        store.distance = haversine_distance(latitude, longitude, store.latitude, store.longitude)
        if store.distance <= radius:
            stores.append(store)
    stores.sort(key=lambda s: s.distance)
    return stores
