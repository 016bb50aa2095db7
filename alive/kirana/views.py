import logging
from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly, AllowAny

from alive.core.authentication import OptionalJWTAuthentication, ReadOptionalJWTAuthentication
from alive.core.errors import ConflictError
from alive.core.geo import parse_location_query
from alive.core.pagination import paginate
from alive.core.utils import create_audit_log, success_response
from .analytics import build_store_analytics
from .filters import StoreFilter
from .models import KiranaStore
from .serializers import KiranaStoreSerializer, NearbyStoreSerializer
from .utils import get_managed_store, get_store_or_404, nearby_stores
from .validators import validate_kirana_store, validate_kirana_store_update

logger = logging.getLogger('alive.kirana')


@api_view(['GET', 'POST'])
@authentication_classes([ReadOptionalJWTAuthentication])
@permission_classes([IsAuthenticatedOrReadOnly])
def store_list_create(request):
    """List stores with filters, or register a new store (requires login)"""
    if request.method == 'GET':
        filterset = StoreFilter(request.query_params, queryset=KiranaStore.objects.all())
        stores, pagination = paginate(filterset.qs.order_by('-created_at', '-id'), request.query_params)
        return success_response({
            'stores': KiranaStoreSerializer(stores, many=True).data,
            'pagination': pagination,
        })

    data = request.data
    validate_kirana_store(data)

    if KiranaStore.objects.filter(owner_phone=data.get('owner_phone')).exists():
        raise ConflictError('Store with this phone number already exists')

    serializer = KiranaStoreSerializer(data=data)
    serializer.is_valid(raise_exception=True)

    user = request.user
    with transaction.atomic():
        store = serializer.save(owner=user, is_active=True, is_verified=False)
        if user.role == user.ROLE_CUSTOMER:
            user.role = user.ROLE_KIRANA
            user.save(update_fields=['role', 'updated_at'])
            logger.info(f"User {user.phone} promoted to kirana owner")
        create_audit_log(request, 'store_create', 'KiranaStore', store.id, changes=serializer.data, object_name=store.name)

    logger.info(f"Store '{store.name}' created by {user.phone}")
    return success_response(KiranaStoreSerializer(store).data, message='Store created successfully', status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([AllowAny])
def store_nearby(request):
    """Active stores within ``radius`` km of ``lat``/``lng``"""
    latitude, longitude, radius = parse_location_query(request.query_params)
    stores = nearby_stores(latitude, longitude, radius)
    return success_response({
        'location': {'latitude': latitude, 'longitude': longitude},
        'radius': radius,
        'count': len(stores),
        'stores': NearbyStoreSerializer(stores, many=True).data,
    })


@api_view(['GET', 'PUT', 'PATCH'])
@authentication_classes([ReadOptionalJWTAuthentication])
@permission_classes([IsAuthenticatedOrReadOnly])
def store_detail(request, pk):
    """Retrieve a store, or update it (owner or admin)"""
    if request.method == 'GET':
        store = get_store_or_404(pk)
        return success_response(KiranaStoreSerializer(store).data)

    store = get_managed_store(request.user, pk)
    data = request.data
    validate_kirana_store_update(data)

    owner_phone = data.get('owner_phone')
    if owner_phone and owner_phone != store.owner_phone:
        if KiranaStore.objects.filter(owner_phone=owner_phone).exclude(pk=store.pk).exists():
            raise ConflictError('Phone number already in use by another store')

    serializer = KiranaStoreSerializer(store, data=data, partial=True)
    serializer.is_valid(raise_exception=True)

    extra = {}
    if request.user.is_admin and 'is_verified' in data:
        extra['is_verified'] = str(data['is_verified']).lower() == 'true'

    with transaction.atomic():
        store = serializer.save(**extra)
        changes = {key: serializer.data.get(key) for key in data.keys() if key in serializer.data}
        create_audit_log(request, 'store_update', 'KiranaStore', store.id, changes=changes, object_name=store.name)

    logger.info(f"Store {store.id} updated by {request.user.phone}")
    return success_response(KiranaStoreSerializer(store).data, message='Store updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def store_analytics(request, pk):
    """Dashboard numbers for one store (owner or admin)"""
    store = get_managed_store(request.user, pk, message='You can only view analytics for your own store')
    return success_response(build_store_analytics(store))
