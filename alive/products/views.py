import logging
from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.exceptions import ValidationError as FilterValidationError
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly, AllowAny

from alive.core.authentication import OptionalJWTAuthentication, ReadOptionalJWTAuthentication
from alive.core.errors import ForbiddenError, NotFoundError
from alive.core.geo import parse_location_query
from alive.core.pagination import paginate
from alive.core.permissions import can_manage_store
from alive.core.utils import create_audit_log, success_response
from alive.kirana.serializers import StoreSummarySerializer
from alive.kirana.utils import get_managed_store, get_store_or_404, nearby_stores
from .filters import NearbyProductFilter, ProductFilter
from .models import CENTS, AdvertisedProduct, calculate_discount_percent
from .serializers import AdvertisedProductSerializer, NearbyProductSerializer, ProductDetailSerializer
from .validators import validate_product, validate_product_update

logger = logging.getLogger('alive.products')

MANAGE_PRODUCTS_MESSAGE = 'You can only manage products of your own store'


def filtered_queryset(filterset):
    if not filterset.is_valid():
        raise FilterValidationError(filterset.errors)
    return filterset.qs


def get_product_or_404(pk):
    try:
        return AdvertisedProduct.objects.select_related('store').get(pk=pk)
    except AdvertisedProduct.DoesNotExist:
        raise NotFoundError('Product not found')


def get_store_product(request, store_pk, product_pk):
    """Product addressed through its store URL, checked for ownership"""
    product = get_product_or_404(product_pk)
    if product.store_id != store_pk:
        raise ForbiddenError('Product does not belong to this store')
    if not can_manage_store(request.user, product.store):
        raise ForbiddenError(MANAGE_PRODUCTS_MESSAGE)
    return product


@api_view(['GET'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([AllowAny])
def product_list(request):
    """List advertised products with filters"""
    queryset = AdvertisedProduct.objects.select_related('store').all()
    filterset = ProductFilter(request.query_params, queryset=queryset)
    products, pagination = paginate(filtered_queryset(filterset).order_by('-created_at', '-id'), request.query_params)
    return success_response({
        'products': AdvertisedProductSerializer(products, many=True).data,
        'pagination': pagination,
    })


@api_view(['GET'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([AllowAny])
def product_nearby(request):
    """Active products sold by active stores within ``radius`` km, nearest first"""
    latitude, longitude, radius = parse_location_query(request.query_params)
    distances = {store.id: store.distance for store in nearby_stores(latitude, longitude, radius)}

    queryset = AdvertisedProduct.objects.select_related('store').filter(is_active=True, store_id__in=distances.keys())
    filterset = NearbyProductFilter(request.query_params, queryset=queryset)

    products = []
    for product in filtered_queryset(filterset).order_by('id'):
        product.distance = distances[product.store_id]
        products.append(product)
    products.sort(key=lambda p: p.distance)

    return success_response({
        'location': {'latitude': latitude, 'longitude': longitude},
        'radius': radius,
        'count': len(products),
        'products': NearbyProductSerializer(products, many=True).data,
    })


@api_view(['GET'])
@authentication_classes([OptionalJWTAuthentication])
@permission_classes([AllowAny])
def product_detail(request, pk):
    """Product with a summary of the store that sells it"""
    product = get_product_or_404(pk)
    return success_response(ProductDetailSerializer(product).data)


@api_view(['GET', 'POST'])
@authentication_classes([ReadOptionalJWTAuthentication])
@permission_classes([IsAuthenticatedOrReadOnly])
def store_products(request, pk):
    """List a store's active products, or add one (store owner or admin)"""
    if request.method == 'GET':
        store = get_store_or_404(pk)
        queryset = store.products.filter(is_active=True).order_by('-created_at', '-id')
        products, pagination = paginate(queryset, request.query_params)
        return success_response({
            'store': StoreSummarySerializer(store).data,
            'products': AdvertisedProductSerializer(products, many=True).data,
            'pagination': pagination,
        })

    store = get_managed_store(request.user, pk, message=MANAGE_PRODUCTS_MESSAGE)
    parsed = validate_product(request.data)

    payload = request.data.copy()
    if 'discount_percent' in parsed:
        payload['discount_percent'] = parsed['discount_percent'].quantize(CENTS)
    else:
        payload['discount_percent'] = calculate_discount_percent(parsed['mrp'], parsed['discounted_price'])

    serializer = AdvertisedProductSerializer(data=payload)
    serializer.is_valid(raise_exception=True)

    with transaction.atomic():
        product = serializer.save(store=store, is_active=True)
        create_audit_log(request, 'product_create', 'AdvertisedProduct', product.id,
                         changes={'store_id': store.id, 'name': product.name, 'mrp': product.mrp,
                                  'discounted_price': product.discounted_price},
                         object_name=product.name)

    logger.info(f"Product '{product.name}' added to store {store.id} by {request.user.phone}")
    return success_response(AdvertisedProductSerializer(product).data, message='Product added successfully',
                            status_code=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def store_product_detail(request, pk, product_pk):
    """Update or remove (deactivate) a store's product"""
    product = get_store_product(request, pk, product_pk)

    if request.method == 'DELETE':
        with transaction.atomic():
            product.is_active = False
            product.save(update_fields=['is_active', 'updated_at'])
            create_audit_log(request, 'product_remove', 'AdvertisedProduct', product.id, object_name=product.name)
        logger.info(f"Product {product.id} removed from store {pk} by {request.user.phone}")
        return success_response(message='Product removed successfully')

    parsed = validate_product_update(request.data, product)

    payload = request.data.copy()
    if 'discount_percent' in parsed:
        payload['discount_percent'] = parsed['discount_percent'].quantize(CENTS)
    elif 'mrp' in parsed or 'discounted_price' in parsed:
        payload['discount_percent'] = calculate_discount_percent(
            parsed.get('mrp', product.mrp),
            parsed.get('discounted_price', product.discounted_price),
        )

    serializer = AdvertisedProductSerializer(product, data=payload, partial=True)
    serializer.is_valid(raise_exception=True)

    with transaction.atomic():
        product = serializer.save()
        changes = {key: serializer.data.get(key) for key in payload.keys() if key in serializer.data}
        create_audit_log(request, 'product_update', 'AdvertisedProduct', product.id, changes=changes, object_name=product.name)

    logger.info(f"Product {product.id} updated by {request.user.phone}")
    return success_response(AdvertisedProductSerializer(product).data, message='Product updated successfully')
