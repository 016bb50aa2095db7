import logging
from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError as FilterValidationError
from rest_framework.permissions import IsAuthenticated

from alive.core.errors import ForbiddenError, NotFoundError
from alive.core.pagination import paginate
from alive.core.permissions import can_manage_store
from alive.core.utils import create_audit_log, success_response
from alive.kirana.utils import get_store_or_404
from .filters import OrderFilter
from .models import Order
from .serializers import OrderSerializer, OrderCreateSerializer, OrderStatusSerializer, PickupVerifySerializer
from .services import change_status, place_order, verify_pickup

logger = logging.getLogger('alive.orders')


def visible_orders(user):
    """Customers see their own orders, owners their stores' orders, admins everything"""
    queryset = Order.objects.select_related('store').prefetch_related('items')
    if user.is_admin:
        return queryset
    return queryset.filter(Q(customer=user) | Q(store__owner=user))


def get_order_for_user(user, pk):
    try:
        order = Order.objects.select_related('store').prefetch_related('items').get(pk=pk)
    except Order.DoesNotExist:
        raise NotFoundError('Order not found')
    if order.customer_id != user.id and not can_manage_store(user, order.store):
        raise ForbiddenError('You do not have access to this order')
    return order


def serialize_order(order, user):
    # the pickup OTP is only shown to the customer who placed the order
    return OrderSerializer(order, context={'show_otp': order.customer_id == user.id}).data


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List visible orders, or place a new pickup order"""
    user = request.user
    if request.method == 'GET':
        filterset = OrderFilter(request.query_params, queryset=visible_orders(user))
        if not filterset.is_valid():
            raise FilterValidationError(filterset.errors)
        orders, pagination = paginate(filterset.qs.order_by('-created_at', '-id'), request.query_params)
        return success_response({
            'orders': OrderSerializer(orders, many=True, context={'show_otp': lambda o: o.customer_id == user.id}).data,
            'pagination': pagination,
        })

    serializer = OrderCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    store = get_store_or_404(serializer.validated_data['store'])

    order = place_order(user, store, serializer.validated_data['items'], serializer.validated_data.get('notes', ''))
    create_audit_log(request, 'order_create', 'Order', order.id,
                     changes={'store_id': store.id, 'total': order.total, 'items': len(serializer.validated_data['items'])},
                     object_name=order.order_number)

    order = get_order_for_user(user, order.pk)
    return success_response(serialize_order(order, user), message='Order placed successfully',
                            status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    order = get_order_for_user(request.user, pk)
    return success_response(serialize_order(order, request.user))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_update_status(request, pk):
    """Advance or cancel an order"""
    get_order_for_user(request.user, pk)
    serializer = OrderStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    order, old_status = change_status(pk, serializer.validated_data['status'], request.user)
    create_audit_log(request, 'order_status', 'Order', order.id,
                     changes={'status': {'old': old_status, 'new': order.status}},
                     object_name=order.order_number)

    order = get_order_for_user(request.user, pk)
    return success_response(serialize_order(order, request.user), message=f'Order marked as {order.status}')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_verify_pickup(request, pk):
    """Store confirms pickup with the customer's OTP"""
    get_order_for_user(request.user, pk)
    serializer = PickupVerifySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    order = verify_pickup(pk, serializer.validated_data['otp'], request.user)
    create_audit_log(request, 'order_pickup', 'Order', order.id, changes={'status': order.status},
                     object_name=order.order_number)

    order = get_order_for_user(request.user, pk)
    return success_response(serialize_order(order, request.user), message='Order picked up successfully')
