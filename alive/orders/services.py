"""
Order lifecycle: placement, status transitions and pickup confirmation.

Stock is decremented when an order is placed and restored when it is
cancelled; both happen inside a transaction with the product rows locked.
"""
import logging
import uuid
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from alive.core.errors import ConflictError, ForbiddenError, ValidationError
from alive.core.otp import generate_otp
from alive.core.permissions import can_manage_store
from alive.products.models import AdvertisedProduct
from .models import Order, OrderItem

logger = logging.getLogger('alive.orders')

PICKUP_OTP_LENGTH = 4
# largest amount the order money columns hold
MAX_ORDER_AMOUNT = Decimal('9999999999.99')

# store side transitions; completion goes through pickup verification
STORE_TRANSITIONS = {
    Order.STATUS_PENDING: {Order.STATUS_PACKED, Order.STATUS_CANCELLED},
    Order.STATUS_PACKED: {Order.STATUS_READY, Order.STATUS_CANCELLED},
    Order.STATUS_READY: {Order.STATUS_CANCELLED},
}


def generate_order_number():
    order_number = f"ORD-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    while Order.objects.filter(order_number=order_number).exists():
        order_number = f"ORD-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    return order_number


def place_order(customer, store, items, notes=''):
    """
    Create an order for ``items`` (dicts with ``product`` and ``quantity``).

    Raises ValidationError when a product is unknown, inactive, not sold by
    the store, outside its order quantity limits or short on stock.
    """
    if not store.is_active:
        raise ValidationError('Store is not accepting orders')

    quantities = {item['product']: item['quantity'] for item in items}

    with transaction.atomic():
        products = {
            product.id: product
            for product in AdvertisedProduct.objects.select_for_update().filter(id__in=quantities.keys(), store=store)
        }

        subtotal = Decimal('0.00')
        commission = Decimal('0.00')
        lines = []
        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if product is None or not product.is_active:
                raise ValidationError(f'Product {product_id} is not available at this store')
            if quantity < product.min_order_qty:
                raise ValidationError(f'Minimum order quantity for {product.name} is {product.min_order_qty}')
            if quantity > product.max_order_qty:
                raise ValidationError(f'Maximum order quantity for {product.name} is {product.max_order_qty}')
            if quantity > product.stock_quantity:
                raise ValidationError(f'Insufficient stock for {product.name}. Available: {product.stock_quantity}')

            line_total = product.discounted_price * quantity
            line_commission = product.calculated_commission * quantity
            subtotal += line_total
            commission += line_commission
            lines.append((product, quantity, line_total, line_commission))

        if subtotal > MAX_ORDER_AMOUNT or commission > MAX_ORDER_AMOUNT:
            raise ValidationError('Order total is too large')

        order = Order.objects.create(
            order_number=generate_order_number(),
            store=store,
            customer=customer,
            customer_name=customer.name,
            customer_phone=customer.phone or '',
            status=Order.STATUS_PENDING,
            subtotal=subtotal,
            total=subtotal,
            commission_amount=commission,
            pickup_otp=generate_otp(PICKUP_OTP_LENGTH),
            notes=notes or '',
        )

        for product, quantity, line_total, line_commission in lines:
            OrderItem.objects.create(
                order=order,
                product=product,
                product_name=product.name,
                unit_price=product.discounted_price,
                quantity=quantity,
                line_total=line_total,
                commission_amount=line_commission,
            )
            product.stock_quantity -= quantity
            product.save(update_fields=['stock_quantity', 'updated_at'])

    logger.info(f"Order {order.order_number} placed at store {store.id}: {len(lines)} items, total {order.total}")
    return order


def _restore_stock(order):
    product_ids = [item.product_id for item in order.items.all() if item.product_id]
    products = {
        product.id: product
        for product in AdvertisedProduct.objects.select_for_update().filter(id__in=product_ids)
    }
    for item in order.items.all():
        product = products.get(item.product_id)
        if product is None:
            continue
        product.stock_quantity += item.quantity
        product.save(update_fields=['stock_quantity', 'updated_at'])


def change_status(order_id, new_status, user):
    """Move an order along pending -> packed -> ready, or cancel it"""
    with transaction.atomic():
        order = Order.objects.select_for_update().select_related('store').get(pk=order_id)
        old_status = order.status
        store_side = can_manage_store(user, order.store)

        if not store_side:
            if order.customer_id != user.id:
                raise ForbiddenError('You do not have access to this order')
            if new_status != Order.STATUS_CANCELLED:
                raise ForbiddenError('Customers can only cancel their orders')
            if old_status != Order.STATUS_PENDING:
                raise ConflictError('Order can only be cancelled while it is pending')
        elif new_status not in STORE_TRANSITIONS.get(old_status, set()):
            raise ConflictError(f'Cannot change order status from {old_status} to {new_status}')

        order.status = new_status
        update_fields = ['status', 'updated_at']
        if new_status == Order.STATUS_CANCELLED:
            _restore_stock(order)
            order.cancelled_at = timezone.now()
            update_fields.append('cancelled_at')
        order.save(update_fields=update_fields)

    logger.info(f"Order {order.order_number} moved from {old_status} to {new_status} by {user.phone}")
    return order, old_status


def verify_pickup(order_id, otp, user):
    """Complete a ready order once the customer's pickup OTP matches"""
    with transaction.atomic():
        order = Order.objects.select_for_update().select_related('store').get(pk=order_id)
        if not can_manage_store(user, order.store):
            raise ForbiddenError('Only the store can confirm a pickup')
        if order.status != Order.STATUS_READY:
            raise ConflictError('Order is not ready for pickup')
        if str(otp).strip() != order.pickup_otp:
            logger.warning(f"Wrong pickup OTP for order {order.order_number}")
            raise ValidationError('Invalid OTP')

        order.status = Order.STATUS_COMPLETED
        order.completed_at = timezone.now()
        order.save(update_fields=['status', 'completed_at', 'updated_at'])

    logger.info(f"Order {order.order_number} picked up")
    return order
