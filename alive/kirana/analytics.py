"""
Store dashboard numbers.

Earnings combine commissions on completed orders with approved bill rebates.
Screen ad revenue, referrals and bonuses have no ledger yet and report zero,
as does the paid out amount, so the whole total is pending payout.
"""
from decimal import Decimal

from django.db.models import Avg, Count, Max, Sum, DecimalField

from alive.orders.models import Order
from alive.rebates.models import RebateClaim
from .utils import nearby_stores

ZERO = Decimal('0.00')
COVERAGE_RADIUS_KM = 5


def _order_counts(orders):
    counts = {status: 0 for status, _ in Order.STATUS_CHOICES}
    for row in orders.values('status').annotate(count=Count('id')):
        counts[row['status']] = row['count']
    return counts


def _customer_retention(completed):
    """Percent of customers with more than one completed order"""
    per_customer = completed.exclude(customer__isnull=True).values('customer').annotate(count=Count('id'))
    customers = per_customer.count()
    if not customers:
        return 0.0
    repeat = per_customer.filter(count__gt=1).count()
    return round(repeat / customers * 100, 2)


def build_store_analytics(store):
    orders = Order.objects.filter(store=store)
    completed = orders.filter(status=Order.STATUS_COMPLETED)
    approved_rebates = RebateClaim.objects.filter(store=store, status=RebateClaim.STATUS_APPROVED)

    counts = _order_counts(orders)
    total_orders = sum(counts.values())
    completed_orders = counts[Order.STATUS_COMPLETED]

    order_totals = completed.aggregate(
        commissions=Sum('commission_amount', output_field=DecimalField()),
        avg_total=Avg('total', output_field=DecimalField()),
        avg_commission=Avg('commission_amount', output_field=DecimalField()),
    )
    order_commissions = order_totals['commissions'] or ZERO
    bill_rebates = approved_rebates.aggregate(
        total=Sum('rebate_amount', output_field=DecimalField())
    )['total'] or ZERO

    screen_ads = ZERO
    referrals = ZERO
    bonuses = ZERO
    total_earned = order_commissions + screen_ads + bill_rebates + referrals + bonuses
    paid_out = ZERO

    conversion_rate = round(completed_orders / total_orders * 100, 2) if total_orders else 0.0

    last_earning_dates = [
        completed.aggregate(last=Max('completed_at'))['last'],
        approved_rebates.aggregate(last=Max('reviewed_at'))['last'],
    ]
    last_earning_dates = [d for d in last_earning_dates if d is not None]

    products = store.products.all()

    return {
        'store_id': store.id,
        'store_name': store.name,
        'overview': {
            'total_products': products.count(),
            'active_products': products.filter(is_active=True).count(),
            'total_orders': total_orders,
            'completed_orders': completed_orders,
            'total_earnings': total_earned,
        },
        'orders': counts,
        'earnings': {
            'order_commissions': order_commissions,
            'screen_ads': screen_ads,
            'bill_rebates': bill_rebates,
            'referrals': referrals,
            'bonuses': bonuses,
            'total_earned': total_earned,
            'pending_payout': total_earned - paid_out,
            'paid_out': paid_out,
        },
        'performance': {
            'average_order_value': (order_totals['avg_total'] or ZERO).quantize(Decimal('0.01')),
            'average_commission': (order_totals['avg_commission'] or ZERO).quantize(Decimal('0.01')),
            'conversion_rate': conversion_rate,
            'customer_retention': _customer_retention(completed),
        },
        'recent_activity': {
            'last_order_date': orders.aggregate(last=Max('created_at'))['last'],
            'last_product_added': products.aggregate(last=Max('created_at'))['last'],
            'last_earning_date': max(last_earning_dates) if last_earning_dates else None,
        },
        'location': {
            'city': store.city,
            'state': store.state,
            'nearby_stores': len(nearby_stores(store.latitude, store.longitude, COVERAGE_RADIUS_KM, exclude_id=store.id)),
            'coverage_radius': COVERAGE_RADIUS_KM,
        },
    }
