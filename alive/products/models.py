from decimal import Decimal, ROUND_HALF_UP

from django.db import models

from alive.kirana.models import KiranaStore

CENTS = Decimal('0.01')


def calculate_commission(price, commission_type, commission_value):
    """Commission earned per unit sold at ``price``"""
    if commission_type == AdvertisedProduct.COMMISSION_PERCENTAGE:
        return (Decimal(price) * Decimal(commission_value) / 100).quantize(CENTS, rounding=ROUND_HALF_UP)
    return Decimal(commission_value).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_discount_percent(mrp, discounted_price):
    return ((Decimal(mrp) - Decimal(discounted_price)) / Decimal(mrp) * 100).quantize(CENTS, rounding=ROUND_HALF_UP)


class AdvertisedProduct(models.Model):
    """Brand product advertised on a store's screen and sold over the counter"""
    COMMISSION_PERCENTAGE = 'percentage'
    COMMISSION_FIXED = 'fixed'
    COMMISSION_TYPE_CHOICES = [
        (COMMISSION_PERCENTAGE, 'Percentage of price'),
        (COMMISSION_FIXED, 'Fixed per unit'),
    ]

    store = models.ForeignKey(KiranaStore, on_delete=models.CASCADE, related_name='products')
    name = models.CharField(max_length=200, db_index=True)
    brand = models.CharField(max_length=200, db_index=True)
    category = models.CharField(max_length=100, db_index=True)
    description = models.TextField(blank=True, null=True)
    image_url = models.CharField(max_length=500)
    mrp = models.DecimalField(max_digits=10, decimal_places=2)
    discounted_price = models.DecimalField(max_digits=10, decimal_places=2)
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    stock_quantity = models.PositiveIntegerField(default=0)
    min_order_qty = models.PositiveIntegerField(default=1)
    max_order_qty = models.PositiveIntegerField(default=10)
    commission_type = models.CharField(max_length=20, choices=COMMISSION_TYPE_CHOICES, default=COMMISSION_PERCENTAGE)
    commission_value = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('5.00'))
    is_active = models.BooleanField(default=True)
    is_available = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.brand})"

    @property
    def calculated_commission(self):
        return calculate_commission(self.discounted_price, self.commission_type, self.commission_value)

    def save(self, *args, **kwargs):
        self.is_available = self.stock_quantity > 0
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'stock_quantity' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'is_available'}
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'advertised_products'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['store', 'is_active'], name='idx_product_store_active'),
            models.Index(fields=['category', 'is_active'], name='idx_product_category'),
        ]
