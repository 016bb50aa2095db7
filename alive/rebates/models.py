from decimal import Decimal

from django.conf import settings
from django.db import models

from alive.kirana.models import KiranaStore

# share of the electricity bill refunded for keeping the ad screen powered
REBATE_RATE = Decimal('0.15')


class RebateClaim(models.Model):
    """Monthly electricity bill submitted by a store for the screen power rebate"""
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    store = models.ForeignKey(KiranaStore, on_delete=models.CASCADE, related_name='rebate_claims')
    submitted_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='rebate_claims')
    month = models.CharField(max_length=7, help_text='Billing month as YYYY-MM')
    amount = models.DecimalField(max_digits=10, decimal_places=2, help_text='Total amount on the bill')
    rebate_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    bill_image_url = models.CharField(max_length=500)
    provider_name = models.CharField(max_length=200, blank=True)
    billing_period = models.CharField(max_length=100, blank=True)
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    review_note = models.TextField(blank=True)
    reviewed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='reviewed_rebate_claims')
    reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.store} {self.month}"

    def save(self, *args, **kwargs):
        self.rebate_amount = (Decimal(self.amount) * REBATE_RATE).quantize(Decimal('0.01'))
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'rebate_claims'
        ordering = ['-month', '-created_at']
        constraints = [
            models.UniqueConstraint(fields=['store', 'month'], name='uniq_rebate_store_month'),
        ]
