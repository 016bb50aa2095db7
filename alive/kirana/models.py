from django.conf import settings
from django.db import models


class KiranaStore(models.Model):
    """Neighborhood stores that run ALIVE screens and sell advertised products"""
    STORE_TYPE_CHOICES = [
        ('general', 'General Store'),
        ('grocery', 'Grocery'),
        ('medical', 'Medical'),
        ('electronics', 'Electronics'),
        ('other', 'Other'),
    ]

    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='kirana_stores')
    name = models.CharField(max_length=200)
    owner_name = models.CharField(max_length=200)
    owner_phone = models.CharField(max_length=15, unique=True)
    email = models.EmailField(blank=True, null=True)
    address = models.TextField()
    city = models.CharField(max_length=100, db_index=True)
    state = models.CharField(max_length=100)
    pincode = models.CharField(max_length=6)
    latitude = models.FloatField()
    longitude = models.FloatField()
    store_type = models.CharField(max_length=20, choices=STORE_TYPE_CHOICES, default='general')
    gstin = models.CharField(max_length=15, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    is_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'kirana_stores'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['latitude', 'longitude'], name='idx_store_location'),
            models.Index(fields=['is_active', 'store_type'], name='idx_store_active_type'),
        ]
