from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.db import models


class UserManager(DjangoUserManager):
    def create_phone_user(self, phone, name='', role='customer', **extra_fields):
        """Create a user who signs in with phone + OTP (no password)"""
        user = self.model(username=phone, phone=phone, name=name, role=role, **extra_fields)
        user.set_unusable_password()
        user.save(using=self._db)
        return user


class User(AbstractUser):
    """Extended user model; customers and store owners log in by phone"""
    ROLE_CUSTOMER = 'customer'
    ROLE_KIRANA = 'kirana'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = [
        (ROLE_CUSTOMER, 'Customer'),
        (ROLE_KIRANA, 'Kirana Store Owner'),
        (ROLE_ADMIN, 'Admin'),
    ]

    phone = models.CharField(max_length=15, unique=True, blank=True, null=True)
    name = models.CharField(max_length=200, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CUSTOMER, db_index=True)
    is_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    class Meta:
        db_table = 'users'

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN or self.is_superuser

    def has_role(self, *roles):
        if self.ROLE_ADMIN in roles and self.is_superuser:
            return True
        return self.role in roles


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('signup', 'Signup'),
        ('login', 'Login'),
        ('logout', 'Logout'),
        ('store_create', 'Store Created'),
        ('store_update', 'Store Updated'),
        ('product_create', 'Product Added'),
        ('product_update', 'Product Updated'),
        ('product_remove', 'Product Removed'),
        ('order_create', 'Order Placed'),
        ('order_status', 'Order Status Changed'),
        ('order_pickup', 'Order Picked Up'),
        ('rebate_submit', 'Rebate Claim Submitted'),
        ('rebate_review', 'Rebate Claim Reviewed'),
        ('screen_register', 'Screen Registered'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., store name, order number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.action} {self.model_name}#{self.object_id}"

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_created'),
            models.Index(fields=['action'], name='idx_audit_action'),
            models.Index(fields=['model_name'], name='idx_audit_model'),
        ]
