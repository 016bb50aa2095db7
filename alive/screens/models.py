import hashlib
import secrets
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

from alive.kirana.models import KiranaStore


def hash_api_key(raw_key):
    return hashlib.sha256(raw_key.encode('utf-8')).hexdigest()


class AdScreenManager(models.Manager):
    def register(self, store, device_id, name=''):
        """Create a screen and return ``(screen, raw_key)``; only the hash is stored"""
        raw_key = secrets.token_urlsafe(32)
        screen = self.create(store=store, device_id=device_id, name=name, api_key_hash=hash_api_key(raw_key))
        return screen, raw_key

    def for_key(self, raw_key):
        return self.select_related('store').filter(api_key_hash=hash_api_key(raw_key)).first()


class AdScreen(models.Model):
    """Advertising display installed in a kirana store"""
    STATUS_ONLINE = 'online'
    STATUS_OFFLINE = 'offline'
    STATUS_ERROR = 'error'
    STATUS_CHOICES = [
        (STATUS_ONLINE, 'Online'),
        (STATUS_OFFLINE, 'Offline'),
        (STATUS_ERROR, 'Error'),
    ]

    store = models.ForeignKey(KiranaStore, on_delete=models.CASCADE, related_name='screens')
    device_id = models.CharField(max_length=100, unique=True)
    name = models.CharField(max_length=200, blank=True)
    api_key_hash = models.CharField(max_length=64, unique=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_OFFLINE)
    last_heartbeat_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AdScreenManager()

    class Meta:
        db_table = 'ad_screens'
        ordering = ['store_id', 'id']

    def __str__(self):
        return f"{self.name or self.device_id} ({self.store.name})"

    @property
    def effective_status(self):
        """Reported status, or offline once heartbeats have stopped"""
        if self.last_heartbeat_at is None:
            return self.STATUS_OFFLINE
        cutoff = timezone.now() - timedelta(seconds=settings.SCREEN_OFFLINE_AFTER_SECONDS)
        if self.last_heartbeat_at < cutoff:
            return self.STATUS_OFFLINE
        return self.status
