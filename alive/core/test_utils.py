"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient
from alive.core.tokens import tokens_for_user
from alive.kirana.models import KiranaStore
from alive.products.models import AdvertisedProduct
from alive.orders.services import place_order
from alive.rebates.models import RebateClaim
from alive.screens.models import AdScreen
from decimal import Decimal
import random
import string

User = get_user_model()

# central Mumbai; used as the default store location
MUMBAI_LAT = 19.0760
MUMBAI_LNG = 72.8777


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def random_phone():
        """Generate a valid Indian mobile number"""
        phone = f'9{random.randint(100000000, 999999999)}'
        while User.objects.filter(phone=phone).exists() or KiranaStore.objects.filter(owner_phone=phone).exists():
            phone = f'9{random.randint(100000000, 999999999)}'
        return phone

    @staticmethod
    def create_user(phone=None, name=None, role=User.ROLE_CUSTOMER, is_verified=True):
        """Create a test user"""
        if not phone:
            phone = TestDataFactory.random_phone()
        if not name:
            name = f'User {TestDataFactory.random_string(5)}'
        return User.objects.create_phone_user(phone=phone, name=name, role=role, is_verified=is_verified)

    @staticmethod
    def create_admin(**kwargs):
        return TestDataFactory.create_user(role=User.ROLE_ADMIN, **kwargs)

    @staticmethod
    def create_store(owner=None, name=None, latitude=MUMBAI_LAT, longitude=MUMBAI_LNG, **kwargs):
        """Create a test kirana store"""
        if owner is None:
            owner = TestDataFactory.create_user(role=User.ROLE_KIRANA)
        if not name:
            name = f'Store {TestDataFactory.random_string(6)}'
        fields = {
            'owner_name': owner.name,
            'owner_phone': TestDataFactory.random_phone(),
            'address': '12 Station Road, Dadar West',
            'city': 'Mumbai',
            'state': 'Maharashtra',
            'pincode': '400028',
            'store_type': 'general',
        }
        fields.update(kwargs)
        return KiranaStore.objects.create(owner=owner, name=name, latitude=latitude, longitude=longitude, **fields)

    @staticmethod
    def create_product(store=None, name=None, mrp=Decimal('100.00'), discounted_price=Decimal('90.00'),
                       stock_quantity=20, **kwargs):
        """Create a test advertised product"""
        if store is None:
            store = TestDataFactory.create_store()
        if not name:
            name = f'Product {TestDataFactory.random_string(6)}'
        fields = {
            'brand': 'Tata',
            'category': 'Staples',
            'image_url': 'https://cdn.example.com/p.png',
            'discount_percent': Decimal('10.00'),
        }
        fields.update(kwargs)
        return AdvertisedProduct.objects.create(
            store=store,
            name=name,
            mrp=mrp,
            discounted_price=discounted_price,
            stock_quantity=stock_quantity,
            **fields
        )

    @staticmethod
    def create_order(customer=None, store=None, products=None, quantity=1):
        """Place an order through the order service"""
        if customer is None:
            customer = TestDataFactory.create_user()
        if store is None:
            store = TestDataFactory.create_store()
        if not products:
            products = [TestDataFactory.create_product(store=store)]
        items = [{'product': product.id, 'quantity': quantity} for product in products]
        return place_order(customer, store, items)

    @staticmethod
    def create_rebate_claim(store=None, month='2026-01', amount=Decimal('1000.00'), status=RebateClaim.STATUS_PENDING):
        """Create a test rebate claim"""
        if store is None:
            store = TestDataFactory.create_store()
        return RebateClaim.objects.create(
            store=store,
            submitted_by=store.owner,
            month=month,
            amount=amount,
            bill_image_url='https://cdn.example.com/bill.jpg',
            status=status,
        )

    @staticmethod
    def create_screen(store=None, device_id=None, name='Counter screen'):
        """Register a test screen; returns ``(screen, raw_key)``"""
        if store is None:
            store = TestDataFactory.create_store()
        if not device_id:
            device_id = f'DEV-{TestDataFactory.random_string(8).upper()}'
        return AdScreen.objects.register(store=store, device_id=device_id, name=name)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        tokens = tokens_for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens["access"]}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()


def clear_cache():
    """OTPs live in the cache; tests start from an empty one"""
    cache.clear()
