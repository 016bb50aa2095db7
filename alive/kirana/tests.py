"""
Test suite for the Kirana store module
Tests: store registration, updates, listing filters, nearby search and analytics
"""
from decimal import Decimal
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from alive.core.models import AuditLog, User
from alive.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from alive.kirana.analytics import build_store_analytics
from alive.kirana.models import KiranaStore
from alive.kirana.utils import nearby_stores
from alive.orders.models import Order
from alive.rebates.models import RebateClaim


def store_payload(**overrides):
    data = {
        'name': 'Sharma General Store',
        'owner_name': 'Ramesh Sharma',
        'owner_phone': '9812345678',
        'address': '14 Linking Road, Bandra West',
        'city': 'Mumbai',
        'state': 'Maharashtra',
        'pincode': '400050',
        'latitude': 19.0760,
        'longitude': 72.8777,
        'store_type': 'grocery',
    }
    data.update(overrides)
    return data


class StoreCreateAPITests(TestCase):
    """Test store registration"""

    def setUp(self):
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)

    def test_create_store_promotes_customer(self):
        """Test registering a store makes the customer a kirana owner"""
        response = self.client.post('/api/kirana', store_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Store created successfully')
        data = response.data['data']
        self.assertEqual(data['owner_id'], self.customer.id)
        self.assertTrue(data['is_active'])
        self.assertFalse(data['is_verified'])

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.role, User.ROLE_KIRANA)
        self.assertTrue(AuditLog.objects.filter(action='store_create', object_id=str(data['id'])).exists())

    def test_create_store_requires_login(self):
        """Test registering a store without login"""
        self.client.logout()
        response = self.client.post('/api/kirana', store_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error']['message'], 'No authentication token provided')

    def test_create_store_rejects_bad_token(self):
        """Test registering a store with a bad token"""
        self.client.credentials(HTTP_AUTHORIZATION='Bearer broken')
        response = self.client.post('/api/kirana', store_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error']['message'], 'Invalid token. Please login again.')

    def test_duplicate_owner_phone(self):
        """Test owner phone must be unique"""
        TestDataFactory.create_store(owner_phone='9812345678')
        response = self.client.post('/api/kirana', store_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['message'], 'Store with this phone number already exists')

    def test_short_address(self):
        """Test address length validation"""
        response = self.client.post('/api/kirana', store_payload(address='Bandra'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Address is required (minimum 10 characters)')

    def test_invalid_store_type(self):
        """Test unknown store type is rejected"""
        response = self.client.post('/api/kirana', store_payload(store_type='mall'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Invalid store type', response.data['error']['message'])

    def test_invalid_gstin(self):
        """Test malformed GSTIN is rejected"""
        response = self.client.post('/api/kirana', store_payload(gstin='ABC'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class StoreDetailAPITests(TestCase):
    """Test store retrieval and updates"""

    def setUp(self):
        self.owner = TestDataFactory.create_user(role=User.ROLE_KIRANA)
        self.store = TestDataFactory.create_store(owner=self.owner)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def test_get_store_is_public(self):
        """Test store detail needs no login"""
        self.client.logout()
        response = self.client.get(f'/api/kirana/{self.store.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['name'], self.store.name)

    def test_get_store_ignores_bad_token(self):
        """Test store detail ignores a bad token"""
        self.client.credentials(HTTP_AUTHORIZATION='Bearer broken')
        response = self.client.get(f'/api/kirana/{self.store.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_get_missing_store(self):
        """Test retrieving a missing store"""
        response = self.client.get('/api/kirana/999999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['message'], 'Store not found')

    def test_owner_updates_store(self):
        """Test owner updating their store"""
        response = self.client.patch(f'/api/kirana/{self.store.id}', {'name': 'New Name Store'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Store updated successfully')
        self.store.refresh_from_db()
        self.assertEqual(self.store.name, 'New Name Store')

    def test_owner_cannot_verify_own_store(self):
        """Test owners cannot set the verified flag"""
        response = self.client.patch(f'/api/kirana/{self.store.id}', {'is_verified': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.store.refresh_from_db()
        self.assertFalse(self.store.is_verified)

    def test_admin_verifies_store(self):
        """Test admin verifying a store"""
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.patch(f'/api/kirana/{self.store.id}', {'is_verified': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.store.refresh_from_db()
        self.assertTrue(self.store.is_verified)

    def test_other_owner_cannot_update(self):
        """Test updating someone else's store"""
        self.client.authenticate_user(TestDataFactory.create_user(role=User.ROLE_KIRANA))
        response = self.client.patch(f'/api/kirana/{self.store.id}', {'name': 'Hijacked'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['message'], 'You can only update your own store')

    def test_update_to_taken_phone(self):
        """Test updating to a phone used by another store"""
        other = TestDataFactory.create_store()
        response = self.client.patch(f'/api/kirana/{self.store.id}', {'owner_phone': other.owner_phone}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['message'], 'Phone number already in use by another store')

    def test_update_validates_present_fields(self):
        """Test update validates only the fields sent"""
        response = self.client.patch(f'/api/kirana/{self.store.id}', {'pincode': '12'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Invalid pincode. Must be 6 digits')

    def test_other_owner_with_bad_body(self):
        """Test ownership is checked before the payload"""
        self.client.authenticate_user(TestDataFactory.create_user(role=User.ROLE_KIRANA))
        response = self.client.patch(f'/api/kirana/{self.store.id}', {'pincode': '12'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_missing_store_with_bad_body(self):
        """Test missing store is reported before the payload"""
        response = self.client.patch('/api/kirana/999999', {'pincode': '12'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class StoreListAPITests(TestCase):
    """Test store listing and filters"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        TestDataFactory.create_store(city='Mumbai', store_type='grocery')
        TestDataFactory.create_store(city='Pune', state='Maharashtra', store_type='medical')
        TestDataFactory.create_store(city='Mumbai', is_active=False)

    def test_list_all(self):
        """Test listing stores"""
        response = self.client.get('/api/kirana')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']['stores']), 3)
        self.assertEqual(response.data['data']['pagination']['total'], 3)

    def test_filter_city_case_insensitive(self):
        """Test city filter ignores case"""
        response = self.client.get('/api/kirana', {'city': 'mumbai'})
        self.assertEqual(len(response.data['data']['stores']), 2)

    def test_filter_active_flag(self):
        """Test active filter"""
        response = self.client.get('/api/kirana', {'city': 'Mumbai', 'is_active': 'true'})
        self.assertEqual(len(response.data['data']['stores']), 1)
        response = self.client.get('/api/kirana', {'is_active': 'false'})
        self.assertEqual(len(response.data['data']['stores']), 1)

    def test_pagination(self):
        """Test limit and offset pagination"""
        response = self.client.get('/api/kirana', {'limit': 2, 'offset': 0})
        self.assertEqual(len(response.data['data']['stores']), 2)
        self.assertTrue(response.data['data']['pagination']['has_more'])


class NearbyStoreTests(TestCase):
    """Test the nearby store search"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.dadar = TestDataFactory.create_store(name='Dadar Store', latitude=19.0760, longitude=72.8777)
        self.matunga = TestDataFactory.create_store(name='Matunga Store', latitude=19.0825, longitude=72.8808)
        self.pune = TestDataFactory.create_store(name='Pune Store', latitude=18.5204, longitude=73.8567)
        TestDataFactory.create_store(name='Closed Store', latitude=19.0761, longitude=72.8778, is_active=False)

    def test_nearby_sorted_by_distance(self):
        """Test nearby stores are sorted by distance"""
        response = self.client.get('/api/kirana/nearby', {'lat': 19.0760, 'lng': 72.8777, 'radius': 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['count'], 2)
        self.assertEqual([s['name'] for s in data['stores']], ['Dadar Store', 'Matunga Store'])
        self.assertEqual(data['stores'][0]['distance'], 0)

    def test_nearby_requires_coordinates(self):
        """Test nearby search without coordinates"""
        response = self.client.get('/api/kirana/nearby', {'lat': 19.0760})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Latitude and longitude are required')

    def test_nearby_rejects_non_numeric_coordinates(self):
        """Test nearby search with non numeric coordinates"""
        response = self.client.get('/api/kirana/nearby', {'lat': 'abc', 'lng': 72.8777})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Invalid coordinates or radius')

    def test_nearby_rejects_non_finite_values(self):
        """Test nearby search with infinite values"""
        for params in ({'lat': 'inf', 'lng': 72.8777},
                       {'lat': '1e400', 'lng': 72.8777},
                       {'lat': 19.0760, 'lng': 72.8777, 'radius': 'inf'}):
            response = self.client.get('/api/kirana/nearby', params)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data['error']['message'], 'Invalid coordinates or radius')

    def test_nearby_rejects_negative_radius(self):
        """Test nearby search with a negative radius"""
        response = self.client.get('/api/kirana/nearby', {'lat': 19.0760, 'lng': 72.8777, 'radius': -2})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Invalid coordinates or radius')

    def test_nearby_helper_excludes_store(self):
        """Test nearby helper can exclude a store"""
        stores = nearby_stores(19.0760, 72.8777, 5, exclude_id=self.dadar.id)
        self.assertEqual([s.id for s in stores], [self.matunga.id])


class StoreAnalyticsTests(TestCase):
    """Test store analytics"""

    def setUp(self):
        self.owner = TestDataFactory.create_user(role=User.ROLE_KIRANA)
        self.store = TestDataFactory.create_store(owner=self.owner)
        self.product = TestDataFactory.create_product(store=self.store, discounted_price=Decimal('90.00'))
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def _complete(self, order):
        order.status = Order.STATUS_COMPLETED
        order.completed_at = timezone.now()
        order.save()

    def test_empty_store(self):
        """Test analytics for a store with no activity"""
        analytics = build_store_analytics(self.store)
        self.assertEqual(analytics['overview']['total_orders'], 0)
        self.assertEqual(analytics['overview']['total_products'], 1)
        self.assertEqual(analytics['earnings']['total_earned'], Decimal('0.00'))
        self.assertEqual(analytics['performance']['conversion_rate'], 0.0)
        self.assertEqual(analytics['location']['coverage_radius'], 5)

    def test_earnings_from_orders_and_rebates(self):
        """Test earnings from completed orders and approved rebates"""
        customer = TestDataFactory.create_user()
        first = TestDataFactory.create_order(customer=customer, store=self.store, products=[self.product], quantity=2)
        second = TestDataFactory.create_order(customer=customer, store=self.store, products=[self.product], quantity=1)
        TestDataFactory.create_order(store=self.store, products=[self.product], quantity=1)
        self._complete(first)
        self._complete(second)
        TestDataFactory.create_rebate_claim(store=self.store, amount=Decimal('1000.00'),
                                            status=RebateClaim.STATUS_APPROVED)
        TestDataFactory.create_rebate_claim(store=self.store, month='2026-02', amount=Decimal('500.00'))

        analytics = build_store_analytics(self.store)
        # 5% of 90.00 per unit over three completed units
        self.assertEqual(analytics['earnings']['order_commissions'], Decimal('13.50'))
        self.assertEqual(analytics['earnings']['bill_rebates'], Decimal('150.00'))
        self.assertEqual(analytics['earnings']['total_earned'], Decimal('163.50'))
        self.assertEqual(analytics['earnings']['pending_payout'], Decimal('163.50'))
        self.assertEqual(analytics['orders']['completed'], 2)
        self.assertEqual(analytics['orders']['pending'], 1)
        self.assertEqual(analytics['performance']['conversion_rate'], 66.67)
        self.assertEqual(analytics['performance']['customer_retention'], 100.0)
        self.assertEqual(analytics['performance']['average_order_value'], Decimal('135.00'))

    def test_nearby_store_count(self):
        """Test nearby store count excludes the store itself"""
        TestDataFactory.create_store(latitude=19.0825, longitude=72.8808)
        analytics = build_store_analytics(self.store)
        self.assertEqual(analytics['location']['nearby_stores'], 1)

    def test_analytics_endpoint(self):
        """Test analytics endpoint for the owner"""
        response = self.client.get(f'/api/kirana/{self.store.id}/analytics')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['store_id'], self.store.id)

    def test_analytics_other_owner(self):
        """Test analytics for someone else's store"""
        self.client.authenticate_user(TestDataFactory.create_user(role=User.ROLE_KIRANA))
        response = self.client.get(f'/api/kirana/{self.store.id}/analytics')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['message'], 'You can only view analytics for your own store')


class StoreModelTests(TestCase):
    """Test KiranaStore model"""

    def test_str(self):
        """Test store string representation"""
        store = TestDataFactory.create_store(name='Gupta Kirana')
        self.assertIn('Gupta Kirana', str(store))

    def test_defaults(self):
        """Test store defaults"""
        store = TestDataFactory.create_store()
        self.assertTrue(store.is_active)
        self.assertFalse(store.is_verified)
        self.assertEqual(KiranaStore.objects.count(), 1)
