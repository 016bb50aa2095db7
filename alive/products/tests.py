"""
Test suite for the advertised products module
Tests: commission and discount maths, product CRUD under a store, listing filters, nearby search
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from alive.core.errors import ValidationError
from alive.core.models import User
from alive.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from alive.products.models import AdvertisedProduct, calculate_commission, calculate_discount_percent
from alive.products.validators import validate_product, validate_product_update


def product_payload(**overrides):
    data = {
        'name': 'Tata Salt 1kg',
        'brand': 'Tata',
        'category': 'Staples',
        'image_url': 'https://cdn.example.com/salt.png',
        'mrp': 28,
        'discounted_price': 25,
        'stock_quantity': 40,
    }
    data.update(overrides)
    return data


class ProductModelTests(TestCase):
    """Test AdvertisedProduct calculations"""

    def test_percentage_commission(self):
        """Test percentage commission calculation"""
        self.assertEqual(calculate_commission(Decimal('90.00'), 'percentage', Decimal('5.00')), Decimal('4.50'))

    def test_fixed_commission(self):
        """Test fixed commission calculation"""
        self.assertEqual(calculate_commission(Decimal('90.00'), 'fixed', Decimal('3')), Decimal('3.00'))

    def test_discount_percent_rounds_to_cents(self):
        """Test discount percent rounding"""
        self.assertEqual(calculate_discount_percent(Decimal('28'), Decimal('25')), Decimal('10.71'))

    def test_availability_follows_stock(self):
        """Test availability tracks stock"""
        product = TestDataFactory.create_product(stock_quantity=0)
        self.assertFalse(product.is_available)
        product.stock_quantity = 3
        product.save(update_fields=['stock_quantity'])
        product.refresh_from_db()
        self.assertTrue(product.is_available)


class ProductValidatorTests(TestCase):
    """Test product payload rules"""

    def test_valid_product_defaults(self):
        """Test product validation defaults"""
        parsed = validate_product(product_payload())
        self.assertEqual(parsed['mrp'], Decimal('28'))
        self.assertNotIn('discount_percent', parsed)

    def test_discounted_price_above_mrp(self):
        """Test discounted price above MRP should fail"""
        with self.assertRaisesMessage(ValidationError, 'Discounted price cannot be greater than MRP'):
            validate_product(product_payload(discounted_price=30))

    def test_missing_mrp(self):
        """Test product without MRP should fail"""
        data = product_payload()
        del data['mrp']
        with self.assertRaisesMessage(ValidationError, 'MRP is required'):
            validate_product(data)

    def test_max_below_default_min(self):
        """Test max order quantity below the minimum"""
        with self.assertRaisesMessage(ValidationError, 'Maximum order quantity must be greater than or equal to minimum'):
            validate_product(product_payload(min_order_qty=5, max_order_qty=2))

    def test_percentage_commission_cap(self):
        """Test percentage commission cannot exceed 100"""
        with self.assertRaisesMessage(ValidationError, 'Percentage commission cannot exceed 100%'):
            validate_product(product_payload(commission_value=120))
        # the same value is fine as a fixed amount
        validate_product(product_payload(commission_type='fixed', commission_value=120))

    def test_update_checked_against_stored_values(self):
        """Test partial updates are checked against stored prices"""
        product = TestDataFactory.create_product(mrp=Decimal('100.00'), discounted_price=Decimal('90.00'))
        with self.assertRaisesMessage(ValidationError, 'Discounted price cannot be greater than MRP'):
            validate_product_update({'discounted_price': 150}, product)
        with self.assertRaisesMessage(ValidationError, 'Discounted price cannot be greater than MRP'):
            validate_product_update({'mrp': 80}, product)


class StoreProductAPITests(TestCase):
    """Test product management under /api/kirana/<id>/products"""

    def setUp(self):
        self.owner = TestDataFactory.create_user(role=User.ROLE_KIRANA)
        self.store = TestDataFactory.create_store(owner=self.owner)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.url = f'/api/kirana/{self.store.id}/products'

    def test_add_product_computes_discount(self):
        """Test adding a product via API"""
        response = self.client.post(self.url, product_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Product added successfully')
        data = response.data['data']
        self.assertEqual(data['discount_percent'], Decimal('10.71'))
        self.assertEqual(data['calculated_commission'], Decimal('1.25'))
        self.assertEqual(data['min_order_qty'], 1)
        self.assertEqual(data['max_order_qty'], 10)
        self.assertTrue(data['is_active'])
        self.assertTrue(data['is_available'])

    def test_add_product_to_missing_store(self):
        """Test adding a product to a missing store"""
        response = self.client.post('/api/kirana/999999/products', product_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['message'], 'Store not found')

    def test_add_product_to_other_store(self):
        """Test adding a product to someone else's store"""
        other = TestDataFactory.create_store()
        response = self.client.post(f'/api/kirana/{other.id}/products', product_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_add_product_to_other_store_with_bad_body(self):
        """Test ownership is checked before the payload"""
        other = TestDataFactory.create_store()
        response = self.client.post(f'/api/kirana/{other.id}/products', {'name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_add_product_to_missing_store_with_bad_body(self):
        """Test missing store is reported before the payload"""
        response = self.client.post('/api/kirana/999999/products', {'name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_store_products_is_public(self):
        """Test store product listing needs no login"""
        TestDataFactory.create_product(store=self.store)
        TestDataFactory.create_product(store=self.store, is_active=False)
        self.client.logout()
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['store']['id'], self.store.id)
        self.assertEqual(len(response.data['data']['products']), 1)

    def test_update_recomputes_discount(self):
        """Test price update recomputes the discount"""
        product = TestDataFactory.create_product(store=self.store)
        response = self.client.patch(f'{self.url}/{product.id}', {'discounted_price': 75}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Product updated successfully')
        product.refresh_from_db()
        self.assertEqual(product.discounted_price, Decimal('75.00'))
        self.assertEqual(product.discount_percent, Decimal('25.00'))

    def test_update_stock_to_zero_marks_unavailable(self):
        """Test zero stock marks the product unavailable"""
        product = TestDataFactory.create_product(store=self.store)
        response = self.client.patch(f'{self.url}/{product.id}', {'stock_quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['data']['is_available'])

    def test_update_product_of_another_store(self):
        """Test updating a product through the wrong store"""
        other_product = TestDataFactory.create_product()
        response = self.client.patch(f'{self.url}/{other_product.id}', {'stock_quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['message'], 'Product does not belong to this store')

    def test_update_missing_product(self):
        """Test updating a missing product"""
        response = self.client.patch(f'{self.url}/999999', {'stock_quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['message'], 'Product not found')

    def test_delete_is_soft(self):
        """Test deleting deactivates the product"""
        product = TestDataFactory.create_product(store=self.store)
        response = self.client.delete(f'{self.url}/{product.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Product removed successfully')
        product.refresh_from_db()
        self.assertFalse(product.is_active)
        self.assertTrue(AdvertisedProduct.objects.filter(pk=product.pk).exists())


class ProductListAPITests(TestCase):
    """Test the product listing filters"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.store = TestDataFactory.create_store()
        self.salt = TestDataFactory.create_product(store=self.store, name='Salt', brand='Tata', category='Staples',
                                                   commission_value=Decimal('8.00'))
        self.soap = TestDataFactory.create_product(store=self.store, name='Soap', brand='Lux', category='Personal Care',
                                                   commission_type='fixed', commission_value=Decimal('9.00'),
                                                   stock_quantity=0)
        self.tea = TestDataFactory.create_product(name='Tea', brand='Tata Tea', category='staples')

    def _names(self, params):
        response = self.client.get('/api/products', params)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return sorted(p['name'] for p in response.data['data']['products'])

    def test_category_is_case_insensitive(self):
        """Test category filter ignores case"""
        self.assertEqual(self._names({'category': 'STAPLES'}), ['Salt', 'Tea'])

    def test_brand_contains(self):
        """Test brand filter matches part of the name"""
        self.assertEqual(self._names({'brand': 'tata'}), ['Salt', 'Tea'])

    def test_store_filter(self):
        """Test store filter"""
        self.assertEqual(self._names({'kirana_store_id': self.store.id}), ['Salt', 'Soap'])

    def test_margin_filters(self):
        """Test commission margin filters"""
        # soap: fixed 9.00 on 90.00 is a 10% margin; salt 8%; tea 5%
        self.assertEqual(self._names({'min_margin': 9}), ['Soap'])
        self.assertEqual(self._names({'max_margin': 8}), ['Salt', 'Tea'])

    def test_in_stock(self):
        """Test in stock filter"""
        self.assertEqual(self._names({'in_stock': 'true'}), ['Salt', 'Tea'])
        self.assertEqual(self._names({'in_stock': 'false'}), ['Salt', 'Soap', 'Tea'])

    def test_product_detail_includes_store(self):
        """Test product detail with store summary"""
        response = self.client.get(f'/api/products/{self.salt.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['store']['id'], self.store.id)

    def test_product_detail_not_found(self):
        """Test retrieving a missing product"""
        response = self.client.get('/api/products/999999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class NearbyProductTests(TestCase):
    """Test the nearby product search"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        near = TestDataFactory.create_store(latitude=19.0760, longitude=72.8777)
        nearish = TestDataFactory.create_store(latitude=19.0825, longitude=72.8808)
        far = TestDataFactory.create_store(latitude=18.5204, longitude=73.8567)
        TestDataFactory.create_product(store=nearish, name='Biscuits')
        TestDataFactory.create_product(store=near, name='Milk', category='Dairy')
        TestDataFactory.create_product(store=near, name='Old Stock', is_active=False)
        TestDataFactory.create_product(store=far, name='Far Away')

    def test_nearby_sorted_by_store_distance(self):
        """Test nearby products are sorted by store distance"""
        response = self.client.get('/api/products/nearby', {'lat': 19.0760, 'lng': 72.8777})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['radius'], 5)
        self.assertEqual([p['name'] for p in data['products']], ['Milk', 'Biscuits'])
        self.assertIn('store', data['products'][0])
        self.assertLess(data['products'][0]['distance'], data['products'][1]['distance'])

    def test_nearby_category(self):
        """Test nearby category filter"""
        response = self.client.get('/api/products/nearby', {'lat': 19.0760, 'lng': 72.8777, 'category': 'dairy'})
        self.assertEqual(response.data['data']['count'], 1)

    def test_nearby_in_stock(self):
        """Test nearby in stock filter"""
        store = TestDataFactory.create_store(latitude=19.0761, longitude=72.8778)
        TestDataFactory.create_product(store=store, name='Sold Out Ghee', stock_quantity=0)
        response = self.client.get('/api/products/nearby', {'lat': 19.0760, 'lng': 72.8777})
        self.assertIn('Sold Out Ghee', [p['name'] for p in response.data['data']['products']])
        response = self.client.get('/api/products/nearby', {'lat': 19.0760, 'lng': 72.8777, 'in_stock': 'true'})
        self.assertNotIn('Sold Out Ghee', [p['name'] for p in response.data['data']['products']])
        self.assertEqual(response.data['data']['count'], 2)

    def test_nearby_brand(self):
        """Test nearby brand filter"""
        store = TestDataFactory.create_store(latitude=19.0761, longitude=72.8778)
        TestDataFactory.create_product(store=store, name='Butter', brand='Amul')
        response = self.client.get('/api/products/nearby', {'lat': 19.0760, 'lng': 72.8777, 'brand': 'amu'})
        self.assertEqual([p['name'] for p in response.data['data']['products']], ['Butter'])

    def test_nearby_rejects_bad_coordinates(self):
        """Test nearby search with invalid coordinates or radius"""
        for params in ({'lat': 'abc', 'lng': 72.8777},
                       {'lat': '1e400', 'lng': 72.8777},
                       {'lat': 19.0760, 'lng': 72.8777, 'radius': '-1'}):
            response = self.client.get('/api/products/nearby', params)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data['error']['message'], 'Invalid coordinates or radius')
