"""
Test suite for the Orders module
Tests: order placement, stock handling, status transitions, pickup verification and visibility
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from alive.core.errors import ConflictError, ValidationError
from alive.core.models import User
from alive.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from alive.orders.models import Order
from alive.orders.services import change_status, place_order, verify_pickup


class OrderServiceTests(TestCase):
    """Test the order service functions"""

    def setUp(self):
        self.customer = TestDataFactory.create_user()
        self.owner = TestDataFactory.create_user(role=User.ROLE_KIRANA)
        self.store = TestDataFactory.create_store(owner=self.owner)
        self.product = TestDataFactory.create_product(store=self.store, discounted_price=Decimal('90.00'),
                                                      stock_quantity=5, max_order_qty=4)

    def test_place_order_totals_and_stock(self):
        """Test placing an order computes totals and takes stock"""
        order = place_order(self.customer, self.store, [{'product': self.product.id, 'quantity': 3}])
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.total, Decimal('270.00'))
        self.assertEqual(order.commission_amount, Decimal('13.50'))
        self.assertEqual(len(order.pickup_otp), 4)
        self.assertTrue(order.order_number.startswith('ORD-'))
        self.assertEqual(order.items.count(), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 2)

    def test_insufficient_stock(self):
        """Test ordering more than the stock should fail"""
        self.product.max_order_qty = 10
        self.product.save()
        with self.assertRaisesMessage(ValidationError, f'Insufficient stock for {self.product.name}. Available: 5'):
            place_order(self.customer, self.store, [{'product': self.product.id, 'quantity': 6}])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)

    def test_quantity_above_maximum(self):
        """Test ordering above the maximum quantity"""
        with self.assertRaisesMessage(ValidationError, 'Maximum order quantity'):
            place_order(self.customer, self.store, [{'product': self.product.id, 'quantity': 5}])

    def test_order_total_too_large(self):
        """Test an order total that does not fit is rejected"""
        product = TestDataFactory.create_product(store=self.store, mrp=Decimal('99999999.00'),
                                                 discounted_price=Decimal('99999999.00'),
                                                 stock_quantity=500, max_order_qty=500)
        with self.assertRaisesMessage(ValidationError, 'Order total is too large'):
            place_order(self.customer, self.store, [{'product': product.id, 'quantity': 200}])
        self.assertFalse(Order.objects.exists())
        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 500)

    def test_product_from_another_store(self):
        """Test ordering a product the store does not sell"""
        other_product = TestDataFactory.create_product()
        with self.assertRaisesMessage(ValidationError, 'is not available at this store'):
            place_order(self.customer, self.store, [{'product': other_product.id, 'quantity': 1}])

    def test_inactive_store(self):
        """Test ordering from an inactive store"""
        self.store.is_active = False
        self.store.save()
        with self.assertRaisesMessage(ValidationError, 'Store is not accepting orders'):
            place_order(self.customer, self.store, [{'product': self.product.id, 'quantity': 1}])

    def test_store_flow_to_completion(self):
        """Test pending to completed through pickup"""
        order = place_order(self.customer, self.store, [{'product': self.product.id, 'quantity': 1}])
        change_status(order.id, Order.STATUS_PACKED, self.owner)
        change_status(order.id, Order.STATUS_READY, self.owner)
        order = verify_pickup(order.id, order.pickup_otp, self.owner)
        self.assertEqual(order.status, Order.STATUS_COMPLETED)
        self.assertIsNotNone(order.completed_at)

    def test_skipping_a_step(self):
        """Test status steps cannot be skipped"""
        order = place_order(self.customer, self.store, [{'product': self.product.id, 'quantity': 1}])
        with self.assertRaisesMessage(ConflictError, 'Cannot change order status from pending to ready'):
            change_status(order.id, Order.STATUS_READY, self.owner)

    def test_cancel_restores_stock(self):
        """Test cancelling gives the stock back"""
        order = place_order(self.customer, self.store, [{'product': self.product.id, 'quantity': 2}])
        order, old_status = change_status(order.id, Order.STATUS_CANCELLED, self.customer)
        self.assertEqual(old_status, Order.STATUS_PENDING)
        self.assertIsNotNone(order.cancelled_at)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)

    def test_customer_cannot_cancel_after_packing(self):
        """Test customers cancel only pending orders"""
        order = place_order(self.customer, self.store, [{'product': self.product.id, 'quantity': 1}])
        change_status(order.id, Order.STATUS_PACKED, self.owner)
        with self.assertRaisesMessage(ConflictError, 'Order can only be cancelled while it is pending'):
            change_status(order.id, Order.STATUS_CANCELLED, self.customer)

    def test_pickup_requires_ready(self):
        """Test pickup before the order is ready"""
        order = place_order(self.customer, self.store, [{'product': self.product.id, 'quantity': 1}])
        with self.assertRaisesMessage(ConflictError, 'Order is not ready for pickup'):
            verify_pickup(order.id, order.pickup_otp, self.owner)


class OrderAPITests(TestCase):
    """Test Order API endpoints"""

    def setUp(self):
        self.customer = TestDataFactory.create_user()
        self.owner = TestDataFactory.create_user(role=User.ROLE_KIRANA)
        self.store = TestDataFactory.create_store(owner=self.owner)
        self.product = TestDataFactory.create_product(store=self.store, stock_quantity=10)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)

    def _place(self, quantity=1):
        data = {'store': self.store.id, 'items': [{'product': self.product.id, 'quantity': quantity}]}
        return self.client.post('/api/orders', data, format='json')

    def test_place_order(self):
        """Test placing an order via API"""
        response = self._place(2)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Order placed successfully')
        self.assertIn('pickup_otp', response.data['data'])
        self.assertEqual(len(response.data['data']['items']), 1)

    def test_place_order_without_items(self):
        """Test placing an order without items should fail"""
        response = self.client.post('/api/orders', {'store': self.store.id, 'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Order must contain at least one item', response.data['error']['message'])

    def test_place_order_requires_login(self):
        """Test placing an order without login"""
        self.client.logout()
        response = self._place()
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_store_does_not_see_pickup_otp(self):
        """Test pickup OTP is hidden from the store"""
        order_id = self._place().data['data']['id']
        self.client.authenticate_user(self.owner)
        response = self.client.get(f'/api/orders/{order_id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('pickup_otp', response.data['data'])

    def test_stranger_cannot_see_order(self):
        """Test unrelated users cannot view an order"""
        order_id = self._place().data['data']['id']
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get(f'/api/orders/{order_id}')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_order_not_found(self):
        """Test retrieving a missing order"""
        response = self.client.get('/api/orders/999999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['message'], 'Order not found')

    def test_list_visibility(self):
        """Test order listing per role"""
        self._place()
        TestDataFactory.create_order(store=self.store, products=[self.product])
        TestDataFactory.create_order()

        response = self.client.get('/api/orders')
        self.assertEqual(response.data['data']['pagination']['total'], 1)

        self.client.authenticate_user(self.owner)
        response = self.client.get('/api/orders')
        self.assertEqual(response.data['data']['pagination']['total'], 2)

        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/orders', {'status': 'pending'})
        self.assertEqual(response.data['data']['pagination']['total'], 3)

    def test_status_and_pickup_flow(self):
        """Test status updates and pickup via API"""
        placed = self._place().data['data']
        otp = placed['pickup_otp']
        self.client.authenticate_user(self.owner)

        response = self.client.post(f"/api/orders/{placed['id']}/status", {'status': 'packed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Order marked as packed')
        self.client.post(f"/api/orders/{placed['id']}/status", {'status': 'ready'}, format='json')

        wrong = '0000' if otp != '0000' else '1111'
        response = self.client.post(f"/api/orders/{placed['id']}/verify-pickup", {'otp': wrong}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Invalid OTP')

        response = self.client.post(f"/api/orders/{placed['id']}/verify-pickup", {'otp': otp}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Order picked up successfully')
        self.assertEqual(response.data['data']['status'], Order.STATUS_COMPLETED)

    def test_customer_cannot_pack(self):
        """Test customers cannot move orders forward"""
        order_id = self._place().data['data']['id']
        response = self.client.post(f'/api/orders/{order_id}/status', {'status': 'packed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['message'], 'Customers can only cancel their orders')

    def test_customer_cannot_confirm_pickup(self):
        """Test customers cannot confirm pickup"""
        placed = self._place().data['data']
        response = self.client.post(f"/api/orders/{placed['id']}/verify-pickup", {'otp': placed['pickup_otp']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['message'], 'Only the store can confirm a pickup')

    def test_invalid_status_value(self):
        """Test unknown status value"""
        order_id = self._place().data['data']['id']
        response = self.client.post(f'/api/orders/{order_id}/status', {'status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
