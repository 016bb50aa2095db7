"""
Test suite for the Rebates module
Tests: claim submission, one claim per store and month, visibility and admin review
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from alive.core.models import AuditLog, User
from alive.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from alive.rebates.models import RebateClaim


class RebateClaimModelTests(TestCase):
    """Test RebateClaim model"""

    def test_rebate_amount_is_fifteen_percent(self):
        """Test rebate is 15 percent of the bill"""
        claim = TestDataFactory.create_rebate_claim(amount=Decimal('1234.50'))
        self.assertEqual(claim.rebate_amount, Decimal('185.18'))

    def test_rebate_amount_follows_amount(self):
        """Test rebate is recomputed when the amount changes"""
        claim = TestDataFactory.create_rebate_claim(amount=Decimal('100.00'))
        claim.amount = Decimal('200.00')
        claim.save()
        claim.refresh_from_db()
        self.assertEqual(claim.rebate_amount, Decimal('30.00'))


class RebateSubmitAPITests(TestCase):
    """Test claim submission"""

    def setUp(self):
        self.owner = TestDataFactory.create_user(role=User.ROLE_KIRANA)
        self.store = TestDataFactory.create_store(owner=self.owner)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def _payload(self, **overrides):
        data = {
            'store': self.store.id,
            'month': '2026-03',
            'amount': '2400.00',
            'bill_image_url': 'https://cdn.example.com/bill-march.jpg',
            'provider_name': 'BEST Undertaking',
        }
        data.update(overrides)
        return data

    def test_submit_claim(self):
        """Test submitting a claim via API"""
        response = self.client.post('/api/rebates', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Rebate claim submitted successfully')
        data = response.data['data']
        self.assertEqual(data['status'], RebateClaim.STATUS_PENDING)
        self.assertEqual(data['rebate_amount'], Decimal('360.00'))
        self.assertEqual(data['submitted_by_id'], self.owner.id)
        self.assertTrue(AuditLog.objects.filter(action='rebate_submit', object_id=str(data['id'])).exists())

    def test_one_claim_per_month(self):
        """Test a second claim for the same month should fail"""
        self.client.post('/api/rebates', self._payload(), format='json')
        response = self.client.post('/api/rebates', self._payload(amount='100'), format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['message'], 'A rebate claim for 2026-03 already exists for this store')

    def test_bad_month(self):
        """Test month must be YYYY-MM"""
        response = self.client.post('/api/rebates', self._payload(month='2026-13'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'month: Month must be in YYYY-MM format')

    def test_amount_must_be_positive(self):
        """Test zero amount should fail"""
        response = self.client.post('/api/rebates', self._payload(amount='0'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'amount: Amount must be a positive number')

    def test_other_store(self):
        """Test submitting for someone else's store"""
        other = TestDataFactory.create_store()
        response = self.client.post('/api/rebates', self._payload(store=other.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['message'], 'You can only submit claims for your own store')


class RebateListAPITests(TestCase):
    """Test claim listing"""

    def setUp(self):
        self.owner = TestDataFactory.create_user(role=User.ROLE_KIRANA)
        self.store = TestDataFactory.create_store(owner=self.owner)
        TestDataFactory.create_rebate_claim(store=self.store, month='2026-01')
        TestDataFactory.create_rebate_claim(store=self.store, month='2026-02', status=RebateClaim.STATUS_APPROVED)
        TestDataFactory.create_rebate_claim(month='2026-01')
        self.client = AuthenticatedAPIClient()

    def test_owner_sees_own_claims(self):
        """Test owners list only their claims"""
        self.client.authenticate_user(self.owner)
        response = self.client.get('/api/rebates')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']['claims']), 2)
        self.assertEqual(response.data['data']['claims'][0]['month'], '2026-02')

    def test_admin_sees_all_with_filters(self):
        """Test admin listing with filters"""
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/rebates')
        self.assertEqual(len(response.data['data']['claims']), 3)
        response = self.client.get('/api/rebates', {'month': '2026-01'})
        self.assertEqual(len(response.data['data']['claims']), 2)
        response = self.client.get('/api/rebates', {'status': 'approved'})
        self.assertEqual(len(response.data['data']['claims']), 1)

    def test_customer_sees_nothing(self):
        """Test customers have no claims"""
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/rebates')
        self.assertEqual(response.data['data']['claims'], [])


class RebateReviewAPITests(TestCase):
    """Test admin review"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.claim = TestDataFactory.create_rebate_claim()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.url = f'/api/rebates/{self.claim.id}/review'

    def test_approve(self):
        """Test approving a claim"""
        response = self.client.post(self.url, {'status': 'approved', 'note': 'Bill verified'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Rebate claim approved')
        self.claim.refresh_from_db()
        self.assertEqual(self.claim.status, RebateClaim.STATUS_APPROVED)
        self.assertEqual(self.claim.reviewed_by, self.admin)
        self.assertIsNotNone(self.claim.reviewed_at)

    def test_review_only_once(self):
        """Test a reviewed claim cannot be reviewed again"""
        self.client.post(self.url, {'status': 'rejected'}, format='json')
        response = self.client.post(self.url, {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['message'], 'Rebate claim has already been reviewed')

    def test_invalid_status(self):
        """Test review status must be approved or rejected"""
        response = self.client.post(self.url, {'status': 'pending'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_owner_cannot_review(self):
        """Test owners cannot review claims"""
        self.client.authenticate_user(self.claim.store.owner)
        response = self.client.post(self.url, {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['message'], 'Access denied. Required roles: admin')

    def test_missing_claim(self):
        """Test reviewing a missing claim"""
        response = self.client.post('/api/rebates/999999/review', {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
