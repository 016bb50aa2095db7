"""
Test suite for the ad screens module
Tests: registration, key based heartbeat and effective status
"""
from datetime import timedelta
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from alive.core.models import User
from alive.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from alive.screens.models import AdScreen, hash_api_key


class AdScreenModelTests(TestCase):
    """Test AdScreen model"""

    def test_register_stores_only_key_hash(self):
        """Test only the key hash is stored"""
        screen, raw_key = TestDataFactory.create_screen()
        self.assertNotEqual(screen.api_key_hash, raw_key)
        self.assertEqual(screen.api_key_hash, hash_api_key(raw_key))
        self.assertEqual(AdScreen.objects.for_key(raw_key), screen)

    def test_never_seen_screen_is_offline(self):
        """Test a new screen is offline"""
        screen, _ = TestDataFactory.create_screen()
        self.assertEqual(screen.effective_status, AdScreen.STATUS_OFFLINE)

    @override_settings(SCREEN_OFFLINE_AFTER_SECONDS=60)
    def test_stale_heartbeat_is_offline(self):
        """Test an old heartbeat shows the screen offline"""
        screen, _ = TestDataFactory.create_screen()
        screen.status = AdScreen.STATUS_ONLINE
        screen.last_heartbeat_at = timezone.now() - timedelta(seconds=120)
        self.assertEqual(screen.effective_status, AdScreen.STATUS_OFFLINE)
        screen.last_heartbeat_at = timezone.now() - timedelta(seconds=10)
        self.assertEqual(screen.effective_status, AdScreen.STATUS_ONLINE)


class ScreenAPITests(TestCase):
    """Test screen endpoints"""

    def setUp(self):
        self.owner = TestDataFactory.create_user(role=User.ROLE_KIRANA)
        self.store = TestDataFactory.create_store(owner=self.owner)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def test_register_returns_key_once(self):
        """Test registering a screen returns its key once"""
        response = self.client.post('/api/screens', {'store': self.store.id, 'device_id': 'DEV-001', 'name': 'Counter'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('api_key', response.data['data'])
        self.assertEqual(response.data['data']['status'], AdScreen.STATUS_OFFLINE)

        response = self.client.get('/api/screens')
        self.assertEqual(response.data['data']['count'], 1)
        self.assertNotIn('api_key', response.data['data']['screens'][0])

    def test_duplicate_device(self):
        """Test registering the same device twice"""
        TestDataFactory.create_screen(store=self.store, device_id='DEV-001')
        response = self.client.post('/api/screens', {'store': self.store.id, 'device_id': 'DEV-001'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_for_other_store(self):
        """Test registering a screen for someone else's store"""
        other = TestDataFactory.create_store()
        response = self.client.post('/api/screens', {'store': other.id, 'device_id': 'DEV-002'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_heartbeat_marks_online(self):
        """Test heartbeat marks the screen online"""
        screen, raw_key = TestDataFactory.create_screen(store=self.store)
        self.client.logout()
        response = self.client.post('/api/screens/heartbeat', {}, format='json', HTTP_X_SCREEN_KEY=raw_key)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Heartbeat recorded')

        self.client.authenticate_user(self.owner)
        response = self.client.get('/api/screens', {'store': self.store.id})
        self.assertEqual(response.data['data']['screens'][0]['status'], AdScreen.STATUS_ONLINE)

    def test_heartbeat_reports_error(self):
        """Test heartbeat with error status"""
        screen, raw_key = TestDataFactory.create_screen(store=self.store)
        self.client.post('/api/screens/heartbeat', {'status': 'error'}, format='json', HTTP_X_SCREEN_KEY=raw_key)
        screen.refresh_from_db()
        self.assertEqual(screen.status, AdScreen.STATUS_ERROR)

    def test_heartbeat_unknown_key(self):
        """Test heartbeat with an unknown key"""
        response = self.client.post('/api/screens/heartbeat', {}, format='json', HTTP_X_SCREEN_KEY='nope')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error']['message'], 'Invalid screen key')

    def test_heartbeat_without_key(self):
        """Test heartbeat without a key"""
        self.client.logout()
        response = self.client.post('/api/screens/heartbeat', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error']['message'], 'Screen key is required')
        self.assertEqual(response['WWW-Authenticate'], 'X-Screen-Key')

    def test_heartbeat_ignores_user_token(self):
        """Test heartbeat does not accept a user token"""
        response = self.client.post('/api/screens/heartbeat', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error']['message'], 'Screen key is required')

    def test_list_other_store(self):
        """Test listing screens of someone else's store"""
        other = TestDataFactory.create_store()
        TestDataFactory.create_screen(store=other)
        response = self.client.get('/api/screens', {'store': other.id})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get('/api/screens')
        self.assertEqual(response.data['data']['count'], 0)
