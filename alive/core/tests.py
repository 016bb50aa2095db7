"""
Test suite for the core module
Tests: validators, distance helpers, OTP service, auth endpoints, error envelope
"""
from datetime import timedelta
from unittest import mock
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken
from alive.core.errors import ValidationError
from alive.core.geo import haversine_distance, parse_location_query
from alive.core.models import AuditLog, User
from alive.core import otp as otp_service
from alive.core.test_utils import TestDataFactory, AuthenticatedAPIClient, clear_cache
from alive.core.validators import validate_gst, validate_phone, validate_pincode, validate_latitude


class ValidatorTests(TestCase):
    """Test the shared field validators"""

    def test_valid_phone(self):
        """Test a valid mobile number passes"""
        self.assertTrue(validate_phone('9876543210'))

    def test_phone_must_start_with_6_to_9(self):
        """Test phone numbers must start with 6-9"""
        with self.assertRaisesMessage(ValidationError, 'Invalid phone number. Must be 10 digits starting with 6-9'):
            validate_phone('5876543210')

    def test_phone_required(self):
        """Test empty phone number is rejected"""
        with self.assertRaisesMessage(ValidationError, 'Phone number is required'):
            validate_phone('')

    def test_gst_format(self):
        """Test GSTIN format check, blank allowed"""
        self.assertTrue(validate_gst('27AAPFU0939F1ZV'))
        self.assertTrue(validate_gst(None))
        with self.assertRaises(ValidationError):
            validate_gst('27AAPFU0939F1Z')

    def test_pincode(self):
        """Test pincode validation"""
        self.assertTrue(validate_pincode('400001'))
        with self.assertRaisesMessage(ValidationError, 'Invalid pincode. Must be 6 digits'):
            validate_pincode('012345')

    def test_latitude_range(self):
        """Test latitude must be within -90 and 90"""
        self.assertTrue(validate_latitude('19.07'))
        with self.assertRaisesMessage(ValidationError, 'Invalid latitude. Must be between -90 and 90'):
            validate_latitude(91)


class GeoTests(TestCase):
    """Test distance helpers"""

    def test_distance_to_same_point_is_zero(self):
        """Test distance from a point to itself"""
        self.assertEqual(haversine_distance(19.076, 72.8777, 19.076, 72.8777), 0)

    def test_distance_between_nearby_mumbai_points(self):
        """Test haversine distance between two Mumbai stores"""
        distance = haversine_distance(19.0760, 72.8777, 19.0825, 72.8808)
        self.assertAlmostEqual(distance, 0.79, places=1)

    def test_location_query_requires_coordinates(self):
        """Test lat and lng are both required"""
        with self.assertRaisesMessage(ValidationError, 'Latitude and longitude are required'):
            parse_location_query({'lat': '19.07'})

    def test_location_query_default_radius(self):
        """Test radius defaults to 5 km"""
        latitude, longitude, radius = parse_location_query({'lat': '19.07', 'lng': '72.87'})
        self.assertEqual((latitude, longitude, radius), (19.07, 72.87, 5))

    def test_location_query_rejects_non_numeric(self):
        """Test non numeric coordinates are rejected"""
        with self.assertRaisesMessage(ValidationError, 'Invalid coordinates or radius'):
            parse_location_query({'lat': 'north', 'lng': '72.87'})

    def test_location_query_rejects_non_finite(self):
        """Test infinite and NaN values are rejected"""
        for params in (
            {'lat': 'inf', 'lng': '72.87'},
            {'lat': '1e400', 'lng': '72.87'},
            {'lat': '19.07', 'lng': '-inf'},
            {'lat': '19.07', 'lng': 'nan'},
            {'lat': '19.07', 'lng': '72.87', 'radius': 'inf'},
        ):
            with self.assertRaisesMessage(ValidationError, 'Invalid coordinates or radius'):
                parse_location_query(params)

    def test_location_query_rejects_negative_radius(self):
        """Test negative radius is rejected"""
        with self.assertRaisesMessage(ValidationError, 'Invalid coordinates or radius'):
            parse_location_query({'lat': '19.07', 'lng': '72.87', 'radius': '-1'})


@override_settings(OTP_DEBUG_EXPOSE=True)
class OTPServiceTests(TestCase):
    """Test OTP generation and verification"""

    def setUp(self):
        clear_cache()
        self.phone = '9876543210'

    def test_generated_otp_has_no_leading_zero(self):
        """Test OTP is 6 digits without a leading zero"""
        for _ in range(20):
            code = otp_service.generate_otp()
            self.assertEqual(len(code), 6)
            self.assertNotEqual(code[0], '0')

    def test_send_and_verify(self):
        """Test OTP verifies once and is then removed"""
        result = otp_service.send_otp(self.phone)
        self.assertTrue(otp_service.has_otp(self.phone))
        verified = otp_service.verify_otp(self.phone, result['otp'])
        self.assertTrue(verified['success'])
        # single use
        self.assertFalse(otp_service.has_otp(self.phone))

    def test_verify_without_otp(self):
        """Test verifying when no OTP was sent"""
        with self.assertRaisesMessage(ValidationError, 'No OTP found for this phone number'):
            otp_service.verify_otp(self.phone, '123456')

    def test_wrong_otp_counts_attempts(self):
        """Test wrong codes use up the attempts"""
        result = otp_service.send_otp(self.phone)
        wrong = '000000' if result['otp'] != '000000' else '111111'
        with self.assertRaisesMessage(ValidationError, 'Invalid OTP. 2 attempts remaining.'):
            otp_service.verify_otp(self.phone, wrong)
        with self.assertRaisesMessage(ValidationError, 'Invalid OTP. 1 attempts remaining.'):
            otp_service.verify_otp(self.phone, wrong)
        with self.assertRaisesMessage(ValidationError, 'Invalid OTP. 0 attempts remaining.'):
            otp_service.verify_otp(self.phone, wrong)
        with self.assertRaisesMessage(ValidationError, 'Maximum verification attempts exceeded'):
            otp_service.verify_otp(self.phone, result['otp'])

    def test_expired_otp(self):
        """Test an OTP past its expiry is reported as expired"""
        result = otp_service.send_otp(self.phone)
        expired_at = otp_service.time.time() + otp_service.OTP_EXPIRY_MINUTES * 60 + 1
        with mock.patch('alive.core.otp.time.time', return_value=expired_at):
            self.assertFalse(otp_service.has_otp(self.phone))
            with self.assertRaisesMessage(ValidationError, 'OTP has expired. Please request a new OTP.'):
                otp_service.verify_otp(self.phone, result['otp'])
        with self.assertRaisesMessage(ValidationError, 'No OTP found for this phone number'):
            otp_service.verify_otp(self.phone, result['otp'])

    def test_wrong_attempt_keeps_expiry_reportable(self):
        """Test a wrong attempt does not shorten the stored entry"""
        result = otp_service.send_otp(self.phone)
        wrong = '000000' if result['otp'] != '000000' else '111111'
        with self.assertRaises(ValidationError):
            otp_service.verify_otp(self.phone, wrong)
        expired_at = otp_service.time.time() + otp_service.OTP_EXPIRY_MINUTES * 60 + 1
        with mock.patch('alive.core.otp.time.time', return_value=expired_at):
            with self.assertRaisesMessage(ValidationError, 'OTP has expired. Please request a new OTP.'):
                otp_service.verify_otp(self.phone, result['otp'])

    def test_clear_otp(self):
        """Test clearing a pending OTP"""
        otp_service.send_otp(self.phone)
        otp_service.clear_otp(self.phone)
        self.assertFalse(otp_service.has_otp(self.phone))

    @override_settings(OTP_DEBUG_EXPOSE=False)
    def test_otp_hidden_when_not_exposed(self):
        """Test OTP is left out of the result outside debug"""
        result = otp_service.send_otp(self.phone)
        self.assertNotIn('otp', result)


@override_settings(OTP_DEBUG_EXPOSE=True)
class AuthAPITests(TestCase):
    """Test signup, login and token endpoints"""

    def setUp(self):
        clear_cache()
        self.client = AuthenticatedAPIClient()

    def _login(self, phone):
        response = self.client.post('/api/auth/login', {'phone': phone}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        otp = response.data['data']['otp']
        return self.client.post('/api/auth/verify-otp', {'phone': phone, 'otp': otp}, format='json')

    def test_signup_creates_unverified_customer(self):
        """Test signup creates an unverified customer and sends an OTP"""
        response = self.client.post('/api/auth/signup', {'phone': '9876543210', 'name': 'Asha'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'OTP sent successfully')
        user = User.objects.get(phone='9876543210')
        self.assertEqual(user.role, User.ROLE_CUSTOMER)
        self.assertFalse(user.is_verified)
        self.assertTrue(AuditLog.objects.filter(action='signup', object_id=str(user.id)).exists())

    def test_signup_duplicate_phone(self):
        """Test signup with a registered phone should fail"""
        TestDataFactory.create_user(phone='9876543210')
        response = self.client.post('/api/auth/signup', {'phone': '9876543210', 'name': 'Asha'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error']['message'], 'Phone number already registered. Please login instead.')

    def test_signup_requires_name(self):
        """Test signup without a proper name should fail"""
        response = self.client.post('/api/auth/signup', {'phone': '9876543210', 'name': 'A'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Name is required (minimum 2 characters)')

    def test_login_unregistered_phone(self):
        """Test login with an unknown phone"""
        response = self.client.post('/api/auth/login', {'phone': '9876543210'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['message'], 'Phone number not registered. Please signup first.')

    def test_verify_otp_issues_tokens_and_verifies_user(self):
        """Test OTP verification returns tokens and verifies the user"""
        user = TestDataFactory.create_user(phone='9876543210', is_verified=False)
        response = self._login('9876543210')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Login successful')
        self.assertIn('token', response.data['data'])
        self.assertIn('refresh_token', response.data['data'])
        self.assertEqual(response.data['data']['user']['phone'], '9876543210')
        user.refresh_from_db()
        self.assertTrue(user.is_verified)

    def test_verify_otp_format(self):
        """Test OTP must be 6 digits"""
        response = self.client.post('/api/auth/verify-otp', {'phone': '9876543210', 'otp': '123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Invalid OTP format. Must be 6 digits.')

    def test_me_with_issued_token(self):
        """Test fetching the current user with a login token"""
        TestDataFactory.create_user(phone='9876543210', name='Asha')
        token = self._login('9876543210').data['data']['token']
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = self.client.get('/api/auth/me')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['name'], 'Asha')

    def test_me_without_token(self):
        """Test protected endpoint without a token"""
        response = self.client.get('/api/auth/me')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error']['message'], 'No authentication token provided')

    def test_me_with_garbage_token(self):
        """Test protected endpoint with a malformed token"""
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        response = self.client.get('/api/auth/me')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error']['message'], 'Invalid token. Please login again.')

    def test_me_with_expired_token(self):
        """Test protected endpoint with an expired token"""
        user = TestDataFactory.create_user()
        token = AccessToken.for_user(user)
        token.set_exp(lifetime=-timedelta(minutes=1))
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = self.client.get('/api/auth/me')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error']['message'], 'Token has expired. Please login again.')

    def test_refresh_and_logout(self):
        """Test token refresh and logout blacklisting"""
        TestDataFactory.create_user(phone='9876543210')
        tokens = self._login('9876543210').data['data']

        response = self.client.post('/api/auth/refresh', {'refresh_token': tokens['refresh_token']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data['data'])

        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {tokens["token"]}')
        response = self.client.post('/api/auth/logout', {'refresh_token': tokens['refresh_token']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Logout successful')

        # blacklisted refresh tokens can no longer be exchanged
        self.client.credentials()
        response = self.client.post('/api/auth/refresh', {'refresh_token': tokens['refresh_token']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class AppAssemblyTests(TestCase):
    """Test health, index and unknown routes"""

    def test_health(self):
        """Test health check envelope"""
        response = self.client.get('/health')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['message'], 'ALIVE Backend is running')
        self.assertIn('timestamp', body)

    def test_api_index(self):
        """Test API index lists the endpoints"""
        body = self.client.get('/api').json()
        self.assertEqual(body['version'], '1.0.0')
        self.assertEqual(body['endpoints']['kirana'], '/api/kirana')

    def test_unknown_route(self):
        """Test unknown routes return the error envelope"""
        response = self.client.get('/api/nothing-here')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertEqual(body['error']['message'], 'Route /api/nothing-here not found')


class SeedDemoDataTests(TestCase):
    """Test the seed_demo_data management command"""

    def test_seed_is_idempotent(self):
        """Test seeding twice creates the demo data once"""
        from io import StringIO
        from django.core.management import call_command
        from alive.kirana.models import KiranaStore
        from alive.products.models import AdvertisedProduct

        call_command('seed_demo_data', stdout=StringIO())
        self.assertEqual(KiranaStore.objects.count(), 2)
        self.assertEqual(AdvertisedProduct.objects.count(), 8)

        call_command('seed_demo_data', stdout=StringIO())
        self.assertEqual(KiranaStore.objects.count(), 2)

    def test_dry_run_writes_nothing(self):
        """Test dry run leaves the database empty"""
        from io import StringIO
        from django.core.management import call_command

        out = StringIO()
        call_command('seed_demo_data', '--dry-run', stdout=out)
        self.assertIn('DRY RUN', out.getvalue())
        self.assertFalse(User.objects.exists())


class PermissionTests(TestCase):
    """Test role permissions"""

    def _request(self, user):
        from types import SimpleNamespace
        return SimpleNamespace(user=user)

    def test_role_allowed(self):
        """Test matching role is allowed"""
        from alive.core.permissions import IsKirana
        owner = TestDataFactory.create_user(role=User.ROLE_KIRANA)
        self.assertTrue(IsKirana().has_permission(self._request(owner), None))

    def test_wrong_role_is_forbidden(self):
        """Test wrong role raises forbidden"""
        from alive.core.errors import ForbiddenError
        from alive.core.permissions import IsKirana
        customer = TestDataFactory.create_user()
        with self.assertRaisesMessage(ForbiddenError, 'Access denied. Required roles: kirana'):
            IsKirana().has_permission(self._request(customer), None)

    def test_anonymous_is_not_authenticated(self):
        """Test anonymous user is refused"""
        from django.contrib.auth.models import AnonymousUser
        from alive.core.permissions import IsCustomer
        self.assertFalse(IsCustomer().has_permission(self._request(AnonymousUser()), None))

    def test_admin_manages_any_store(self):
        """Test store management rights"""
        from alive.core.permissions import can_manage_store
        store = TestDataFactory.create_store()
        self.assertTrue(can_manage_store(TestDataFactory.create_admin(), store))
        self.assertTrue(can_manage_store(store.owner, store))
        self.assertFalse(can_manage_store(TestDataFactory.create_user(), store))
