import logging

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from django.http import JsonResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from .errors import AuthError, ConflictError, NotFoundError, ValidationError
from .handlers import build_error_payload
from .models import User
from .otp import send_otp, verify_otp as check_otp
from .serializers import UserSerializer, UserSummarySerializer
from .tokens import tokens_for_user
from .utils import create_audit_log, success_response
from .validators import validate_phone, validate_required

logger = logging.getLogger('alive.auth')


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    return Response({
        'success': True,
        'message': 'ALIVE Backend is running',
        'timestamp': timezone.now().isoformat(),
        'environment': settings.ENVIRONMENT,
    })


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def api_index(request):
    """Endpoint map for client discovery"""
    return Response({
        'success': True,
        'message': 'ALIVE Advertising API v1.0',
        'version': settings.API_VERSION,
        'endpoints': {
            'health': '/health',
            'api': '/api',
            'auth': '/api/auth',
            'kirana': '/api/kirana',
            'products': '/api/products',
            'orders': '/api/orders',
            'rebates': '/api/rebates',
            'screens': '/api/screens',
        },
    })


def route_not_found(request, exception=None):
    payload = build_error_payload(f'Route {request.get_full_path()} not found', status.HTTP_404_NOT_FOUND)
    return JsonResponse(payload, status=status.HTTP_404_NOT_FOUND)


def server_error(request):
    payload = build_error_payload('Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JsonResponse(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise AuthError('Invalid token. Please login again.')
        except ObjectDoesNotExist:
            # User referenced in token doesn't exist anymore
            raise AuthError('Token is invalid. User no longer exists.')


@api_view(['POST'])
@permission_classes([AllowAny])
def signup(request):
    """Register a new customer and send an OTP"""
    phone = request.data.get('phone')
    name = request.data.get('name')

    validate_phone(phone)
    validate_required(name, 'Name', min_length=2)

    if User.objects.filter(phone=phone).exists():
        raise ConflictError('Phone number already registered. Please login instead.')

    otp_result = send_otp(phone)
    user = User.objects.create_phone_user(phone=phone, name=name.strip(), role=User.ROLE_CUSTOMER)
    create_audit_log(request, 'signup', 'User', user.id, user=user, object_name=phone)
    logger.info(f"New customer signup: {phone}")

    data = {'phone': phone}
    if 'otp' in otp_result:
        data['otp'] = otp_result['otp']
    return success_response(data, message='OTP sent successfully')


@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Send an OTP to an existing user"""
    phone = request.data.get('phone')
    validate_phone(phone)

    if not User.objects.filter(phone=phone).exists():
        raise NotFoundError('Phone number not registered. Please signup first.')

    otp_result = send_otp(phone)

    data = {'phone': phone}
    if 'otp' in otp_result:
        data['otp'] = otp_result['otp']
    return success_response(data, message='OTP sent successfully')


@api_view(['POST'])
@permission_classes([AllowAny])
def verify_otp(request):
    """Verify an OTP and issue JWT tokens"""
    phone = request.data.get('phone')
    otp = request.data.get('otp')

    validate_phone(phone)
    if not isinstance(otp, str) or len(otp) != 6:
        raise ValidationError('Invalid OTP format. Must be 6 digits.')

    check_otp(phone, otp)

    user = User.objects.filter(phone=phone).first()
    if user is None:
        raise NotFoundError('User not found')

    if not user.is_verified:
        user.is_verified = True
        user.save(update_fields=['is_verified', 'updated_at'])

    tokens = tokens_for_user(user)
    create_audit_log(request, 'login', 'User', user.id, user=user, object_name=phone)

    return success_response({
        'token': tokens['access'],
        'refresh_token': tokens['refresh'],
        'user': UserSummarySerializer(user).data,
    }, message='Login successful')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me(request):
    """Current user"""
    return success_response(UserSerializer(request.user).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """
    Logout.

    Access tokens are stateless and are dropped by the client; when the
    refresh token is sent along it is blacklisted so it cannot mint new ones.
    """
    refresh = request.data.get('refresh') or request.data.get('refresh_token')
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError:
            raise ValidationError('Invalid refresh token')

    create_audit_log(request, 'logout', 'User', request.user.id, object_name=request.user.phone)
    return success_response(message='Logout successful')


@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_token(request):
    """Exchange a refresh token for a new access token"""
    refresh = request.data.get('refresh') or request.data.get('refresh_token')
    if not refresh:
        raise ValidationError('Refresh token is required')

    serializer = CustomTokenRefreshSerializer(data={'refresh': refresh})
    serializer.is_valid(raise_exception=True)
    data = {'token': serializer.validated_data['access']}
    if 'refresh' in serializer.validated_data:
        data['refresh_token'] = serializer.validated_data['refresh']
    return success_response(data, message='Token refreshed')
