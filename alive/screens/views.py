import logging
from django.db import transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny

from alive.core.errors import ValidationError
from alive.core.utils import create_audit_log, success_response
from alive.core.validators import to_int
from alive.kirana.utils import get_managed_store
from .authentication import ScreenKeyAuthentication
from .models import AdScreen
from .serializers import AdScreenSerializer, AdScreenRegisterSerializer, HeartbeatSerializer

logger = logging.getLogger('alive.screens')

MANAGE_SCREENS_MESSAGE = 'You can only manage screens of your own store'


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def screen_list_register(request):
    """List screens with their effective status, or register a new one"""
    user = request.user
    if request.method == 'GET':
        queryset = AdScreen.objects.select_related('store')
        store_param = request.query_params.get('store')
        if store_param is not None:
            store_id = to_int(store_param)
            if store_id is None:
                raise ValidationError('store must be an integer')
            store = get_managed_store(user, store_id, message=MANAGE_SCREENS_MESSAGE)
            queryset = queryset.filter(store=store)
        elif not user.is_admin:
            queryset = queryset.filter(store__owner=user)

        screens = list(queryset)
        return success_response({
            'count': len(screens),
            'screens': AdScreenSerializer(screens, many=True).data,
        })

    serializer = AdScreenRegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    store = get_managed_store(user, serializer.validated_data['store'], message=MANAGE_SCREENS_MESSAGE)

    with transaction.atomic():
        screen, raw_key = AdScreen.objects.register(
            store=store,
            device_id=serializer.validated_data['device_id'],
            name=serializer.validated_data['name'],
        )
        create_audit_log(request, 'screen_register', 'AdScreen', screen.id,
                         changes={'store_id': store.id, 'device_id': screen.device_id}, object_name=screen.device_id)

    logger.info(f"Screen {screen.device_id} registered for store {store.id} by {user.phone}")
    data = AdScreenSerializer(screen).data
    data['api_key'] = raw_key
    return success_response(data, message='Screen registered successfully', status_code=status.HTTP_201_CREATED)


@api_view(['POST'])
@authentication_classes([ScreenKeyAuthentication])
@permission_classes([AllowAny])
def screen_heartbeat(request):
    """Status ping from a screen device, authenticated by its API key"""
    screen = request.auth

    serializer = HeartbeatSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    screen.status = serializer.validated_data['status']
    screen.last_heartbeat_at = timezone.now()
    screen.save(update_fields=['status', 'last_heartbeat_at', 'updated_at'])

    logger.debug(f"Heartbeat from screen {screen.device_id}: {screen.status}")
    return success_response({
        'id': screen.id,
        'device_id': screen.device_id,
        'status': screen.status,
        'last_heartbeat_at': screen.last_heartbeat_at,
    }, message='Heartbeat recorded')
