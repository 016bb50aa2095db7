import logging
from django.db import transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError as FilterValidationError
from rest_framework.permissions import IsAuthenticated

from alive.core.errors import ConflictError, NotFoundError
from alive.core.pagination import paginate
from alive.core.permissions import IsAdmin
from alive.core.utils import create_audit_log, success_response
from alive.kirana.utils import get_managed_store
from .filters import RebateClaimFilter
from .models import RebateClaim
from .serializers import RebateClaimSerializer, RebateClaimCreateSerializer, RebateReviewSerializer

logger = logging.getLogger('alive.rebates')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def rebate_list_create(request):
    """List rebate claims, or submit a claim for a store's monthly bill"""
    user = request.user
    if request.method == 'GET':
        queryset = RebateClaim.objects.select_related('store')
        if not user.is_admin:
            queryset = queryset.filter(store__owner=user)
        filterset = RebateClaimFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            raise FilterValidationError(filterset.errors)
        claims, pagination = paginate(filterset.qs.order_by('-month', '-created_at'), request.query_params)
        return success_response({
            'claims': RebateClaimSerializer(claims, many=True).data,
            'pagination': pagination,
        })

    serializer = RebateClaimCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    store = get_managed_store(user, serializer.validated_data['store'],
                              message='You can only submit claims for your own store')

    month = serializer.validated_data['month']
    if RebateClaim.objects.filter(store=store, month=month).exists():
        raise ConflictError(f'A rebate claim for {month} already exists for this store')

    with transaction.atomic():
        claim = serializer.save(store=store, submitted_by=user)
        create_audit_log(request, 'rebate_submit', 'RebateClaim', claim.id,
                         changes={'month': month, 'amount': claim.amount}, object_name=f"{store.name} {month}")

    logger.info(f"Rebate claim {claim.id} submitted for store {store.id} ({month}, amount {claim.amount})")
    return success_response(RebateClaimSerializer(claim).data, message='Rebate claim submitted successfully',
                            status_code=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAdmin])
def rebate_review(request, pk):
    """Approve or reject a pending claim"""
    serializer = RebateReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    with transaction.atomic():
        try:
            claim = RebateClaim.objects.select_for_update().select_related('store').get(pk=pk)
        except RebateClaim.DoesNotExist:
            raise NotFoundError('Rebate claim not found')
        if claim.status != RebateClaim.STATUS_PENDING:
            raise ConflictError('Rebate claim has already been reviewed')

        claim.status = serializer.validated_data['status']
        claim.review_note = serializer.validated_data.get('note', '')
        claim.reviewed_by = request.user
        claim.reviewed_at = timezone.now()
        claim.save()
        create_audit_log(request, 'rebate_review', 'RebateClaim', claim.id,
                         changes={'status': claim.status, 'note': claim.review_note},
                         object_name=f"{claim.store.name} {claim.month}")

    logger.info(f"Rebate claim {claim.id} {claim.status} by {request.user.phone}")
    return success_response(RebateClaimSerializer(claim).data, message=f'Rebate claim {claim.status}')
