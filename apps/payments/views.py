from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .serializers import (
    PaymentSerializer,
    PaymentCreateSerializer,
    PaymentUpdateSerializer,
    PaymentFilterSerializer,
)
from .services import PaymentService
from .permissions import CanManagePayment
from .exceptions import (
    InvalidPaymentError,
    InvalidStateTransitionError,
    PaymentNotFoundError,
    PaymentPermissionError,
)
from apps.groups.services import GroupNotFoundError, NotMemberError


class PaymentPagination(PageNumberPagination):
    """Custom pagination for payments."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _error_response(exc):
    """Map a payment service error to an HTTP response."""
    if isinstance(exc, (PaymentNotFoundError, GroupNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (PaymentPermissionError, NotMemberError)):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(exc)}, status=code)


SERVICE_ERRORS = (
    PaymentNotFoundError,
    PaymentPermissionError,
    InvalidPaymentError,
    InvalidStateTransitionError,
    GroupNotFoundError,
    NotMemberError,
)


class PaymentViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Payment operations.

    list: Payments of the caller's groups (filterable by group/status)
    create: Record a pending payment
    retrieve: Get a specific payment
    update: Edit a payment (participant or group admin)
    destroy: Delete a payment (participant or group admin)
    complete: Mark a pending payment completed
    cancel: Mark a pending payment cancelled
    """

    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = PaymentPagination

    def get_permissions(self):
        if self.action in ['update', 'partial_update', 'destroy', 'complete', 'cancel']:
            return [IsAuthenticated(), CanManagePayment()]
        return super().get_permissions()

    def get_queryset(self):
        if self.action != 'list':
            return PaymentService.list_payments(user=self.request.user)

        filter_serializer = PaymentFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        return PaymentService.list_payments(
            user=self.request.user,
            group_id=params.get('group'),
            status=params.get('status')
        )

    def get_serializer_class(self):
        if self.action == 'create':
            return PaymentCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return PaymentUpdateSerializer
        return PaymentSerializer

    @extend_schema(parameters=[PaymentFilterSerializer])
    def list(self, request, *args, **kwargs):
        try:
            return super().list(request, *args, **kwargs)
        except (GroupNotFoundError, NotMemberError) as e:
            return _error_response(e)

    @extend_schema(request=PaymentCreateSerializer, responses={201: PaymentSerializer})
    def create(self, request, *args, **kwargs):
        """Record a new pending payment."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            payment = PaymentService.create_payment(
                group_id=data['group'].id,
                user=request.user,
                from_user=data['from_user'],
                to_user=data['to_user'],
                amount=data['amount'],
                description=data.get('description', '')
            )
        except SERVICE_ERRORS as e:
            return _error_response(e)

        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=PaymentUpdateSerializer, responses={200: PaymentSerializer})
    def update(self, request, *args, **kwargs):
        """Edit a payment. Status changes follow the state machine."""
        payment = self.get_object()
        kwargs.pop('partial', None)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = PaymentService.update_payment(
                payment_id=payment.id,
                user=request.user,
                **serializer.validated_data
            )
        except SERVICE_ERRORS as e:
            return _error_response(e)

        return Response(PaymentSerializer(payment).data)

    def destroy(self, request, *args, **kwargs):
        payment = self.get_object()
        try:
            PaymentService.delete_payment(payment_id=payment.id, user=request.user)
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: PaymentSerializer})
    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """
        Mark a pending payment as completed.

        POST /api/payments/{id}/complete/
        """
        payment = self.get_object()
        try:
            payment = PaymentService.complete_payment(payment_id=payment.id, user=request.user)
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(PaymentSerializer(payment).data)

    @extend_schema(request=None, responses={200: PaymentSerializer})
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """
        Mark a pending payment as cancelled.

        POST /api/payments/{id}/cancel/
        """
        payment = self.get_object()
        try:
            payment = PaymentService.cancel_payment(payment_id=payment.id, user=request.user)
        except SERVICE_ERRORS as e:
            return _error_response(e)
        return Response(PaymentSerializer(payment).data)
