from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema

from apps.groups.services import GroupNotFoundError, NotMemberError
from apps.payments.exceptions import InvalidPaymentError
from apps.payments.serializers import PaymentSerializer
from .serializers import (
    SettleTransferSerializer,
    GroupSettlementSerializer,
    ErrorSerializer,
)
from .services import SETTLEMENT_DESCRIPTION, get_group_settlement, settle_transfer


@extend_schema(
    responses={
        200: GroupSettlementSerializer,
        403: ErrorSerializer,
        404: ErrorSerializer,
    },
    description="Get member balances and the transfers that would settle the group.",
    tags=['settlements'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def group_settlement(request, group_id):
    """Group balances - thin HTTP handler."""
    try:
        data = get_group_settlement(group_id=group_id, user=request.user)
    except GroupNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except NotMemberError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return Response(GroupSettlementSerializer(data).data)


@extend_schema(
    request=SettleTransferSerializer,
    responses={
        201: PaymentSerializer,
        400: ErrorSerializer,
        403: ErrorSerializer,
        404: ErrorSerializer,
    },
    description="Record a recommended transfer as a pending payment.",
    tags=['settlements'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def settle(request, group_id):
    """Create a pending payment for one transfer."""
    serializer = SettleTransferSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        payment = settle_transfer(
            group_id=group_id,
            user=request.user,
            from_user=data['from_user'],
            to_user=data['to_user'],
            amount=data['amount'],
            description=data.get('description') or SETTLEMENT_DESCRIPTION
        )
    except GroupNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except NotMemberError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except InvalidPaymentError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)
