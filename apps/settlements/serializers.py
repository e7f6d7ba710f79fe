from decimal import Decimal

from rest_framework import serializers

from apps.accounts.models import User
from apps.accounts.serializers import UserMinimalSerializer


# =============================================================================
# Input Serializers
# =============================================================================

class SettleTransferSerializer(serializers.Serializer):
    """Body of POST /api/settlements/{group_id}/settle/."""

    from_user = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    to_user = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs['from_user'] == attrs['to_user']:
            raise serializers.ValidationError({
                'to_user': 'Payer and recipient must be different users'
            })
        return attrs


# =============================================================================
# Response Serializers
# =============================================================================

class BalanceSerializer(serializers.Serializer):
    user = UserMinimalSerializer()
    net_balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class TransferSerializer(serializers.Serializer):
    from_user = UserMinimalSerializer()
    to_user = UserMinimalSerializer()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class GroupSettlementSerializer(serializers.Serializer):
    """
    Balances and recommended transfers for one group.

    Positive ``net_balance`` means the member is owed money.
    """

    group = serializers.UUIDField(source='group.id')
    group_name = serializers.CharField(source='group.name')
    member_count = serializers.IntegerField()
    total_spent = serializers.DecimalField(max_digits=12, decimal_places=2)
    fair_share = serializers.DecimalField(max_digits=12, decimal_places=2)
    balances = BalanceSerializer(many=True)
    transfers = TransferSerializer(many=True)


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
