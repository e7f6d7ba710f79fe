from decimal import Decimal
from rest_framework import serializers
from .models import Payment, PaymentStatus
from apps.accounts.models import User
from apps.accounts.serializers import UserMinimalSerializer
from apps.groups.models import Group


# =============================================================================
# Input Serializers
# =============================================================================

class PaymentFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for payment filtering.

    Query Parameters:
        group (UUID): Filter by group ID
        status (str): Filter by payment status
    """

    group = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)


class PaymentCreateSerializer(serializers.Serializer):
    """Input for recording a payment. Status always starts as pending."""

    group = serializers.PrimaryKeyRelatedField(queryset=Group.objects.all())
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


class PaymentUpdateSerializer(serializers.Serializer):
    """Input for editing a payment. All fields optional."""

    from_user = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False)
    to_user = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'), required=False)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class PaymentSerializer(serializers.ModelSerializer):
    """Main serializer for payments."""

    from_user = UserMinimalSerializer(read_only=True)
    to_user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id',
            'group',
            'from_user',
            'to_user',
            'amount',
            'description',
            'status',
            'completed_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
