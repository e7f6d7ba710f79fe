from rest_framework import serializers
from .models import Expense, ExpenseCategory
from .services import SpendingPeriod
from apps.accounts.models import User
from apps.accounts.serializers import UserMinimalSerializer
from apps.groups.models import Group


# =============================================================================
# Input Serializers
# =============================================================================

class ExpenseFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for expense filtering.

    Query Parameters:
        group (UUID): Filter by group ID
        category (str): Filter by category
        date_from (date): Expenses on or after this date
        date_to (date): Expenses on or before this date
    """

    group = serializers.UUIDField(required=False)
    category = serializers.ChoiceField(choices=ExpenseCategory.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'End date must be after start date'
            })
        return attrs


class SpendingSummaryQuerySerializer(serializers.Serializer):
    """Query parameters for the spending summary."""

    group = serializers.UUIDField(required=True)
    period = serializers.ChoiceField(
        choices=SpendingPeriod.choices,
        default=SpendingPeriod.CURRENT_MONTH
    )


class ExpenseCreateSerializer(serializers.ModelSerializer):
    """Serializer for creating expenses."""

    group = serializers.PrimaryKeyRelatedField(queryset=Group.objects.all())
    paid_by = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        required=False,
        help_text="Member who paid. Defaults to the current user."
    )

    class Meta:
        model = Expense
        fields = ['group', 'paid_by', 'amount', 'description', 'category', 'date']


class ExpenseUpdateSerializer(serializers.ModelSerializer):
    """Serializer for updating expenses. The group cannot change."""

    paid_by = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False)

    class Meta:
        model = Expense
        fields = ['paid_by', 'amount', 'description', 'category', 'date']


# =============================================================================
# Output Serializers
# =============================================================================

class ExpenseSerializer(serializers.ModelSerializer):
    """Main serializer for expenses."""

    paid_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'group',
            'paid_by',
            'amount',
            'description',
            'category',
            'date',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class MemberSpendingSerializer(serializers.Serializer):
    user = UserMinimalSerializer()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    categories = serializers.DictField(
        child=serializers.DecimalField(max_digits=12, decimal_places=2)
    )


class SpendingSummarySerializer(serializers.Serializer):
    """Serializer for the per-member spending summary."""

    period = serializers.CharField()
    start_date = serializers.DateField(allow_null=True)
    total_spending = serializers.DecimalField(max_digits=12, decimal_places=2)
    expense_count = serializers.IntegerField()
    members = MemberSpendingSerializer(many=True)
