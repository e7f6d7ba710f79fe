from decimal import Decimal

from rest_framework import serializers

from .dates import days_until_due
from .models import RecurringReminder, ReminderFrequency
from apps.accounts.serializers import UserMinimalSerializer
from apps.groups.models import Group


# =============================================================================
# Input Serializers
# =============================================================================

class ReminderFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for reminder filtering.

    Query Parameters:
        group (UUID): Filter by group ID
        is_active (bool): Only active or only paused reminders
    """

    group = serializers.UUIDField(required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True)


class DueRemindersQuerySerializer(serializers.Serializer):
    """Query parameters for the due reminders view."""

    days = serializers.IntegerField(required=False, min_value=0, max_value=366)
    group = serializers.UUIDField(required=False)


class ReminderCreateSerializer(serializers.Serializer):
    """Serializer for creating reminders."""

    group = serializers.PrimaryKeyRelatedField(queryset=Group.objects.all())
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    frequency = serializers.ChoiceField(choices=ReminderFrequency.choices)
    next_due_date = serializers.DateField()


class ReminderUpdateSerializer(serializers.Serializer):
    """Serializer for updating reminders. The group cannot change."""

    title = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False
    )
    frequency = serializers.ChoiceField(choices=ReminderFrequency.choices, required=False)
    next_due_date = serializers.DateField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class ReminderSerializer(serializers.ModelSerializer):
    """Main serializer for reminders, with due-date helpers."""

    created_by = UserMinimalSerializer(read_only=True)
    days_until_due = serializers.SerializerMethodField()
    is_overdue = serializers.SerializerMethodField()

    class Meta:
        model = RecurringReminder
        fields = [
            'id',
            'group',
            'title',
            'description',
            'amount',
            'frequency',
            'next_due_date',
            'is_active',
            'created_by',
            'days_until_due',
            'is_overdue',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def _today(self):
        return self.context.get('today')

    def get_days_until_due(self, obj) -> int:
        return days_until_due(obj.next_due_date, self._today())

    def get_is_overdue(self, obj) -> bool:
        return days_until_due(obj.next_due_date, self._today()) < 0
