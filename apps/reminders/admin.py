from django.contrib import admin
from .models import RecurringReminder
from .dates import calculate_next_due_date


@admin.register(RecurringReminder)
class RecurringReminderAdmin(admin.ModelAdmin):
    """Admin interface for Recurring Reminders."""

    list_display = ['title', 'group', 'amount', 'frequency', 'next_due_date', 'is_active']
    list_filter = ['frequency', 'is_active']
    search_fields = ['title', 'group__name']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'next_due_date'
    actions = ['advance_one_period']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('group', 'created_by')

    @admin.action(description='Advance selected reminders by one period')
    def advance_one_period(self, request, queryset):
        for reminder in queryset:
            reminder.next_due_date = calculate_next_due_date(
                reminder.next_due_date, reminder.frequency
            )
            reminder.save(update_fields=['next_due_date', 'updated_at'])
        self.message_user(request, f'{queryset.count()} reminders advanced.')
