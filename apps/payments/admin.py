from django.contrib import admin
from .models import Payment, PaymentStatus


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Admin interface for Payments."""

    list_display = ['id', 'group', 'from_user', 'to_user', 'amount', 'status', 'completed_at', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['group__name', 'from_user__email', 'to_user__email', 'description']
    readonly_fields = ['completed_at', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('group', 'from_user', 'to_user')

    actions = ['cancel_pending']

    def cancel_pending(self, request, queryset):
        """Cancel selected payments that are still pending."""
        updated = queryset.filter(status=PaymentStatus.PENDING).update(status=PaymentStatus.CANCELLED)
        self.message_user(request, f"Cancelled {updated} pending payments")
    cancel_pending.short_description = "Cancel selected pending payments"
