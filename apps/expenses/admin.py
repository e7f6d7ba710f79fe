from django.contrib import admin
from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    """Admin interface for Expenses."""

    list_display = ['description', 'group', 'paid_by', 'amount', 'category', 'date']
    list_filter = ['category', 'date']
    search_fields = ['description', 'group__name', 'paid_by__email']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'date'
    ordering = ['-date', '-created_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('group', 'paid_by')
