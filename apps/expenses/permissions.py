"""
Custom permission classes for expenses app.
"""
from rest_framework.permissions import BasePermission


class CanManageExpense(BasePermission):
    """
    Permission to update or delete an expense.

    Allows if the user paid the expense or is an owner/admin of its group.

    Usage:
        def get_permissions(self):
            if self.action in ['update', 'partial_update', 'destroy']:
                return [IsAuthenticated(), CanManageExpense()]
            return super().get_permissions()
    """

    message = 'You can only change your own expenses unless you are a group admin.'

    def has_object_permission(self, request, view, obj):
        return obj.paid_by_id == request.user.id or obj.group.is_admin(request.user)
