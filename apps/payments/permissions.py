"""
Custom permission classes for payments app.
"""
from rest_framework.permissions import BasePermission


class CanManagePayment(BasePermission):
    """
    Permission to edit, settle or delete a payment.

    Allows if:
    - User sends or receives the payment
    - User is an owner/admin of the payment's group
    """

    message = 'You can only change payments involving yourself unless you are a group admin.'

    def has_object_permission(self, request, view, obj):
        return obj.involves(request.user) or obj.group.is_admin(request.user)
