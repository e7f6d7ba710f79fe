"""
Custom permission classes for reminders app.
"""
from rest_framework.permissions import BasePermission


class IsReminderGroupAdmin(BasePermission):
    """
    Permission to change a reminder.

    Allows if the user is an owner or admin of the reminder's group.
    """

    message = 'Only group admins can manage reminders.'

    def has_object_permission(self, request, view, obj):
        return obj.group.is_admin(request.user)
