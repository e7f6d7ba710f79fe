from rest_framework import permissions

from .models import GroupRole


class GroupRolePermission(permissions.BasePermission):
    """
    Base permission: user must hold one of ``allowed_roles`` in the group.

    Works on Group instances and on any object with a ``group`` attribute
    (expenses, payments, reminders).
    """

    allowed_roles = (GroupRole.OWNER, GroupRole.ADMIN, GroupRole.MEMBER)

    def has_object_permission(self, request, view, obj):
        group = getattr(obj, 'group', obj)
        return group.get_user_role(request.user) in self.allowed_roles


class IsGroupMember(GroupRolePermission):
    """Permission: User must be a member of the group."""


class IsGroupAdmin(GroupRolePermission):
    """Permission: User must be group admin or owner."""

    allowed_roles = (GroupRole.OWNER, GroupRole.ADMIN)


class IsGroupOwner(GroupRolePermission):
    """Permission: User must be the group owner."""

    allowed_roles = (GroupRole.OWNER,)
