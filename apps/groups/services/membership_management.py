"""
Membership management service.

Handles group membership operations with concurrency protection.
"""

import logging
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership

from .exceptions import (
    GroupNotFoundError,
    NotMemberError,
    OwnerCannotLeaveError,
    CannotRemoveOwnerError,
    InsufficientPermissionsError,
)

logger = logging.getLogger(__name__)


def require_membership(*, group_id: UUID, user: User, admin: bool = False) -> Group:
    """
    Load a group and check that ``user`` belongs to it.

    Shared entry check for every service that works inside a group
    (expenses, payments, reminders, settlements).

    Args:
        group_id: UUID of the group
        user: User that must be a member
        admin: Also require the owner or admin role

    Returns:
        Group instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        InsufficientPermissionsError: If admin is required and user is not one
    """
    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    role = group.get_user_role(user)
    if role is None:
        raise NotMemberError(f"User is not a member of {group.name}")

    if admin and not group.is_admin(user):
        raise InsufficientPermissionsError("Only group admins can perform this action")

    return group


@transaction.atomic
def leave_group(*, group_id: UUID, user: User) -> None:
    """
    Leave a group.

    Owner cannot leave their own group - they must delete it instead.

    Args:
        group_id: UUID of the group
        user: User leaving the group

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        OwnerCannotLeaveError: If user is the owner
    """
    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if group.owner_id == user.id:
        raise OwnerCannotLeaveError(
            "Group owner cannot leave. Delete the group instead."
        )

    try:
        membership = (
            GroupMembership.objects
            .select_for_update()
            .get(user=user, group=group)
        )
    except GroupMembership.DoesNotExist:
        raise NotMemberError(f"User is not a member of {group.name}")

    membership.delete()
    logger.info("User %s left group %s", user.id, group.id)


@transaction.atomic
def remove_member(
    *,
    group_id: UUID,
    user_id: UUID,
    removed_by: User
) -> None:
    """
    Remove a member from a group (admin only).

    Cannot remove the group owner. Expenses and payments of the removed
    member stay in the group but no longer count towards balances.

    Args:
        group_id: UUID of the group
        user_id: UUID of the user to remove
        removed_by: User performing the removal (must be admin)

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If target user is not a member
        CannotRemoveOwnerError: If trying to remove the owner
        InsufficientPermissionsError: If removed_by is not admin
    """
    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.is_admin(removed_by):
        raise InsufficientPermissionsError("Only group admins can remove members")

    if str(group.owner_id) == str(user_id):
        raise CannotRemoveOwnerError("Cannot remove the group owner")

    try:
        membership = (
            GroupMembership.objects
            .select_for_update()
            .get(group=group, user_id=user_id)
        )
    except GroupMembership.DoesNotExist:
        raise NotMemberError("User is not a member of this group")

    membership.delete()
    logger.info("User %s removed from group %s by %s", user_id, group.id, removed_by.id)


def get_group_members(*, group_id: UUID) -> QuerySet[GroupMembership]:
    """
    Get all members of a group with optimized queries.

    Args:
        group_id: UUID of the group

    Returns:
        QuerySet of GroupMembership instances, oldest membership first

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    if not Group.objects.filter(id=group_id).exists():
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    return (
        GroupMembership.objects
        .filter(group_id=group_id)
        .select_related('user')
        .order_by('joined_at', 'id')
    )
