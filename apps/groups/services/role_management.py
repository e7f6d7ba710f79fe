"""
Role management service.

Promotes members to admin and demotes them back. The owner role is fixed
to the group creator and cannot be granted or taken away here.
"""

import logging
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership, GroupRole

from .exceptions import (
    GroupNotFoundError,
    NotMemberError,
    CannotChangeOwnerRoleError,
    InsufficientPermissionsError,
)

logger = logging.getLogger(__name__)

ASSIGNABLE_ROLES = (GroupRole.ADMIN, GroupRole.MEMBER)


@transaction.atomic
def update_member_role(
    *,
    group_id: UUID,
    user_id: UUID,
    new_role: str,
    updated_by: User
) -> GroupMembership:
    """
    Change a member's role (admin only).

    Args:
        group_id: UUID of the group
        user_id: UUID of the member whose role changes
        new_role: 'admin' or 'member'
        updated_by: User performing the change (must be admin)

    Returns:
        Updated GroupMembership instance

    Raises:
        ValueError: If new_role is not assignable
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If updated_by is not admin
        NotMemberError: If target user is not a member
        CannotChangeOwnerRoleError: If target is the owner
    """
    if new_role not in ASSIGNABLE_ROLES:
        raise ValueError(f"Invalid role. Must be one of: {list(ASSIGNABLE_ROLES)}")

    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.is_admin(updated_by):
        raise InsufficientPermissionsError("Only group admins can update member roles")

    try:
        membership = (
            GroupMembership.objects
            .select_for_update()
            .get(group=group, user_id=user_id)
        )
    except GroupMembership.DoesNotExist:
        raise NotMemberError("User is not a member of this group")

    if membership.role == GroupRole.OWNER:
        raise CannotChangeOwnerRoleError("Cannot change the owner's role")

    if membership.role != new_role:
        membership.role = new_role
        membership.save(update_fields=['role'])
        logger.info("User %s is now %s in group %s", user_id, new_role, group.id)

    return membership
