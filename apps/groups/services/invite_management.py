"""
Invite management service.

Invites are shareable codes that let a user join a group. An invite can
carry an expiry date and a maximum number of uses, and can be revoked by
its creator or a group admin.
"""

import logging
from datetime import timedelta
from typing import Optional, Tuple
from uuid import UUID

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import F, QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import GroupInvite, GroupMembership, GroupRole, InviteStatus

from .exceptions import (
    AlreadyMemberError,
    InsufficientPermissionsError,
    InviteExpiredError,
    InviteNotFoundError,
)
from .membership_management import require_membership

logger = logging.getLogger(__name__)


def _unusable_reason(invite: GroupInvite) -> Optional[str]:
    if invite.status == InviteStatus.REVOKED:
        return "This invite has been revoked"
    if invite.status == InviteStatus.EXPIRED or invite.is_expired:
        return "This invite has expired"
    if invite.is_exhausted:
        return "This invite has reached its maximum number of uses"
    return None


def _mark_expired(invite: GroupInvite) -> None:
    if invite.status == InviteStatus.ACTIVE and invite.is_expired:
        GroupInvite.objects.filter(id=invite.id).update(status=InviteStatus.EXPIRED)
        invite.status = InviteStatus.EXPIRED
        logger.debug("Invite %s marked expired", invite.code)


def _get_by_code(code: str, lock: bool = False) -> GroupInvite:
    queryset = GroupInvite.objects.select_related('group', 'invited_by')
    if lock:
        queryset = queryset.select_for_update(of=('self',))
    try:
        return queryset.get(code=code)
    except GroupInvite.DoesNotExist:
        raise InviteNotFoundError("Invite not found")


@transaction.atomic
def create_invite(
    *,
    group_id: UUID,
    user: User,
    expires_in_days: Optional[int] = None,
    max_uses: Optional[int] = None
) -> GroupInvite:
    """
    Create an invite for a group (any member).

    Args:
        group_id: UUID of the group
        user: Member creating the invite
        expires_in_days: Days until the invite expires. Falls back to the
            INVITE_DEFAULT_EXPIRY_DAYS setting; None means no expiry.
        max_uses: Maximum number of accepted joins, None for unlimited

    Returns:
        Created GroupInvite instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
    """
    group = require_membership(group_id=group_id, user=user)

    if expires_in_days is None:
        expires_in_days = getattr(settings, 'INVITE_DEFAULT_EXPIRY_DAYS', None)

    expires_at = None
    if expires_in_days:
        expires_at = timezone.now() + timedelta(days=expires_in_days)

    invite = GroupInvite.objects.create(
        group=group,
        invited_by=user,
        expires_at=expires_at,
        max_uses=max_uses or None,
    )

    logger.info("Invite %s created for group %s by %s", invite.code, group.id, user.id)
    return invite


def get_invite(*, code: str, user: Optional[User] = None) -> Tuple[GroupInvite, bool]:
    """
    Look up an invite for display before joining.

    An active invite whose expiry date has passed is switched to
    ``expired`` as a side effect.

    Args:
        code: Invite code
        user: Optional authenticated user, used to report membership

    Returns:
        Tuple of (invite, already_member)

    Raises:
        InviteNotFoundError: If no invite has this code
        InviteExpiredError: If the invite is expired, revoked or used up
    """
    invite = _get_by_code(code)

    reason = _unusable_reason(invite)
    if reason:
        _mark_expired(invite)
        raise InviteExpiredError(reason)

    already_member = bool(user and user.is_authenticated and invite.group.has_member(user))
    return invite, already_member


def accept_invite(*, code: str, user: User) -> GroupMembership:
    """
    Join the invite's group as a regular member.

    The invite row is locked while the use counter is checked and
    incremented, so concurrent accepts cannot exceed ``max_uses``.

    Args:
        code: Invite code
        user: User joining the group

    Returns:
        Created GroupMembership instance

    Raises:
        InviteNotFoundError: If no invite has this code
        InviteExpiredError: If the invite is expired, revoked or used up
        AlreadyMemberError: If user already belongs to the group
    """
    with transaction.atomic():
        invite = _get_by_code(code, lock=True)
        reason = _unusable_reason(invite)

        if reason is None:
            group = invite.group
            if group.has_member(user):
                raise AlreadyMemberError("You are already a member of this group")

            try:
                with transaction.atomic():
                    membership = GroupMembership.objects.create(
                        user=user,
                        group=group,
                        role=GroupRole.MEMBER
                    )
            except IntegrityError:
                raise AlreadyMemberError("You are already a member of this group")

            GroupInvite.objects.filter(id=invite.id).update(used_count=F('used_count') + 1)
            logger.info("User %s joined group %s via invite %s", user.id, group.id, code)
            return membership

        _mark_expired(invite)

    # Raised outside the transaction so the expired status is kept.
    raise InviteExpiredError(reason)


@transaction.atomic
def revoke_invite(*, code: str, user: User) -> GroupInvite:
    """
    Revoke an invite (invite creator or group admin).

    Args:
        code: Invite code
        user: User revoking the invite

    Returns:
        Updated GroupInvite instance

    Raises:
        InviteNotFoundError: If no invite has this code
        InsufficientPermissionsError: If user is neither creator nor admin
    """
    invite = _get_by_code(code, lock=True)

    if invite.invited_by_id != user.id and not invite.group.is_admin(user):
        raise InsufficientPermissionsError(
            "Only the invite creator or group admins can revoke invites"
        )

    if invite.status != InviteStatus.REVOKED:
        invite.status = InviteStatus.REVOKED
        invite.save(update_fields=['status'])
        logger.info("Invite %s revoked by %s", code, user.id)

    return invite


def list_group_invites(*, group_id: UUID, user: User) -> QuerySet[GroupInvite]:
    """
    List every invite of a group, newest first (any member).

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
    """
    group = require_membership(group_id=group_id, user=user)
    return (
        GroupInvite.objects
        .filter(group=group)
        .select_related('invited_by')
        .order_by('-created_at')
    )
