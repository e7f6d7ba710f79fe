import pytest
from apps.groups.models import Group, GroupMembership, GroupInvite, GroupRole, InviteStatus
from apps.groups.services import (
    create_group,
    update_group,
    delete_group,
    get_group_by_id,
    require_membership,
    leave_group,
    remove_member,
    get_group_members,
    update_member_role,
    create_invite,
    get_invite,
    accept_invite,
    revoke_invite,
    list_group_invites,
    GroupNotFoundError,
    NotMemberError,
    AlreadyMemberError,
    OwnerCannotLeaveError,
    CannotRemoveOwnerError,
    CannotChangeOwnerRoleError,
    InsufficientPermissionsError,
    InviteNotFoundError,
    InviteExpiredError,
)


# =============================================================================
# Group Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestGroupManagement:
    """Tests for group_management.py service functions."""

    def test_create_group_adds_owner_membership(self, group_owner):
        group = create_group(name='Trip to Lisbon', owner=group_owner, description='May 2025')

        assert group.name == 'Trip to Lisbon'
        assert group.owner == group_owner
        assert group.get_user_role(group_owner) == GroupRole.OWNER

    def test_get_group_by_id_not_found(self):
        import uuid
        with pytest.raises(GroupNotFoundError):
            get_group_by_id(group_id=uuid.uuid4())

    def test_update_group_by_admin(self, group_with_members, admin_user):
        updated = update_group(group_id=group_with_members.id, user=admin_user, name='Renamed')

        assert updated.name == 'Renamed'
        assert updated.description == 'Shared flat expenses'

    def test_update_group_by_member_denied(self, group_with_members, member_user):
        with pytest.raises(InsufficientPermissionsError):
            update_group(group_id=group_with_members.id, user=member_user, name='Nope')

    def test_delete_group_owner_only(self, group_with_members, group_owner, admin_user):
        with pytest.raises(InsufficientPermissionsError):
            delete_group(group_id=group_with_members.id, user=admin_user)

        delete_group(group_id=group_with_members.id, user=group_owner)
        assert not Group.objects.filter(id=group_with_members.id).exists()


# =============================================================================
# Membership Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestMembershipManagement:
    """Tests for membership_management.py service functions."""

    def test_require_membership_returns_group(self, group_with_members, member_user):
        assert require_membership(group_id=group_with_members.id, user=member_user) == group_with_members

    def test_require_membership_non_member(self, group, outsider):
        with pytest.raises(NotMemberError):
            require_membership(group_id=group.id, user=outsider)

    def test_require_membership_admin_flag(self, group_with_members, member_user, admin_user):
        with pytest.raises(InsufficientPermissionsError):
            require_membership(group_id=group_with_members.id, user=member_user, admin=True)

        assert require_membership(group_id=group_with_members.id, user=admin_user, admin=True)

    def test_leave_group_success(self, group_with_members, member_user):
        leave_group(group_id=group_with_members.id, user=member_user)

        assert not GroupMembership.objects.filter(group=group_with_members, user=member_user).exists()

    def test_leave_group_owner_cannot_leave(self, group, group_owner):
        with pytest.raises(OwnerCannotLeaveError):
            leave_group(group_id=group.id, user=group_owner)

    def test_leave_group_not_member(self, group, outsider):
        with pytest.raises(NotMemberError):
            leave_group(group_id=group.id, user=outsider)

    def test_remove_member_success(self, group_with_members, admin_user, member_user):
        remove_member(group_id=group_with_members.id, user_id=member_user.id, removed_by=admin_user)

        assert not group_with_members.has_member(member_user)

    def test_remove_member_cannot_remove_owner(self, group_with_members, group_owner, admin_user):
        with pytest.raises(CannotRemoveOwnerError):
            remove_member(group_id=group_with_members.id, user_id=group_owner.id, removed_by=admin_user)

    def test_remove_member_requires_admin(self, group_with_members, admin_user, member_user):
        with pytest.raises(InsufficientPermissionsError):
            remove_member(group_id=group_with_members.id, user_id=admin_user.id, removed_by=member_user)

    def test_get_group_members(self, group_with_members):
        members = get_group_members(group_id=group_with_members.id)

        assert members.count() == 3
        assert {m.role for m in members} == {'owner', 'admin', 'member'}


# =============================================================================
# Role Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestRoleManagement:
    """Tests for role_management.py service functions."""

    def test_promote_member(self, group_with_members, group_owner, member_user):
        membership = update_member_role(
            group_id=group_with_members.id,
            user_id=member_user.id,
            new_role=GroupRole.ADMIN,
            updated_by=group_owner
        )

        assert membership.role == GroupRole.ADMIN

    def test_cannot_change_owner_role(self, group_with_members, group_owner, admin_user):
        with pytest.raises(CannotChangeOwnerRoleError):
            update_member_role(
                group_id=group_with_members.id,
                user_id=group_owner.id,
                new_role=GroupRole.MEMBER,
                updated_by=admin_user
            )

    def test_owner_role_not_assignable(self, group_with_members, group_owner, member_user):
        with pytest.raises(ValueError):
            update_member_role(
                group_id=group_with_members.id,
                user_id=member_user.id,
                new_role=GroupRole.OWNER,
                updated_by=group_owner
            )

    def test_member_cannot_change_roles(self, group_with_members, member_user, admin_user):
        with pytest.raises(InsufficientPermissionsError):
            update_member_role(
                group_id=group_with_members.id,
                user_id=admin_user.id,
                new_role=GroupRole.MEMBER,
                updated_by=member_user
            )


# =============================================================================
# Invite Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestInviteManagement:
    """Tests for invite_management.py service functions."""

    def test_create_invite_with_limits(self, group_with_members, member_user):
        invite = create_invite(
            group_id=group_with_members.id,
            user=member_user,
            expires_in_days=7,
            max_uses=3
        )

        assert invite.status == InviteStatus.ACTIVE
        assert invite.invited_by == member_user
        assert invite.expires_at is not None
        assert invite.max_uses == 3
        assert invite.used_count == 0
        assert len(invite.code) > 0

    def test_create_invite_without_expiry(self, group, group_owner, settings):
        settings.INVITE_DEFAULT_EXPIRY_DAYS = None
        invite = create_invite(group_id=group.id, user=group_owner)

        assert invite.expires_at is None
        assert invite.max_uses is None

    def test_create_invite_default_expiry_setting(self, group, group_owner, settings):
        settings.INVITE_DEFAULT_EXPIRY_DAYS = 3
        invite = create_invite(group_id=group.id, user=group_owner)

        assert invite.expires_at is not None

    def test_create_invite_non_member(self, group, outsider):
        with pytest.raises(NotMemberError):
            create_invite(group_id=group.id, user=outsider)

    def test_get_invite_reports_membership(self, invite, group_owner, outsider):
        _, already_member = get_invite(code=invite.code, user=group_owner)
        assert already_member is True

        _, already_member = get_invite(code=invite.code, user=outsider)
        assert already_member is False

    def test_get_invite_unknown_code(self):
        with pytest.raises(InviteNotFoundError):
            get_invite(code='does-not-exist')

    def test_get_invite_expired_flips_status(self, expired_invite):
        with pytest.raises(InviteExpiredError):
            get_invite(code=expired_invite.code)

        expired_invite.refresh_from_db()
        assert expired_invite.status == InviteStatus.EXPIRED

    def test_get_invite_revoked(self, revoked_invite):
        with pytest.raises(InviteExpiredError):
            get_invite(code=revoked_invite.code)

    def test_accept_invite_joins_and_counts(self, invite, outsider):
        membership = accept_invite(code=invite.code, user=outsider)

        assert membership.role == GroupRole.MEMBER
        assert invite.group.has_member(outsider)
        invite.refresh_from_db()
        assert invite.used_count == 1

    def test_accept_invite_already_member(self, invite, group_owner):
        with pytest.raises(AlreadyMemberError):
            accept_invite(code=invite.code, user=group_owner)

        invite.refresh_from_db()
        assert invite.used_count == 0

    def test_accept_invite_exhausted(self, single_use_invite, outsider, member_user):
        accept_invite(code=single_use_invite.code, user=outsider)

        with pytest.raises(InviteExpiredError):
            accept_invite(code=single_use_invite.code, user=member_user)

        assert not single_use_invite.group.has_member(member_user)

    def test_accept_expired_invite_keeps_expired_status(self, expired_invite, outsider):
        with pytest.raises(InviteExpiredError):
            accept_invite(code=expired_invite.code, user=outsider)

        expired_invite.refresh_from_db()
        assert expired_invite.status == InviteStatus.EXPIRED
        assert not expired_invite.group.has_member(outsider)

    def test_revoke_invite_by_creator(self, group_with_members, member_user):
        invite = GroupInvite.objects.create(group=group_with_members, invited_by=member_user)

        revoked = revoke_invite(code=invite.code, user=member_user)

        assert revoked.status == InviteStatus.REVOKED

    def test_revoke_invite_by_admin(self, group_with_members, invite, admin_user):
        assert revoke_invite(code=invite.code, user=admin_user).status == InviteStatus.REVOKED

    def test_revoke_invite_by_plain_member_denied(self, group_with_members, invite, member_user):
        with pytest.raises(InsufficientPermissionsError):
            revoke_invite(code=invite.code, user=member_user)

    def test_list_group_invites(self, group, group_owner, invite, revoked_invite):
        invites = list_group_invites(group_id=group.id, user=group_owner)

        assert invites.count() == 2
