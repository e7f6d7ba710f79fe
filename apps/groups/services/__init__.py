"""
Groups app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    GroupsServiceError,
    GroupNotFoundError,
    AlreadyMemberError,
    NotMemberError,
    OwnerCannotLeaveError,
    CannotChangeOwnerRoleError,
    CannotRemoveOwnerError,
    InsufficientPermissionsError,
    InviteNotFoundError,
    InviteExpiredError,
)

from .group_management import (
    create_group,
    update_group,
    delete_group,
    get_group_by_id,
)

from .membership_management import (
    require_membership,
    leave_group,
    remove_member,
    get_group_members,
)

from .role_management import (
    update_member_role,
)

from .invite_management import (
    create_invite,
    get_invite,
    accept_invite,
    revoke_invite,
    list_group_invites,
)


__all__ = [
    # Exceptions
    'GroupsServiceError',
    'GroupNotFoundError',
    'AlreadyMemberError',
    'NotMemberError',
    'OwnerCannotLeaveError',
    'CannotChangeOwnerRoleError',
    'CannotRemoveOwnerError',
    'InsufficientPermissionsError',
    'InviteNotFoundError',
    'InviteExpiredError',

    # Group Management
    'create_group',
    'update_group',
    'delete_group',
    'get_group_by_id',

    # Membership Management
    'require_membership',
    'leave_group',
    'remove_member',
    'get_group_members',

    # Role Management
    'update_member_role',

    # Invite Management
    'create_invite',
    'get_invite',
    'accept_invite',
    'revoke_invite',
    'list_group_invites',
]
