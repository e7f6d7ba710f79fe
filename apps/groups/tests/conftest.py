import pytest
from datetime import timedelta
from django.utils import timezone
from apps.groups.models import GroupInvite, InviteStatus


@pytest.fixture
def invite(group, group_owner):
    """Active invite without expiry or use limit."""
    return GroupInvite.objects.create(group=group, invited_by=group_owner)


@pytest.fixture
def expired_invite(group, group_owner):
    """Invite still marked active whose expiry date has passed."""
    return GroupInvite.objects.create(
        group=group,
        invited_by=group_owner,
        expires_at=timezone.now() - timedelta(days=1),
    )


@pytest.fixture
def single_use_invite(group, group_owner):
    return GroupInvite.objects.create(group=group, invited_by=group_owner, max_uses=1)


@pytest.fixture
def revoked_invite(group, group_owner):
    return GroupInvite.objects.create(
        group=group,
        invited_by=group_owner,
        status=InviteStatus.REVOKED,
    )
