import pytest
from decimal import Decimal
from apps.payments.models import Payment, PaymentStatus


@pytest.fixture
def pending_payment(group_with_members, member_user, group_owner):
    """Carol owes Alice and has recorded a transfer."""
    return Payment.objects.create(
        group=group_with_members,
        from_user=member_user,
        to_user=group_owner,
        amount=Decimal('33.33'),
        description='Groceries share',
    )


@pytest.fixture
def completed_payment(group_with_members, admin_user, group_owner):
    return Payment.objects.create(
        group=group_with_members,
        from_user=admin_user,
        to_user=group_owner,
        amount=Decimal('10.00'),
        status=PaymentStatus.COMPLETED,
    )
