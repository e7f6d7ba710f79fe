import pytest
import datetime
from decimal import Decimal
from apps.expenses.models import Expense
from apps.payments.models import Payment, PaymentStatus


@pytest.fixture
def rent_paid_by_owner(group_with_members, group_owner):
    """Alice paid 300 for the whole flat."""
    return Expense.objects.create(
        group=group_with_members,
        paid_by=group_owner,
        amount=Decimal('300.00'),
        description='Rent share',
        date=datetime.date(2025, 3, 1),
    )


@pytest.fixture
def completed_payback(group_with_members, member_user, group_owner):
    """Carol already paid Alice back in full."""
    return Payment.objects.create(
        group=group_with_members,
        from_user=member_user,
        to_user=group_owner,
        amount=Decimal('100.00'),
        status=PaymentStatus.COMPLETED,
    )


@pytest.fixture
def pending_payback(group_with_members, admin_user, group_owner):
    """Bob said he would pay, but has not yet."""
    return Payment.objects.create(
        group=group_with_members,
        from_user=admin_user,
        to_user=group_owner,
        amount=Decimal('100.00'),
        status=PaymentStatus.PENDING,
    )
