import pytest
import datetime
from decimal import Decimal
from apps.expenses.models import Expense, ExpenseCategory


@pytest.fixture
def today():
    return datetime.date(2025, 3, 15)


@pytest.fixture
def owner_expense(group_with_members, group_owner, today):
    """Expense paid by the group owner."""
    return Expense.objects.create(
        group=group_with_members,
        paid_by=group_owner,
        amount=Decimal('90.00'),
        description='Groceries',
        category=ExpenseCategory.FOOD,
        date=today,
    )


@pytest.fixture
def member_expense(group_with_members, member_user, today):
    """Expense paid by a plain member."""
    return Expense.objects.create(
        group=group_with_members,
        paid_by=member_user,
        amount=Decimal('30.00'),
        description='Bus tickets',
        category=ExpenseCategory.TRANSPORT,
        date=today,
    )
