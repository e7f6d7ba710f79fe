"""
Expense Services Module
=======================

Business logic for recording group expenses and summarising spending.

Every function takes keyword arguments only, runs membership checks
through ``apps.groups.services.require_membership`` and sends
``expenses_changed`` after a successful write.

Example:
    Logging an expense paid by the current user::

        from apps.expenses.services import create_expense

        expense = create_expense(
            group_id=group.id,
            user=request.user,
            amount=Decimal('42.50'),
            description='Groceries',
            date=date.today(),
            category='food',
        )
"""

import datetime
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import Group
from apps.groups.services import require_membership
from apps.settlements.signals import (
    CREATED,
    DELETED,
    UPDATED,
    expenses_changed,
    notify_on_commit,
)

from .exceptions import (
    ExpenseNotFoundError,
    ExpensePermissionError,
    InvalidExpenseError,
)
from .models import Expense, ExpenseCategory

logger = logging.getLogger(__name__)


class SpendingPeriod:
    CURRENT_MONTH = 'current_month'
    LAST_2_MONTHS = 'last_2_months'
    LAST_3_MONTHS = 'last_3_months'
    ALL_TIME = 'all_time'

    # Number of calendar months covered, counting the current one.
    MONTHS = {
        CURRENT_MONTH: 1,
        LAST_2_MONTHS: 2,
        LAST_3_MONTHS: 3,
    }

    choices = [CURRENT_MONTH, LAST_2_MONTHS, LAST_3_MONTHS, ALL_TIME]


def period_start(period: str, today: datetime.date) -> Optional[datetime.date]:
    """
    First day included in a spending period, or None for all time.

    ``last_2_months`` on 2025-03-15 starts at 2025-02-01.
    """
    if period == SpendingPeriod.ALL_TIME:
        return None
    if period not in SpendingPeriod.MONTHS:
        raise InvalidExpenseError(f"Unknown period '{period}'")

    months_back = SpendingPeriod.MONTHS[period] - 1
    month_index = today.year * 12 + (today.month - 1) - months_back
    return datetime.date(month_index // 12, month_index % 12 + 1, 1)


def _check_payer(group: Group, payer: User) -> None:
    if not group.has_member(payer):
        raise InvalidExpenseError("The payer must be a member of the group")


def _check_amount(amount: Decimal) -> None:
    if amount is None or amount <= 0:
        raise InvalidExpenseError("Amount must be greater than zero")


def _get_for_change(expense_id: UUID, user: User) -> Expense:
    try:
        expense = (
            Expense.objects
            .select_for_update(of=('self',))
            .select_related('group')
            .get(id=expense_id)
        )
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")

    require_membership(group_id=expense.group_id, user=user)

    if expense.paid_by_id != user.id and not expense.group.is_admin(user):
        raise ExpensePermissionError(
            "You can only change your own expenses unless you are a group admin"
        )
    return expense


@transaction.atomic
def create_expense(
    *,
    group_id: UUID,
    user: User,
    amount: Decimal,
    description: str,
    date: datetime.date,
    category: str = ExpenseCategory.OTHER,
    paid_by: Optional[User] = None
) -> Expense:
    """
    Record an expense in a group.

    Args:
        group_id: UUID of the group
        user: Member logging the expense
        amount: Amount spent, must be positive
        description: What the money was spent on
        date: Day of the expense
        category: One of ExpenseCategory values
        paid_by: Member who paid. Defaults to ``user``.

    Returns:
        Created Expense instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        InvalidExpenseError: If the payer is not a member or amount is not positive
    """
    group = require_membership(group_id=group_id, user=user)

    payer = paid_by or user
    _check_payer(group, payer)
    _check_amount(amount)

    expense = Expense.objects.create(
        group=group,
        paid_by=payer,
        amount=amount,
        description=description,
        category=category,
        date=date,
    )

    logger.info("Expense %s of %s added to group %s", expense.id, amount, group.id)
    notify_on_commit(
        expenses_changed, Expense,
        group_id=group.id, action=CREATED, instance_id=expense.id
    )
    return expense


@transaction.atomic
def update_expense(
    *,
    expense_id: UUID,
    user: User,
    amount: Optional[Decimal] = None,
    description: Optional[str] = None,
    category: Optional[str] = None,
    date: Optional[datetime.date] = None,
    paid_by: Optional[User] = None
) -> Expense:
    """
    Update an expense (payer or group admin).

    Only the given fields change. The group of an expense is fixed.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        NotMemberError: If user is not a member of the expense's group
        ExpensePermissionError: If user is neither payer nor admin
        InvalidExpenseError: If the new payer or amount is invalid
    """
    expense = _get_for_change(expense_id, user)

    update_fields = ['updated_at']

    if amount is not None:
        _check_amount(amount)
        expense.amount = amount
        update_fields.append('amount')

    if description is not None:
        expense.description = description
        update_fields.append('description')

    if category is not None:
        expense.category = category
        update_fields.append('category')

    if date is not None:
        expense.date = date
        update_fields.append('date')

    if paid_by is not None:
        _check_payer(expense.group, paid_by)
        expense.paid_by = paid_by
        update_fields.append('paid_by')

    expense.save(update_fields=update_fields)

    notify_on_commit(
        expenses_changed, Expense,
        group_id=expense.group_id, action=UPDATED, instance_id=expense.id
    )
    return expense


@transaction.atomic
def delete_expense(*, expense_id: UUID, user: User) -> None:
    """
    Delete an expense (payer or group admin).

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        NotMemberError: If user is not a member of the expense's group
        ExpensePermissionError: If user is neither payer nor admin
    """
    expense = _get_for_change(expense_id, user)
    group_id = expense.group_id

    expense.delete()

    logger.info("Expense %s deleted from group %s by %s", expense_id, group_id, user.id)
    notify_on_commit(
        expenses_changed, Expense,
        group_id=group_id, action=DELETED, instance_id=expense_id
    )


def list_expenses(*, user: User, group_id: Optional[UUID] = None) -> QuerySet[Expense]:
    """
    Expenses visible to ``user``, newest date first.

    With ``group_id`` the caller must be a member of that group; without
    it, expenses of every group the caller belongs to are returned.
    """
    queryset = Expense.objects.select_related('paid_by', 'group')

    if group_id:
        require_membership(group_id=group_id, user=user)
        return queryset.filter(group_id=group_id)

    return queryset.filter(group__memberships__user=user).distinct()


def get_spending_summary(
    *,
    group_id: UUID,
    user: User,
    period: str = SpendingPeriod.CURRENT_MONTH,
    today: Optional[datetime.date] = None
) -> dict:
    """
    Summarise group spending per member for a period.

    Args:
        group_id: UUID of the group
        user: Member asking for the summary
        period: One of SpendingPeriod.choices
        today: Reference day, defaults to the current local date

    Returns:
        dict with ``period``, ``start_date``, ``total_spending``,
        ``expense_count`` and ``members``. Each member entry holds
        ``user``, ``total`` and ``categories`` (category -> amount),
        sorted by total descending.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        InvalidExpenseError: If period is unknown
    """
    group = require_membership(group_id=group_id, user=user)
    today = today or timezone.localdate()
    start = period_start(period, today)

    expenses = Expense.objects.filter(group=group).select_related('paid_by')
    if start is not None:
        expenses = expenses.filter(date__gte=start)

    totals = {}
    categories = defaultdict(lambda: defaultdict(lambda: Decimal('0.00')))
    payers = {}
    total_spending = Decimal('0.00')
    expense_count = 0

    for expense in expenses:
        payer_id = expense.paid_by_id
        payers[payer_id] = expense.paid_by
        totals[payer_id] = totals.get(payer_id, Decimal('0.00')) + expense.amount
        categories[payer_id][expense.category] += expense.amount
        total_spending += expense.amount
        expense_count += 1

    members = sorted(
        (
            {
                'user': payers[payer_id],
                'total': total,
                'categories': dict(categories[payer_id]),
            }
            for payer_id, total in totals.items()
        ),
        key=lambda entry: entry['total'],
        reverse=True,
    )

    return {
        'period': period,
        'start_date': start,
        'total_spending': total_spending,
        'expense_count': expense_count,
        'members': members,
    }
