import pytest
import datetime
from decimal import Decimal
from apps.expenses.models import Expense, ExpenseCategory
from apps.expenses.exceptions import (
    ExpenseNotFoundError,
    ExpensePermissionError,
    InvalidExpenseError,
)
from apps.expenses.services import (
    SpendingPeriod,
    create_expense,
    update_expense,
    delete_expense,
    list_expenses,
    get_spending_summary,
    period_start,
)
from apps.groups.services import NotMemberError
from apps.settlements.signals import expenses_changed


# =============================================================================
# Create / Update / Delete
# =============================================================================

@pytest.mark.django_db
class TestCreateExpense:

    def test_payer_defaults_to_caller(self, group_with_members, member_user, today):
        expense = create_expense(
            group_id=group_with_members.id,
            user=member_user,
            amount=Decimal('12.50'),
            description='Coffee',
            date=today,
        )

        assert expense.paid_by == member_user
        assert expense.category == ExpenseCategory.OTHER

    def test_on_behalf_of_another_member(self, group_with_members, member_user, admin_user, today):
        expense = create_expense(
            group_id=group_with_members.id,
            user=member_user,
            amount=Decimal('20'),
            description='Taxi',
            date=today,
            category=ExpenseCategory.TRANSPORT,
            paid_by=admin_user,
        )

        assert expense.paid_by == admin_user

    def test_non_member_cannot_log(self, group, outsider, today):
        with pytest.raises(NotMemberError):
            create_expense(
                group_id=group.id,
                user=outsider,
                amount=Decimal('10'),
                description='Sneaky',
                date=today,
            )

    def test_payer_must_be_member(self, group, group_owner, outsider, today):
        with pytest.raises(InvalidExpenseError):
            create_expense(
                group_id=group.id,
                user=group_owner,
                amount=Decimal('10'),
                description='Dinner',
                date=today,
                paid_by=outsider,
            )

    def test_amount_must_be_positive(self, group, group_owner, today):
        with pytest.raises(InvalidExpenseError):
            create_expense(
                group_id=group.id,
                user=group_owner,
                amount=Decimal('0'),
                description='Nothing',
                date=today,
            )

    def test_sends_change_notification(self, group, group_owner, today, django_capture_on_commit_callbacks):
        received = []

        def receiver(sender, **kwargs):
            received.append(kwargs)

        expenses_changed.connect(receiver)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                expense = create_expense(
                    group_id=group.id,
                    user=group_owner,
                    amount=Decimal('5'),
                    description='Milk',
                    date=today,
                )
        finally:
            expenses_changed.disconnect(receiver)

        assert len(received) == 1
        assert received[0]['group_id'] == group.id
        assert received[0]['action'] == 'created'
        assert received[0]['instance_id'] == expense.id


@pytest.mark.django_db
class TestChangeExpense:

    def test_payer_updates_own_expense(self, member_expense, member_user):
        updated = update_expense(
            expense_id=member_expense.id,
            user=member_user,
            amount=Decimal('35.00'),
            description='Train tickets',
        )

        assert updated.amount == Decimal('35.00')
        assert updated.description == 'Train tickets'
        assert updated.category == ExpenseCategory.TRANSPORT

    def test_admin_updates_any_expense(self, owner_expense, admin_user):
        updated = update_expense(expense_id=owner_expense.id, user=admin_user, category=ExpenseCategory.SHOPPING)

        assert updated.category == ExpenseCategory.SHOPPING

    def test_member_cannot_update_others_expense(self, owner_expense, member_user):
        with pytest.raises(ExpensePermissionError):
            update_expense(expense_id=owner_expense.id, user=member_user, amount=Decimal('1'))

    def test_outsider_cannot_update(self, owner_expense, outsider):
        with pytest.raises(NotMemberError):
            update_expense(expense_id=owner_expense.id, user=outsider, amount=Decimal('1'))

    def test_new_payer_must_be_member(self, member_expense, member_user, outsider):
        with pytest.raises(InvalidExpenseError):
            update_expense(expense_id=member_expense.id, user=member_user, paid_by=outsider)

    def test_delete_by_payer(self, member_expense, member_user):
        delete_expense(expense_id=member_expense.id, user=member_user)

        assert not Expense.objects.filter(id=member_expense.id).exists()

    def test_delete_missing_expense(self, member_user):
        import uuid
        with pytest.raises(ExpenseNotFoundError):
            delete_expense(expense_id=uuid.uuid4(), user=member_user)

    def test_member_cannot_delete_others_expense(self, owner_expense, member_user):
        with pytest.raises(ExpensePermissionError):
            delete_expense(expense_id=owner_expense.id, user=member_user)


@pytest.mark.django_db
class TestListExpenses:

    def test_lists_only_callers_groups(self, owner_expense, member_expense, member_user, outsider):
        assert list_expenses(user=member_user).count() == 2
        assert list_expenses(user=outsider).count() == 0

    def test_group_filter_requires_membership(self, group_with_members, outsider):
        with pytest.raises(NotMemberError):
            list_expenses(user=outsider, group_id=group_with_members.id)


# =============================================================================
# Spending Summary
# =============================================================================

class TestPeriodStart:

    def test_current_month(self):
        assert period_start(SpendingPeriod.CURRENT_MONTH, datetime.date(2025, 3, 15)) == datetime.date(2025, 3, 1)

    def test_last_two_months(self):
        assert period_start(SpendingPeriod.LAST_2_MONTHS, datetime.date(2025, 3, 15)) == datetime.date(2025, 2, 1)

    def test_last_three_months_crosses_year(self):
        assert period_start(SpendingPeriod.LAST_3_MONTHS, datetime.date(2025, 1, 31)) == datetime.date(2024, 11, 1)

    def test_all_time(self):
        assert period_start(SpendingPeriod.ALL_TIME, datetime.date(2025, 3, 15)) is None

    def test_unknown_period(self):
        with pytest.raises(InvalidExpenseError):
            period_start('fortnight', datetime.date(2025, 3, 15))


@pytest.mark.django_db
class TestSpendingSummary:

    def test_per_member_totals_sorted(self, group_with_members, owner_expense, member_expense, member_user, today):
        Expense.objects.create(
            group=group_with_members,
            paid_by=member_user,
            amount=Decimal('80.00'),
            description='Cinema',
            category=ExpenseCategory.ENTERTAINMENT,
            date=today,
        )

        summary = get_spending_summary(
            group_id=group_with_members.id,
            user=member_user,
            period=SpendingPeriod.CURRENT_MONTH,
            today=today,
        )

        assert summary['total_spending'] == Decimal('200.00')
        assert summary['expense_count'] == 3
        assert [m['user'] for m in summary['members']] == [member_user, owner_expense.paid_by]
        assert summary['members'][0]['total'] == Decimal('110.00')
        assert summary['members'][0]['categories'] == {
            'transport': Decimal('30.00'),
            'entertainment': Decimal('80.00'),
        }

    def test_period_excludes_older_expenses(self, group_with_members, owner_expense, group_owner, today):
        Expense.objects.create(
            group=group_with_members,
            paid_by=group_owner,
            amount=Decimal('500.00'),
            description='Last winter',
            date=datetime.date(2024, 12, 20),
        )

        current = get_spending_summary(group_id=group_with_members.id, user=group_owner, today=today)
        everything = get_spending_summary(
            group_id=group_with_members.id,
            user=group_owner,
            period=SpendingPeriod.ALL_TIME,
            today=today,
        )

        assert current['total_spending'] == Decimal('90.00')
        assert current['start_date'] == datetime.date(2025, 3, 1)
        assert everything['total_spending'] == Decimal('590.00')
        assert everything['start_date'] is None

    def test_outsider_denied(self, group_with_members, outsider):
        with pytest.raises(NotMemberError):
            get_spending_summary(group_id=group_with_members.id, user=outsider)
