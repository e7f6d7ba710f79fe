import pytest
import datetime
import uuid
from decimal import Decimal
from apps.expenses.models import Expense
from apps.groups.models import GroupMembership
from apps.groups.services import GroupNotFoundError, NotMemberError
from apps.payments.exceptions import InvalidPaymentError
from apps.payments.models import Payment, PaymentStatus
from apps.settlements.services import build_snapshot, get_group_settlement, settle_transfer


def balances_by_user(result):
    return {b['user'].id: b['net_balance'] for b in result['balances']}


@pytest.mark.django_db
class TestBuildSnapshot:

    def test_roster_and_records(self, group_with_members, group_owner, rent_paid_by_owner, pending_payback):
        members, expenses, payments, users = build_snapshot(group_with_members)

        names = {m.id: m.display_name for m in members}
        assert len(members) == 3
        assert names[str(group_owner.id)] == 'Alice'
        assert expenses[0].payer_id == str(group_owner.id)
        assert expenses[0].amount == Decimal('300.00')
        assert payments[0].status == 'pending'
        assert users[str(group_owner.id)] == group_owner


@pytest.mark.django_db
class TestGroupSettlement:

    def test_unequal_spend(self, group_with_members, member_user, group_owner, admin_user, rent_paid_by_owner):
        result = get_group_settlement(group_id=group_with_members.id, user=member_user)

        assert result['member_count'] == 3
        assert result['total_spent'] == Decimal('300')
        assert result['fair_share'] == Decimal('100')
        assert balances_by_user(result) == {
            group_owner.id: Decimal('200'),
            admin_user.id: Decimal('-100'),
            member_user.id: Decimal('-100'),
        }
        assert {(t['from_user'].id, t['to_user'].id, t['amount']) for t in result['transfers']} == {
            (admin_user.id, group_owner.id, Decimal('100')),
            (member_user.id, group_owner.id, Decimal('100')),
        }

    def test_completed_and_pending_payments(
        self, group_with_members, group_owner, admin_user, member_user,
        rent_paid_by_owner, completed_payback, pending_payback
    ):
        result = get_group_settlement(group_id=group_with_members.id, user=group_owner)

        assert balances_by_user(result) == {
            group_owner.id: Decimal('100'),
            admin_user.id: Decimal('-100'),
            member_user.id: Decimal('0'),
        }
        assert len(result['transfers']) == 1
        assert result['transfers'][0]['from_user'] == admin_user

    def test_member_without_expenses_counts(self, group, group_owner, member_user):
        GroupMembership.objects.create(user=member_user, group=group)
        Expense.objects.create(
            group=group, paid_by=group_owner, amount=Decimal('200'),
            description='Sofa', date=datetime.date(2025, 3, 1)
        )

        result = get_group_settlement(group_id=group.id, user=member_user)

        assert balances_by_user(result) == {
            group_owner.id: Decimal('100'),
            member_user.id: Decimal('-100'),
        }

    def test_former_member_payments_ignored(self, group_with_members, group_owner, admin_user, rent_paid_by_owner, outsider):
        GroupMembership.objects.create(user=outsider, group=group_with_members)
        Payment.objects.create(
            group=group_with_members, from_user=outsider, to_user=group_owner,
            amount=Decimal('75'), status=PaymentStatus.COMPLETED
        )
        GroupMembership.objects.filter(user=outsider, group=group_with_members).delete()

        result = get_group_settlement(group_id=group_with_members.id, user=admin_user)

        assert balances_by_user(result)[group_owner.id] == Decimal('200')

    def test_empty_group(self, group, group_owner):
        result = get_group_settlement(group_id=group.id, user=group_owner)

        assert result['total_spent'] == 0
        assert result['transfers'] == []

    def test_non_member(self, group, outsider):
        with pytest.raises(NotMemberError):
            get_group_settlement(group_id=group.id, user=outsider)

    def test_missing_group(self, group_owner):
        with pytest.raises(GroupNotFoundError):
            get_group_settlement(group_id=uuid.uuid4(), user=group_owner)


@pytest.mark.django_db
class TestSettleTransfer:

    def test_creates_pending_payment(self, group_with_members, member_user, group_owner):
        payment = settle_transfer(
            group_id=group_with_members.id,
            user=member_user,
            from_user=member_user,
            to_user=group_owner,
            amount=Decimal('100.00'),
        )

        assert payment.status == PaymentStatus.PENDING
        assert payment.description == 'Settlement'

    def test_pending_settlement_does_not_move_balances(
        self, group_with_members, member_user, group_owner, rent_paid_by_owner
    ):
        settle_transfer(
            group_id=group_with_members.id,
            user=member_user,
            from_user=member_user,
            to_user=group_owner,
            amount=Decimal('100.00'),
        )

        result = get_group_settlement(group_id=group_with_members.id, user=member_user)

        assert balances_by_user(result)[member_user.id] == Decimal('-100')

    def test_recipient_must_be_member(self, group_with_members, member_user, outsider):
        with pytest.raises(InvalidPaymentError):
            settle_transfer(
                group_id=group_with_members.id,
                user=member_user,
                from_user=member_user,
                to_user=outsider,
                amount=Decimal('10'),
            )
