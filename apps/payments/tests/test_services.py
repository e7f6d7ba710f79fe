import pytest
from decimal import Decimal
from apps.payments.exceptions import (
    InvalidPaymentError,
    InvalidStateTransitionError,
    PaymentNotFoundError,
    PaymentPermissionError,
)
from apps.payments.models import Payment, PaymentStatus
from apps.payments.services import PaymentService
from apps.groups.services import NotMemberError
from apps.settlements.signals import payments_changed


# =============================================================================
# Creation
# =============================================================================

@pytest.mark.django_db
class TestCreatePayment:

    def test_created_pending(self, group_with_members, member_user, admin_user):
        payment = PaymentService.create_payment(
            group_id=group_with_members.id,
            user=member_user,
            from_user=member_user,
            to_user=admin_user,
            amount=Decimal('12.00'),
        )

        assert payment.status == PaymentStatus.PENDING
        assert payment.completed_at is None

    def test_third_member_can_record(self, group_with_members, group_owner, member_user, admin_user):
        payment = PaymentService.create_payment(
            group_id=group_with_members.id,
            user=group_owner,
            from_user=member_user,
            to_user=admin_user,
            amount=Decimal('5'),
        )

        assert payment.from_user == member_user

    def test_same_user_rejected(self, group_with_members, member_user):
        with pytest.raises(InvalidPaymentError):
            PaymentService.create_payment(
                group_id=group_with_members.id,
                user=member_user,
                from_user=member_user,
                to_user=member_user,
                amount=Decimal('5'),
            )

    def test_non_positive_amount_rejected(self, group_with_members, member_user, admin_user):
        with pytest.raises(InvalidPaymentError):
            PaymentService.create_payment(
                group_id=group_with_members.id,
                user=member_user,
                from_user=member_user,
                to_user=admin_user,
                amount=Decimal('-1'),
            )

    def test_description_limit(self, group_with_members, member_user, admin_user):
        with pytest.raises(InvalidPaymentError):
            PaymentService.create_payment(
                group_id=group_with_members.id,
                user=member_user,
                from_user=member_user,
                to_user=admin_user,
                amount=Decimal('5'),
                description='x' * 501,
            )

    def test_parties_must_be_members(self, group_with_members, member_user, outsider):
        with pytest.raises(InvalidPaymentError):
            PaymentService.create_payment(
                group_id=group_with_members.id,
                user=member_user,
                from_user=member_user,
                to_user=outsider,
                amount=Decimal('5'),
            )

    def test_recorder_must_be_member(self, group_with_members, outsider, member_user, admin_user):
        with pytest.raises(NotMemberError):
            PaymentService.create_payment(
                group_id=group_with_members.id,
                user=outsider,
                from_user=member_user,
                to_user=admin_user,
                amount=Decimal('5'),
            )


# =============================================================================
# State Machine
# =============================================================================

@pytest.mark.django_db
class TestPaymentStateMachine:

    def test_complete_sets_completed_at(self, pending_payment, group_owner):
        payment = PaymentService.complete_payment(payment_id=pending_payment.id, user=group_owner)

        assert payment.status == PaymentStatus.COMPLETED
        assert payment.completed_at is not None

    def test_cancel(self, pending_payment, member_user):
        payment = PaymentService.cancel_payment(payment_id=pending_payment.id, user=member_user)

        assert payment.status == PaymentStatus.CANCELLED
        assert payment.completed_at is None

    def test_completed_is_final(self, completed_payment, group_owner):
        with pytest.raises(InvalidStateTransitionError):
            PaymentService.cancel_payment(payment_id=completed_payment.id, user=group_owner)

    def test_cancelled_cannot_complete(self, pending_payment, member_user):
        PaymentService.cancel_payment(payment_id=pending_payment.id, user=member_user)

        with pytest.raises(InvalidStateTransitionError):
            PaymentService.complete_payment(payment_id=pending_payment.id, user=member_user)

        pending_payment.refresh_from_db()
        assert pending_payment.status == PaymentStatus.CANCELLED

    def test_uninvolved_member_denied(self, group_with_members, admin_user, member_user, group_owner):
        payment = Payment.objects.create(
            group=group_with_members,
            from_user=admin_user,
            to_user=group_owner,
            amount=Decimal('1.00'),
        )

        with pytest.raises(PaymentPermissionError):
            PaymentService.complete_payment(payment_id=payment.id, user=member_user)

    def test_admin_may_settle_others(self, pending_payment, admin_user):
        payment = PaymentService.complete_payment(payment_id=pending_payment.id, user=admin_user)

        assert payment.status == PaymentStatus.COMPLETED

    def test_missing_payment(self, member_user):
        import uuid
        with pytest.raises(PaymentNotFoundError):
            PaymentService.complete_payment(payment_id=uuid.uuid4(), user=member_user)

    def test_status_change_notifies(self, pending_payment, group_owner, django_capture_on_commit_callbacks):
        received = []

        def receiver(sender, **kwargs):
            received.append(kwargs['action'])

        payments_changed.connect(receiver)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                PaymentService.complete_payment(payment_id=pending_payment.id, user=group_owner)
        finally:
            payments_changed.disconnect(receiver)

        assert received == ['updated']


# =============================================================================
# Editing and Deletion
# =============================================================================

@pytest.mark.django_db
class TestUpdatePayment:

    def test_edit_pending_amount(self, pending_payment, member_user):
        payment = PaymentService.update_payment(
            payment_id=pending_payment.id,
            user=member_user,
            amount=Decimal('40.00'),
            description='Corrected',
        )

        assert payment.amount == Decimal('40.00')
        assert payment.description == 'Corrected'

    def test_status_through_update(self, pending_payment, member_user):
        payment = PaymentService.update_payment(
            payment_id=pending_payment.id,
            user=member_user,
            status=PaymentStatus.COMPLETED,
        )

        assert payment.status == PaymentStatus.COMPLETED
        assert payment.completed_at is not None

    def test_settled_amount_is_frozen(self, completed_payment, group_owner):
        with pytest.raises(InvalidStateTransitionError):
            PaymentService.update_payment(
                payment_id=completed_payment.id,
                user=group_owner,
                amount=Decimal('99.00'),
            )

    def test_settled_description_can_change(self, completed_payment, group_owner):
        payment = PaymentService.update_payment(
            payment_id=completed_payment.id,
            user=group_owner,
            description='Paid in cash',
        )

        assert payment.description == 'Paid in cash'
        assert payment.status == PaymentStatus.COMPLETED

    def test_edit_to_same_parties_rejected(self, pending_payment, member_user, group_owner):
        with pytest.raises(InvalidPaymentError):
            PaymentService.update_payment(
                payment_id=pending_payment.id,
                user=member_user,
                to_user=member_user,
            )

    def test_delete_by_participant(self, pending_payment, group_owner):
        PaymentService.delete_payment(payment_id=pending_payment.id, user=group_owner)

        assert not Payment.objects.filter(id=pending_payment.id).exists()


@pytest.mark.django_db
class TestListPayments:

    def test_filters(self, pending_payment, completed_payment, member_user, group_with_members):
        assert PaymentService.list_payments(user=member_user).count() == 2
        assert list(PaymentService.list_payments(
            user=member_user,
            group_id=group_with_members.id,
            status=PaymentStatus.COMPLETED,
        )) == [completed_payment]

    def test_outsider_group_filter(self, group_with_members, outsider):
        with pytest.raises(NotMemberError):
            PaymentService.list_payments(user=outsider, group_id=group_with_members.id)
