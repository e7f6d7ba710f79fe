"""
Payment Services Module
=======================

Business logic for direct payments between group members.

Classes:
    PaymentService: Creates, edits and settles payments and drives the
        status state machine.

A payment is created PENDING. It can move once, to COMPLETED or to
CANCELLED, and only completed payments count towards group balances::

    PENDING --complete--> COMPLETED
       \\
        `----cancel----> CANCELLED

Example:
    Recording that Bob paid Alice back::

        from apps.payments.services import PaymentService

        payment = PaymentService.create_payment(
            group_id=group.id,
            user=bob,
            from_user=bob,
            to_user=alice,
            amount=Decimal('33.33'),
        )
        PaymentService.complete_payment(payment_id=payment.id, user=alice)
"""

import logging
from decimal import Decimal

from django.db import transaction

from apps.groups.services import require_membership
from apps.settlements.signals import (
    CREATED,
    DELETED,
    UPDATED,
    notify_on_commit,
    payments_changed,
)

from .exceptions import (
    InvalidPaymentError,
    InvalidStateTransitionError,
    PaymentNotFoundError,
    PaymentPermissionError,
)
from .models import Payment, PaymentStatus

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 500


class PaymentService:
    """
    Service for member-to-member payments.

    Every method takes keyword arguments, checks group membership first,
    and runs in a transaction. Methods that change an existing payment
    lock its row with SELECT FOR UPDATE so concurrent status changes
    cannot both succeed.
    """

    @staticmethod
    def _validate(group, from_user, to_user, amount, description):
        if from_user.id == to_user.id:
            raise InvalidPaymentError("Payer and recipient must be different users")
        if amount is None or amount <= 0:
            raise InvalidPaymentError("Amount must be greater than 0")
        if description and len(description) > MAX_DESCRIPTION_LENGTH:
            raise InvalidPaymentError(
                f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters"
            )
        if not group.has_member(from_user):
            raise InvalidPaymentError("Payer is not a member of this group")
        if not group.has_member(to_user):
            raise InvalidPaymentError("Recipient is not a member of this group")

    @staticmethod
    def _get_for_change(payment_id, user):
        """Lock a payment and check the user may change it."""
        try:
            payment = (
                Payment.objects
                .select_for_update(of=('self',))
                .select_related('group', 'from_user', 'to_user')
                .get(id=payment_id)
            )
        except Payment.DoesNotExist:
            raise PaymentNotFoundError(f"Payment with ID {payment_id} not found")

        require_membership(group_id=payment.group_id, user=user)

        if not payment.involves(user) and not payment.group.is_admin(user):
            raise PaymentPermissionError(
                "You can only change payments involving yourself unless you are a group admin"
            )
        return payment

    @staticmethod
    def create_payment(*, group_id, user, from_user, to_user, amount, description=''):
        """
        Record a new PENDING payment.

        Args:
            group_id (UUID): The group the payment belongs to.
            user (User): Member recording the payment. Does not have to be
                one of the two parties.
            from_user (User): Member sending the money.
            to_user (User): Member receiving the money.
            amount (Decimal): Positive amount.
            description (str, optional): Up to 500 characters.

        Returns:
            Payment: The created payment with status PENDING.

        Raises:
            GroupNotFoundError: If the group doesn't exist.
            NotMemberError: If ``user`` is not a member.
            InvalidPaymentError: If the parties are the same user or not
                members, the amount is not positive or the description is
                too long.
        """
        with transaction.atomic():
            group = require_membership(group_id=group_id, user=user)
            amount = Decimal(amount)
            PaymentService._validate(group, from_user, to_user, amount, description)

            payment = Payment.objects.create(
                group=group,
                from_user=from_user,
                to_user=to_user,
                amount=amount,
                description=description or '',
                status=PaymentStatus.PENDING,
            )

            logger.info(
                "Payment %s of %s from %s to %s recorded in group %s",
                payment.id, amount, from_user.id, to_user.id, group.id
            )
            notify_on_commit(
                payments_changed, Payment,
                group_id=group.id, action=CREATED, instance_id=payment.id
            )
            return payment

    @staticmethod
    def update_payment(*, payment_id, user, from_user=None, to_user=None,
                       amount=None, description=None, status=None):
        """
        Edit a payment (participant or group admin).

        Parties and amount can only change while the payment is PENDING.
        The description can always change. A ``status`` goes through the
        same state machine as ``complete_payment``/``cancel_payment``.

        Returns:
            Payment: The updated payment.

        Raises:
            PaymentNotFoundError: If the payment doesn't exist.
            NotMemberError: If ``user`` is not a member of its group.
            PaymentPermissionError: If ``user`` is neither party nor admin.
            InvalidPaymentError: If the edited payment would be invalid.
            InvalidStateTransitionError: If the status change is not allowed,
                or parties/amount change on a settled payment.
        """
        with transaction.atomic():
            payment = PaymentService._get_for_change(payment_id, user)

            changes_money = any(v is not None for v in (from_user, to_user, amount))
            if changes_money and payment.status != PaymentStatus.PENDING:
                raise InvalidStateTransitionError(
                    f"Cannot edit amount or parties of a {payment.status} payment"
                )

            new_from = from_user or payment.from_user
            new_to = to_user or payment.to_user
            new_amount = Decimal(amount) if amount is not None else payment.amount
            new_description = description if description is not None else payment.description

            PaymentService._validate(payment.group, new_from, new_to, new_amount, new_description)

            payment.from_user = new_from
            payment.to_user = new_to
            payment.amount = new_amount
            payment.description = new_description

            if status is not None and status != payment.status:
                PaymentService._apply_transition(payment, status)

            payment.save()

            notify_on_commit(
                payments_changed, Payment,
                group_id=payment.group_id, action=UPDATED, instance_id=payment.id
            )
            return payment

    @staticmethod
    def _apply_transition(payment, new_status):
        if not payment.can_transition_to(new_status):
            raise InvalidStateTransitionError(
                f"Cannot change payment from {payment.status} to {new_status}"
            )
        old_status = payment.status
        payment.set_status(new_status)
        logger.info("Payment %s: %s -> %s", payment.id, old_status, new_status)

    @staticmethod
    def change_status(*, payment_id, user, new_status):
        """
        Move a payment along the state machine.

        Returns:
            Payment: The updated payment. ``completed_at`` is set when the
            new status is COMPLETED.

        Raises:
            PaymentNotFoundError: If the payment doesn't exist.
            NotMemberError: If ``user`` is not a member of its group.
            PaymentPermissionError: If ``user`` is neither party nor admin.
            InvalidStateTransitionError: If the payment is not PENDING.
        """
        with transaction.atomic():
            payment = PaymentService._get_for_change(payment_id, user)
            PaymentService._apply_transition(payment, new_status)
            payment.save(update_fields=['status', 'completed_at', 'updated_at'])

            notify_on_commit(
                payments_changed, Payment,
                group_id=payment.group_id, action=UPDATED, instance_id=payment.id
            )
            return payment

    @staticmethod
    def complete_payment(*, payment_id, user):
        """Mark a PENDING payment as COMPLETED."""
        return PaymentService.change_status(
            payment_id=payment_id, user=user, new_status=PaymentStatus.COMPLETED
        )

    @staticmethod
    def cancel_payment(*, payment_id, user):
        """Mark a PENDING payment as CANCELLED."""
        return PaymentService.change_status(
            payment_id=payment_id, user=user, new_status=PaymentStatus.CANCELLED
        )

    @staticmethod
    def delete_payment(*, payment_id, user):
        """
        Delete a payment (participant or group admin).

        Raises:
            PaymentNotFoundError: If the payment doesn't exist.
            NotMemberError: If ``user`` is not a member of its group.
            PaymentPermissionError: If ``user`` is neither party nor admin.
        """
        with transaction.atomic():
            payment = PaymentService._get_for_change(payment_id, user)
            group_id = payment.group_id
            payment.delete()

            logger.info("Payment %s deleted by %s", payment_id, user.id)
            notify_on_commit(
                payments_changed, Payment,
                group_id=group_id, action=DELETED, instance_id=payment_id
            )

    @staticmethod
    def list_payments(*, user, group_id=None, status=None):
        """
        Payments visible to ``user``, newest first.

        With ``group_id`` the caller must be a member of that group;
        without it, payments of every group the caller belongs to.
        """
        queryset = Payment.objects.select_related('group', 'from_user', 'to_user')

        if group_id:
            require_membership(group_id=group_id, user=user)
            queryset = queryset.filter(group_id=group_id)
        else:
            queryset = queryset.filter(group__memberships__user=user).distinct()

        if status:
            queryset = queryset.filter(status=status)

        return queryset
