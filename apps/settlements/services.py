"""
Settlement Services Module
==========================

Loads a group snapshot from the database and runs the settlement engine
over it. Balances are recomputed on every call; nothing is stored.

Functions:
    build_snapshot: Roster, expense and payment records for a group.
    get_group_settlement: Balances and recommended transfers.
    settle_transfer: Record a recommended transfer as a pending payment.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Tuple
from uuid import UUID

from apps.accounts.models import User
from apps.expenses.models import Expense
from apps.groups.services import require_membership
from apps.payments.models import Payment
from apps.payments.services import PaymentService

from .engine import ExpenseRecord, Member, PaymentRecord, settle

logger = logging.getLogger(__name__)

SETTLEMENT_DESCRIPTION = 'Settlement'


def build_snapshot(group) -> Tuple[List[Member], List[ExpenseRecord], List[PaymentRecord], Dict[str, User]]:
    """
    Read everything the engine needs for ``group``.

    Member ids are stringified user UUIDs. Expenses and payments are read
    with ``values_list`` so no model instances are built for them.

    Returns:
        Tuple of (members, expenses, payments, users) where ``users`` maps
        member id to the User instance.
    """
    memberships = (
        group.memberships
        .select_related('user')
        .order_by('joined_at', 'id')
    )

    members = []
    users = {}
    for membership in memberships:
        member_id = str(membership.user_id)
        users[member_id] = membership.user
        members.append(Member(id=member_id, display_name=membership.user.get_display_name()))

    expenses = [
        ExpenseRecord(payer_id=str(payer_id), amount=amount)
        for payer_id, amount in Expense.objects
        .filter(group=group)
        .values_list('paid_by_id', 'amount')
    ]

    payments = [
        PaymentRecord(from_id=str(from_id), to_id=str(to_id), amount=amount, status=status)
        for from_id, to_id, amount, status in Payment.objects
        .filter(group=group)
        .values_list('from_user_id', 'to_user_id', 'amount', 'status')
    ]

    return members, expenses, payments, users


def get_group_settlement(*, group_id: UUID, user: User) -> dict:
    """
    Compute balances and the transfers that would settle a group.

    Args:
        group_id: UUID of the group
        user: Member asking

    Returns:
        Dict with group, member_count, total_spent, fair_share, balances
        (user, net_balance) and transfers (from_user, to_user, amount).

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
    """
    group = require_membership(group_id=group_id, user=user)

    members, expenses, payments, users = build_snapshot(group)
    result = settle(members, expenses, payments)

    logger.debug(
        "Settlement for group %s: %d members, %d expenses, %d payments, %d transfers",
        group.id, len(members), len(expenses), len(payments), len(result.transfers)
    )

    return {
        'group': group,
        'member_count': len(members),
        'total_spent': result.total_spent,
        'fair_share': result.fair_share,
        'balances': [
            {'user': users[b.member_id], 'net_balance': b.net_balance}
            for b in result.balances
        ],
        'transfers': [
            {
                'from_user': users[t.from_id],
                'to_user': users[t.to_id],
                'amount': t.amount,
            }
            for t in result.transfers
        ],
    }


def settle_transfer(
    *,
    group_id: UUID,
    user: User,
    from_user: User,
    to_user: User,
    amount: Decimal,
    description: str = SETTLEMENT_DESCRIPTION
) -> Payment:
    """
    Record a recommended transfer as a PENDING payment.

    The payment only moves balances once it is completed through the
    payments API.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        InvalidPaymentError: If the transfer is not a valid payment
    """
    payment = PaymentService.create_payment(
        group_id=group_id,
        user=user,
        from_user=from_user,
        to_user=to_user,
        amount=amount,
        description=description,
    )

    logger.info(
        "Settlement payment %s recorded: %s -> %s %s",
        payment.id, from_user.id, to_user.id, amount
    )
    return payment
