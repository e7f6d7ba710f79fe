"""
Settlement engine.

Pure functions that turn a group snapshot (members, expenses, payments) into
per-member balances and a list of balancing transfers. Nothing in this module
touches the database or Django; callers fetch snapshots and decide what to do
with the output.

Balance model::

    net_balance = total_paid - fair_share + completed_sent - completed_received

Positive balances are creditors (owed money), negative balances are debtors.
The sum of all balances is zero within EPSILON for any valid input.

Example::

    from apps.settlements.engine import Member, ExpenseRecord, settle

    members = [Member('a', 'Alice'), Member('b', 'Bob'), Member('c', 'Carol')]
    expenses = [ExpenseRecord(payer_id='a', amount=Decimal('300'))]

    result = settle(members, expenses, [])
    # result.transfers == [b -> a 100, c -> a 100]
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Hashable, Iterable, List, Optional, Sequence


# One minor currency unit. Balances within EPSILON of zero count as settled.
EPSILON = Decimal('0.01')
ZERO = Decimal('0')


class PaymentState:
    PENDING = 'pending'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


def to_decimal(value) -> Decimal:
    """Coerce a numeric value to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Member:
    id: Hashable
    display_name: str = ''


@dataclass(frozen=True)
class ExpenseRecord:
    payer_id: Hashable
    amount: Decimal


@dataclass(frozen=True)
class PaymentRecord:
    from_id: Hashable
    to_id: Hashable
    amount: Decimal
    status: str = PaymentState.PENDING

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentState.COMPLETED


@dataclass(frozen=True)
class Balance:
    member_id: Hashable
    display_name: str
    net_balance: Decimal

    @property
    def is_creditor(self) -> bool:
        return self.net_balance > EPSILON

    @property
    def is_debtor(self) -> bool:
        return self.net_balance < -EPSILON


@dataclass(frozen=True)
class SettlementTransfer:
    from_id: Hashable
    to_id: Hashable
    amount: Decimal


@dataclass(frozen=True)
class SettlementResult:
    balances: List[Balance] = field(default_factory=list)
    transfers: List[SettlementTransfer] = field(default_factory=list)
    total_spent: Decimal = ZERO
    fair_share: Decimal = ZERO


@dataclass
class _Candidate:
    """Per-run mutable copy of a balance used by the greedy matcher."""
    member_id: Hashable
    remaining: Decimal


def _unique_members(members: Iterable[Member]) -> List[Member]:
    seen = set()
    roster = []
    for member in members:
        if member.id in seen:
            continue
        seen.add(member.id)
        roster.append(member)
    return roster


def compute_balances(
    members: Iterable[Member],
    expenses: Iterable[ExpenseRecord],
    payments: Iterable[PaymentRecord],
) -> List[Balance]:
    """
    Compute each member's net balance against the group's fair share.

    Fair share is total spending divided over the whole roster, so a member
    with no expenses still owes a full share. Expenses paid by someone outside
    the roster are ignored, as are payments touching an unknown member on
    either end. Only completed payments move balances.

    Args:
        members: Current group roster. Duplicate ids keep their first entry.
        expenses: Expense snapshots; only payer and amount are used.
        payments: Payment snapshots; pending and cancelled ones are ignored.

    Returns:
        One Balance per member in roster order, or an empty list when the
        roster is empty.
    """
    roster = _unique_members(members)
    if not roster:
        return []

    total_paid = {member.id: ZERO for member in roster}
    for expense in expenses:
        if expense.payer_id in total_paid:
            total_paid[expense.payer_id] += to_decimal(expense.amount)

    total_spent = sum(total_paid.values(), ZERO)
    fair_share = total_spent / len(roster)

    net = {member_id: paid - fair_share for member_id, paid in total_paid.items()}

    for payment in payments:
        if not payment.is_completed:
            continue
        if payment.from_id not in net or payment.to_id not in net:
            continue
        amount = to_decimal(payment.amount)
        # Money sent reduces the sender's debt; money received reduces the claim.
        net[payment.from_id] += amount
        net[payment.to_id] -= amount

    return [
        Balance(
            member_id=member.id,
            display_name=member.display_name,
            net_balance=net[member.id],
        )
        for member in roster
    ]


def compute_transfers(balances: Sequence[Balance]) -> List[SettlementTransfer]:
    """
    Greedy matching of debtors to creditors.

    The largest creditor is paired with the most negative debtor first; the
    smaller of the two amounts moves, and whichever side reaches zero (within
    EPSILON) drops out. The result is order-dependent and good enough, not a
    proven minimum number of transfers.

    The caller's balances are never modified; matching runs on private copies.
    """
    creditors = sorted(
        (_Candidate(b.member_id, b.net_balance) for b in balances if b.net_balance > EPSILON),
        key=lambda c: c.remaining,
        reverse=True,
    )
    debtors = sorted(
        (_Candidate(b.member_id, b.net_balance) for b in balances if b.net_balance < -EPSILON),
        key=lambda c: c.remaining,
    )

    transfers = []
    i = 0
    j = 0

    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]

        amount = min(creditor.remaining, -debtor.remaining)

        if amount > EPSILON:
            transfers.append(SettlementTransfer(
                from_id=debtor.member_id,
                to_id=creditor.member_id,
                amount=amount,
            ))

        creditor.remaining -= amount
        debtor.remaining += amount

        if abs(creditor.remaining) < EPSILON:
            i += 1
        if abs(debtor.remaining) < EPSILON:
            j += 1

    return transfers


def apply_transfers(
    balances: Sequence[Balance],
    transfers: Iterable[SettlementTransfer],
) -> List[Balance]:
    """Return new balances as they would be after executing ``transfers``."""
    net = {b.member_id: b.net_balance for b in balances}
    for transfer in transfers:
        if transfer.from_id in net:
            net[transfer.from_id] += transfer.amount
        if transfer.to_id in net:
            net[transfer.to_id] -= transfer.amount
    return [
        Balance(member_id=b.member_id, display_name=b.display_name, net_balance=net[b.member_id])
        for b in balances
    ]


def members_from_payers(
    expenses: Iterable[ExpenseRecord],
    names: Optional[dict] = None,
) -> List[Member]:
    """
    Build a roster from the distinct payers of ``expenses``.

    Only useful for reproducing the payers-only view where people who never
    paid for anything are left out of the fair share.
    """
    names = names or {}
    return _unique_members(
        Member(id=e.payer_id, display_name=names.get(e.payer_id, '')) for e in expenses
    )


def settle(
    members: Iterable[Member],
    expenses: Iterable[ExpenseRecord],
    payments: Iterable[PaymentRecord],
) -> SettlementResult:
    """Run compute_balances and compute_transfers over one snapshot."""
    roster = _unique_members(members)
    expenses = list(expenses)
    balances = compute_balances(roster, expenses, payments)
    if not balances:
        return SettlementResult()

    known = {member.id for member in roster}
    total_spent = sum(
        (to_decimal(e.amount) for e in expenses if e.payer_id in known),
        ZERO,
    )

    return SettlementResult(
        balances=balances,
        transfers=compute_transfers(balances),
        total_spent=total_spent,
        fair_share=total_spent / len(roster),
    )
