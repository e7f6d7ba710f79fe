"""
Recurring reminder services.

Any member can see a group's reminders; only owners and admins can
create, edit, toggle, advance or delete them.
"""

import datetime
import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.services import require_membership
from apps.settlements.signals import (
    CREATED,
    DELETED,
    UPDATED,
    notify_on_commit,
    reminders_changed,
)

from .dates import calculate_next_due_date, days_until_due
from .exceptions import InvalidReminderError, ReminderNotFoundError
from .models import RecurringReminder, ReminderFrequency

logger = logging.getLogger(__name__)


def _check_title(title: str) -> str:
    title = (title or '').strip()
    if not title:
        raise InvalidReminderError("Title cannot be empty")
    return title


def _check_amount(amount: Decimal) -> None:
    if amount is None or amount < 0:
        raise InvalidReminderError("Amount must be greater than or equal to 0")


def _check_frequency(frequency: str) -> None:
    if frequency not in ReminderFrequency.values:
        raise InvalidReminderError(f"Invalid frequency '{frequency}'")


def _get_for_change(reminder_id: UUID, user: User) -> RecurringReminder:
    """Lock a reminder after checking the user administers its group."""
    try:
        reminder = RecurringReminder.objects.select_for_update().get(id=reminder_id)
    except RecurringReminder.DoesNotExist:
        raise ReminderNotFoundError(f"Reminder with ID {reminder_id} not found")

    require_membership(group_id=reminder.group_id, user=user, admin=True)
    return reminder


def _notify(reminder_id, group_id, action):
    notify_on_commit(
        reminders_changed, RecurringReminder,
        group_id=group_id, action=action, instance_id=reminder_id
    )


@transaction.atomic
def create_reminder(
    *,
    group_id: UUID,
    user: User,
    title: str,
    amount: Decimal,
    frequency: str,
    next_due_date: datetime.date,
    description: str = '',
    today: Optional[datetime.date] = None
) -> RecurringReminder:
    """
    Create an active reminder (group admin only).

    Args:
        group_id: UUID of the group
        user: Admin creating the reminder
        title: Non-empty title
        amount: Expected bill amount, zero or more
        frequency: One of ReminderFrequency values
        next_due_date: First due date, must be after today
        description: Optional notes
        today: Reference day, defaults to the current local date

    Returns:
        Created RecurringReminder instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        InsufficientPermissionsError: If user is not an admin
        InvalidReminderError: If any field is invalid
    """
    group = require_membership(group_id=group_id, user=user, admin=True)

    title = _check_title(title)
    _check_amount(amount)
    _check_frequency(frequency)

    today = today or timezone.localdate()
    if next_due_date <= today:
        raise InvalidReminderError("Next due date must be in the future")

    reminder = RecurringReminder.objects.create(
        group=group,
        title=title,
        description=description or '',
        amount=amount,
        frequency=frequency,
        next_due_date=next_due_date,
        is_active=True,
        created_by=user,
    )

    logger.info("Reminder %s created in group %s", reminder.id, group.id)
    _notify(reminder.id, group.id, CREATED)
    return reminder


@transaction.atomic
def update_reminder(
    *,
    reminder_id: UUID,
    user: User,
    title: Optional[str] = None,
    description: Optional[str] = None,
    amount: Optional[Decimal] = None,
    frequency: Optional[str] = None,
    next_due_date: Optional[datetime.date] = None
) -> RecurringReminder:
    """
    Edit a reminder (group admin only). Only given fields change.

    Unlike creation, ``next_due_date`` may be set to a past date to
    record a bill that is already overdue.

    Raises:
        ReminderNotFoundError: If reminder doesn't exist
        NotMemberError: If user is not a member
        InsufficientPermissionsError: If user is not an admin
        InvalidReminderError: If any given field is invalid
    """
    reminder = _get_for_change(reminder_id, user)

    update_fields = ['updated_at']

    if title is not None:
        reminder.title = _check_title(title)
        update_fields.append('title')

    if description is not None:
        reminder.description = description
        update_fields.append('description')

    if amount is not None:
        _check_amount(amount)
        reminder.amount = amount
        update_fields.append('amount')

    if frequency is not None:
        _check_frequency(frequency)
        reminder.frequency = frequency
        update_fields.append('frequency')

    if next_due_date is not None:
        reminder.next_due_date = next_due_date
        update_fields.append('next_due_date')

    reminder.save(update_fields=update_fields)

    _notify(reminder.id, reminder.group_id, UPDATED)
    return reminder


@transaction.atomic
def toggle_reminder(*, reminder_id: UUID, user: User) -> RecurringReminder:
    """Flip ``is_active`` (group admin only)."""
    reminder = _get_for_change(reminder_id, user)

    reminder.is_active = not reminder.is_active
    reminder.save(update_fields=['is_active', 'updated_at'])

    logger.info("Reminder %s active=%s", reminder.id, reminder.is_active)
    _notify(reminder.id, reminder.group_id, UPDATED)
    return reminder


@transaction.atomic
def advance_reminder(*, reminder_id: UUID, user: User) -> RecurringReminder:
    """
    Move ``next_due_date`` forward by one period (group admin only).

    Called once the bill for the current period has been paid.
    """
    reminder = _get_for_change(reminder_id, user)

    previous = reminder.next_due_date
    reminder.next_due_date = calculate_next_due_date(previous, reminder.frequency)
    reminder.save(update_fields=['next_due_date', 'updated_at'])

    logger.info("Reminder %s advanced from %s to %s", reminder.id, previous, reminder.next_due_date)
    _notify(reminder.id, reminder.group_id, UPDATED)
    return reminder


@transaction.atomic
def delete_reminder(*, reminder_id: UUID, user: User) -> None:
    """Delete a reminder (group admin only)."""
    reminder = _get_for_change(reminder_id, user)
    group_id = reminder.group_id

    reminder.delete()

    logger.info("Reminder %s deleted by %s", reminder_id, user.id)
    _notify(reminder_id, group_id, DELETED)


def list_reminders(
    *,
    user: User,
    group_id: Optional[UUID] = None,
    is_active: Optional[bool] = None
) -> QuerySet[RecurringReminder]:
    """Reminders of one group, or of all the caller's groups, soonest first."""
    queryset = RecurringReminder.objects.select_related('group', 'created_by')

    if group_id:
        require_membership(group_id=group_id, user=user)
        queryset = queryset.filter(group_id=group_id)
    else:
        queryset = queryset.filter(group__memberships__user=user).distinct()

    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)

    return queryset.order_by('next_due_date', 'created_at')


def get_due_reminders(
    *,
    user: User,
    days: Optional[int] = None,
    group_id: Optional[UUID] = None,
    today: Optional[datetime.date] = None
) -> List[RecurringReminder]:
    """
    Active reminders that are overdue or due within ``days`` days.

    ``days`` defaults to the REMINDER_DUE_SOON_DAYS setting.
    """
    if days is None:
        days = getattr(settings, 'REMINDER_DUE_SOON_DAYS', 7)
    today = today or timezone.localdate()

    horizon = today + datetime.timedelta(days=days)
    reminders = list_reminders(user=user, group_id=group_id, is_active=True)
    return [
        reminder for reminder in reminders.filter(next_due_date__lte=horizon)
        if days_until_due(reminder.next_due_date, today) <= days
    ]
