"""
Due-date arithmetic for recurring reminders.

All functions work on ``datetime.date`` values. Adding months clamps to
the last day of the target month, so a bill due on Jan 31 falls on
Feb 28 (or 29) the following month, and a yearly bill due on Feb 29
moves to Feb 28 in non-leap years.
"""

import calendar
import datetime
from typing import Optional

from django.utils import timezone

from .models import ReminderFrequency


def add_months(date: datetime.date, months: int) -> datetime.date:
    month_index = date.year * 12 + (date.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(date.day, calendar.monthrange(year, month)[1])
    return datetime.date(year, month, day)


def calculate_next_due_date(due_date: datetime.date, frequency: str) -> datetime.date:
    """Return the due date one period after ``due_date``."""
    if frequency == ReminderFrequency.WEEKLY:
        return due_date + datetime.timedelta(days=7)
    if frequency == ReminderFrequency.MONTHLY:
        return add_months(due_date, 1)
    if frequency == ReminderFrequency.EVERY_6_MONTHS:
        return add_months(due_date, 6)
    if frequency == ReminderFrequency.YEARLY:
        return add_months(due_date, 12)
    raise ValueError(f"Invalid frequency: {frequency}")


def days_until_due(due_date: datetime.date, today: Optional[datetime.date] = None) -> int:
    """Whole days from ``today`` to ``due_date``; negative when overdue."""
    today = today or timezone.localdate()
    return (due_date - today).days


def is_overdue(due_date, today=None):
    return days_until_due(due_date, today) < 0


def is_due_today(due_date, today=None):
    return days_until_due(due_date, today) == 0


def is_due_within_days(due_date, days, today=None):
    """True when due today or within the next ``days`` days. Overdue dates are excluded."""
    remaining = days_until_due(due_date, today)
    return 0 <= remaining <= days
