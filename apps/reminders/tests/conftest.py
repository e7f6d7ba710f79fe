import pytest
import datetime
from decimal import Decimal
from django.utils import timezone
from apps.reminders.models import RecurringReminder, ReminderFrequency


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def rent_reminder(group_with_members, group_owner, today):
    """Monthly reminder due in three days."""
    return RecurringReminder.objects.create(
        group=group_with_members,
        title='Rent',
        amount=Decimal('1200.00'),
        frequency=ReminderFrequency.MONTHLY,
        next_due_date=today + datetime.timedelta(days=3),
        created_by=group_owner,
    )


@pytest.fixture
def insurance_reminder(group_with_members, group_owner, today):
    """Yearly reminder due in two months."""
    return RecurringReminder.objects.create(
        group=group_with_members,
        title='Home insurance',
        amount=Decimal('240.00'),
        frequency=ReminderFrequency.YEARLY,
        next_due_date=today + datetime.timedelta(days=60),
        created_by=group_owner,
    )


@pytest.fixture
def overdue_reminder(group_with_members, group_owner, today):
    """Weekly reminder that was due yesterday."""
    return RecurringReminder.objects.create(
        group=group_with_members,
        title='Cleaning',
        amount=Decimal('0.00'),
        frequency=ReminderFrequency.WEEKLY,
        next_due_date=today - datetime.timedelta(days=1),
        created_by=group_owner,
    )


@pytest.fixture
def paused_reminder(group_with_members, group_owner, today):
    return RecurringReminder.objects.create(
        group=group_with_members,
        title='Internet',
        amount=Decimal('30.00'),
        frequency=ReminderFrequency.MONTHLY,
        next_due_date=today + datetime.timedelta(days=1),
        is_active=False,
        created_by=group_owner,
    )
