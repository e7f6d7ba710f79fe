"""
Change notifications for group finance data.

Services send these after a write has committed, so receivers always
see the new state. Every signal carries ``group_id``, ``action``
('created', 'updated' or 'deleted') and ``instance_id``. A realtime
transport subscribes to them to push updates to connected clients.

Example::

    from django.dispatch import receiver
    from apps.settlements.signals import expenses_changed

    @receiver(expenses_changed)
    def push_expense_update(sender, group_id, action, instance_id, **kwargs):
        ...
"""

import logging

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

CREATED = 'created'
UPDATED = 'updated'
DELETED = 'deleted'

expenses_changed = Signal()
payments_changed = Signal()
reminders_changed = Signal()


def notify_on_commit(signal, sender, *, group_id, action, instance_id):
    """Send ``signal`` once the current transaction commits."""

    def send():
        logger.debug("%s %s in group %s", sender.__name__, action, group_id)
        signal.send(
            sender=sender,
            group_id=group_id,
            action=action,
            instance_id=instance_id,
        )

    transaction.on_commit(send)
