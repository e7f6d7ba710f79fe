from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class ReminderFrequency(models.TextChoices):
    WEEKLY = 'weekly', 'Weekly'
    MONTHLY = 'monthly', 'Monthly'
    EVERY_6_MONTHS = 'every_6_months', 'Every 6 months'
    YEARLY = 'yearly', 'Yearly'


class RecurringReminder(models.Model):
    """A bill the group pays on a fixed schedule."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='reminders'
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    frequency = models.CharField(max_length=20, choices=ReminderFrequency.choices)
    next_due_date = models.DateField()
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_reminders'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'recurring_reminders'
        indexes = [
            models.Index(fields=['group', 'is_active']),
            models.Index(fields=['next_due_date']),
        ]
        ordering = ['next_due_date', 'created_at']

    def __str__(self):
        return f"{self.title} ({self.frequency}, due {self.next_due_date})"
