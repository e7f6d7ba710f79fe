from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class Payment(models.Model):
    """Direct money transfer between two members of a group."""

    # Allowed status changes; completed and cancelled are final.
    TRANSITIONS = {
        PaymentStatus.PENDING.value: {PaymentStatus.COMPLETED.value, PaymentStatus.CANCELLED.value},
        PaymentStatus.COMPLETED.value: set(),
        PaymentStatus.CANCELLED.value: set(),
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='payments'
    )
    from_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='payments_sent'
    )
    to_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='payments_received'
    )

    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    description = models.CharField(max_length=500, blank=True)

    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payments'
        indexes = [
            models.Index(fields=['group', 'status']),
            models.Index(fields=['from_user', 'status']),
            models.Index(fields=['to_user', 'status']),
            models.Index(fields=['created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return (
            f"{self.from_user.get_display_name()} -> {self.to_user.get_display_name()}: "
            f"{self.amount} ({self.status})"
        )

    def involves(self, user):
        return user.id in (self.from_user_id, self.to_user_id)

    def can_transition_to(self, new_status):
        return str(new_status) in self.TRANSITIONS.get(str(self.status), set())

    def set_status(self, new_status):
        """Apply a status change; caller saves and validates the transition."""
        self.status = new_status
        if new_status == PaymentStatus.COMPLETED:
            self.completed_at = timezone.now()
