from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class CashSession(models.Model):
    """
    One operator's shift at the register, from opening float to cash count.

    ``calculated_balance`` is what should be in the drawer (initial balance
    plus cash sales); ``final_balance`` is what the operator counted. A
    mismatch is recorded, never blocked, and later accepted by a manager
    through verification.
    """

    class Status(models.TextChoices):
        OPEN = "open", _("Open")
        CLOSED = "closed", _("Closed")

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='cash_sessions'
    )
    operator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='cash_sessions'
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.OPEN,
        db_index=True
    )

    opened_at = models.DateTimeField(default=timezone.now)
    closed_at = models.DateTimeField(null=True, blank=True)

    initial_balance = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    calculated_balance = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Expected cash in drawer at close: initial balance + cash sales")
    )
    final_balance = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Cash counted by the operator at close")
    )
    notes = models.TextField(blank=True)

    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='closed_cash_sessions'
    )
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='verified_cash_sessions'
    )
    verified_at = models.DateTimeField(null=True, blank=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Cash Session")
        verbose_name_plural = _("Cash Sessions")
        ordering = ['-opened_at', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['operator'],
                condition=Q(status='open'),
                name='one_open_cash_session_per_operator',
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'status']),
            models.Index(fields=['tenant', 'opened_at']),
        ]

    def __str__(self):
        return f"Session {self.pk} ({self.operator_id}, {self.status})"

    @property
    def is_open(self):
        return self.status == self.Status.OPEN

    @property
    def discrepancy(self):
        """Counted minus expected; None until the session is closed."""
        if self.final_balance is None or self.calculated_balance is None:
            return None
        return self.final_balance - self.calculated_balance

    @property
    def is_verified(self):
        return self.verified_at is not None

    @property
    def needs_verification(self):
        return not self.is_open and not self.is_verified and bool(self.discrepancy)
