# cashbox/models.py
"""
Cashbox ledger models.

Invariants (maintained by cashbox/commands.py):
- current_balance >= 0
- the newest CashboxTransaction.balance_after equals current_balance
"""

from decimal import Decimal

from django.conf import settings
from django.db import models

from accounts.models import Company
from accounting.models import default_currency


class Cashbox(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="cashboxes")

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    currency = models.CharField(max_length=3, default=default_currency)
    current_balance = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal("0.00"))

    is_active = models.BooleanField(default=True)
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "cashboxes"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_balance__gte=0),
                name="cashbox_balance_non_negative",
            ),
        ]

    def __str__(self):
        return self.name


class CashboxTransaction(models.Model):
    class TransactionType(models.TextChoices):
        DEPOSIT = "deposit", "Para Girişi"
        WITHDRAWAL = "withdrawal", "Para Çıkışı"
        TRANSFER_IN = "transfer_in", "Gelen Transfer"
        TRANSFER_OUT = "transfer_out", "Giden Transfer"

    OUTFLOW_TYPES = {TransactionType.WITHDRAWAL, TransactionType.TRANSFER_OUT}

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="cashbox_transactions")
    cashbox = models.ForeignKey(Cashbox, on_delete=models.CASCADE, related_name="transactions")

    transaction_type = models.CharField(max_length=20, choices=TransactionType.choices)
    amount = models.DecimalField(max_digits=15, decimal_places=2)
    description = models.CharField(max_length=500, blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")
    reference = models.CharField(max_length=100, blank=True, default="")
    balance_after = models.DecimalField(max_digits=15, decimal_places=2)

    transfer_to_cashbox = models.ForeignKey(
        Cashbox,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    transfer_from_cashbox = models.ForeignKey(
        Cashbox,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["cashbox", "created_at"], name="cashbox_txn_created_idx"),
        ]

    def __str__(self):
        return f"{self.cashbox} {self.transaction_type} {self.amount}"
