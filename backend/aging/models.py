# aging/models.py
from decimal import Decimal

from django.conf import settings
from django.db import models

from accounts.models import Company
from accounting.models import default_currency


class ArApItem(models.Model):
    """
    One open receivable or payable invoice.

    aging_days, aging_bucket and status are derived from due_date and are
    refreshed by aging.commands.recalculate_aging.
    """

    class ItemType(models.TextChoices):
        RECEIVABLE = "receivable", "Alacak"
        PAYABLE = "payable", "Borç"

    class Status(models.TextChoices):
        OUTSTANDING = "outstanding", "Açık"
        OVERDUE = "overdue", "Vadesi Geçmiş"
        PAID = "paid", "Ödendi"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="arap_items")

    item_type = models.CharField(max_length=20, choices=ItemType.choices)
    invoice_number = models.CharField(max_length=100)
    customer_supplier = models.CharField(max_length=255)
    original_amount = models.DecimalField(max_digits=15, decimal_places=2)
    current_amount = models.DecimalField(max_digits=15, decimal_places=2)
    currency = models.CharField(max_length=3, default=default_currency)
    invoice_date = models.DateField()
    due_date = models.DateField()

    aging_days = models.IntegerField(default=0)
    aging_bucket = models.CharField(max_length=10, default="0-30")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.OUTSTANDING)

    description = models.TextField(blank=True, default="")
    paid_at = models.DateTimeField(null=True, blank=True)

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
        ordering = ["due_date", "id"]
        indexes = [
            models.Index(fields=["company", "item_type", "status"], name="arap_type_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_amount__gte=Decimal("0")),
                name="arap_current_amount_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.invoice_number} ({self.customer_supplier})"
