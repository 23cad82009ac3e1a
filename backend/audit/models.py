# audit/models.py
"""
Audit log model.

Rows are immutable once written. ``changes`` holds a field-level diff in
the form ``{field: {"from": old, "to": new}}``.
"""

from django.conf import settings
from django.db import models

from accounts.models import Company


class AuditLog(models.Model):
    class Action(models.TextChoices):
        CREATE = "create", "Create"
        UPDATE = "update", "Update"
        DELETE = "delete", "Delete"
        RESTORE = "restore", "Restore"
        DEPOSIT = "deposit", "Deposit"
        WITHDRAWAL = "withdrawal", "Withdrawal"
        TRANSFER_IN = "transfer_in", "Transfer in"
        TRANSFER_OUT = "transfer_out", "Transfer out"
        TRANSFER = "transfer", "Transfer"
        PROCESS = "process", "Process"
        LOGIN = "login", "Login"
        SWITCH_COMPANY = "switch_company", "Switch company"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="audit_logs")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )
    action = models.CharField(max_length=20, choices=Action.choices, db_index=True)
    entity_type = models.CharField(max_length=50, db_index=True)
    entity_id = models.CharField(max_length=64, blank=True, default="")

    cashbox = models.ForeignKey(
        "cashbox.Cashbox",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )
    cashbox_transaction = models.ForeignKey(
        "cashbox.CashboxTransaction",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )

    old_values = models.JSONField(null=True, blank=True)
    new_values = models.JSONField(null=True, blank=True)
    changes = models.JSONField(null=True, blank=True)
    reason = models.TextField(blank=True, default="")

    ip_address = models.CharField(max_length=64, blank=True, default="")
    user_agent = models.CharField(max_length=500, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["company", "entity_type", "entity_id"], name="audit_entity_idx"),
            models.Index(fields=["company", "created_at"], name="audit_company_created_idx"),
        ]

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id}"
