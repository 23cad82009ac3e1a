# aging/commands.py
"""
Command layer for AR/AP items.

Derived fields (aging_days, aging_bucket, status) are always computed by
aging/analysis.py when an item is written, and refreshed in bulk by
recalculate_aging.
"""

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from aging.analysis import aging_bucket, days_past_due, item_status
from aging.models import ArApItem
from audit.emitter import record_audit, snapshot
from audit.models import AuditLog

logger = logging.getLogger(__name__)

MONEY_Q = Decimal("0.01")

ITEM_FIELDS = (
    "item_type", "invoice_number", "customer_supplier", "original_amount", "current_amount",
    "currency", "invoice_date", "due_date", "aging_days", "aging_bucket", "status", "description",
)

NOT_FOUND = "Kayıt bulunamadı"


def _apply_aging(item: ArApItem, as_of: date) -> None:
    days = days_past_due(item.due_date, as_of)
    item.aging_days = days
    item.aging_bucket = aging_bucket(days)
    item.status = item_status(days, paid=item.status == ArApItem.Status.PAID)


@transaction.atomic
def create_item(
    actor: ActorContext,
    item_type: str,
    invoice_number: str,
    customer_supplier: str,
    original_amount: Decimal,
    invoice_date: date,
    due_date: date,
    current_amount: Decimal = None,
    currency: str = None,
    description: str = "",
) -> CommandResult:
    """
    Record a receivable or payable.

    current_amount defaults to original_amount.
    """
    require(actor, "aging.manage")

    if due_date < invoice_date:
        return CommandResult.fail("Vade tarihi fatura tarihinden önce olamaz")

    original_amount = Decimal(str(original_amount)).quantize(MONEY_Q)
    current_amount = original_amount if current_amount is None else Decimal(str(current_amount)).quantize(MONEY_Q)
    if current_amount > original_amount:
        return CommandResult.fail("Kalan tutar fatura tutarından büyük olamaz")

    item = ArApItem(
        company=actor.company,
        item_type=item_type,
        invoice_number=invoice_number,
        customer_supplier=customer_supplier,
        original_amount=original_amount,
        current_amount=current_amount,
        currency=(currency or actor.company.default_currency).upper(),
        invoice_date=invoice_date,
        due_date=due_date,
        description=description or "",
        created_by=actor.user,
    )
    _apply_aging(item, timezone.localdate())
    item.save()

    record_audit(
        actor,
        AuditLog.Action.CREATE,
        "arap_item",
        item.id,
        new_values=snapshot(item, ITEM_FIELDS),
    )
    return CommandResult.ok(item)


@transaction.atomic
def update_item(actor: ActorContext, item_id: int, **updates) -> CommandResult:
    require(actor, "aging.manage")

    item = ArApItem.objects.select_for_update().filter(pk=item_id, company=actor.company).first()
    if item is None:
        return CommandResult.fail(NOT_FOUND)

    allowed_fields = {
        "invoice_number", "customer_supplier", "current_amount",
        "invoice_date", "due_date", "description",
    }
    updates = {k: v for k, v in updates.items() if k in allowed_fields}

    before = snapshot(item, ITEM_FIELDS)
    for field, value in updates.items():
        setattr(item, field, value)

    if item.due_date < item.invoice_date:
        return CommandResult.fail("Vade tarihi fatura tarihinden önce olamaz")
    if Decimal(item.current_amount) > Decimal(item.original_amount):
        return CommandResult.fail("Kalan tutar fatura tutarından büyük olamaz")

    _apply_aging(item, timezone.localdate())
    item.save()

    record_audit(
        actor,
        AuditLog.Action.UPDATE,
        "arap_item",
        item.id,
        old_values=before,
        new_values=snapshot(item, ITEM_FIELDS),
    )
    return CommandResult.ok(item)


@transaction.atomic
def delete_item(actor: ActorContext, item_id: int) -> CommandResult:
    require(actor, "aging.manage")

    item = ArApItem.objects.select_for_update().filter(pk=item_id, company=actor.company).first()
    if item is None:
        return CommandResult.fail(NOT_FOUND)

    before = snapshot(item, ITEM_FIELDS)
    pk = item.pk
    item.delete()

    record_audit(actor, AuditLog.Action.DELETE, "arap_item", pk, old_values=before)
    return CommandResult.ok()


@transaction.atomic
def mark_paid(actor: ActorContext, item_id: int) -> CommandResult:
    """Settle an item in full: current_amount drops to zero and status becomes paid."""
    require(actor, "aging.manage")

    item = ArApItem.objects.select_for_update().filter(pk=item_id, company=actor.company).first()
    if item is None:
        return CommandResult.fail(NOT_FOUND)
    if item.status == ArApItem.Status.PAID:
        return CommandResult.fail("Kayıt zaten ödenmiş")

    before = snapshot(item, ("current_amount", "status"))
    item.current_amount = Decimal("0.00")
    item.status = ArApItem.Status.PAID
    item.paid_at = timezone.now()
    item.save(update_fields=["current_amount", "status", "paid_at", "updated_at"])

    record_audit(
        actor,
        AuditLog.Action.UPDATE,
        "arap_item",
        item.id,
        old_values=before,
        new_values=snapshot(item, ("current_amount", "status")),
        reason="paid",
    )
    return CommandResult.ok(item)


def recalculate_aging(company=None, as_of: date = None, actor: ActorContext = None) -> dict:
    """
    Refresh aging_days, aging_bucket and status on every item.

    Paid items keep their status. Per-item failures are collected.

    Returns:
        {"updated": int, "errors": [str]}
    """
    if actor is not None:
        require(actor, "aging.manage")
        company = actor.company

    as_of = as_of or timezone.localdate()
    qs = ArApItem.objects.all()
    if company is not None:
        qs = qs.filter(company=company)

    updated = 0
    errors = []

    for item in qs.iterator():
        try:
            _apply_aging(item, as_of)
            item.save(update_fields=["aging_days", "aging_bucket", "status", "updated_at"])
            updated += 1
        except (ValueError, TypeError) as exc:
            logger.warning("Aging recalculation failed for item %s: %s", item.pk, exc)
            errors.append(f"Failed to update item {item.pk}: {exc}")

    if actor is not None:
        record_audit(
            actor,
            AuditLog.Action.PROCESS,
            "arap_item",
            "",
            new_values={"updated": updated, "errors": len(errors), "as_of": as_of.isoformat()},
        )

    logger.info("Aging recalculated", extra={"updated": updated, "error_count": len(errors)})
    return {"updated": updated, "errors": errors}
