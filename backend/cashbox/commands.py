# cashbox/commands.py
"""
Command layer for cashbox operations.

Every mutation runs in one database transaction that:
1. Checks the permission (require)
2. Locks the cashbox row(s) with select_for_update
3. Applies the balance rule (never below zero)
4. Writes the ledger row(s) with balance_after
5. Records exactly one audit entry

Transfers lock both cashboxes in primary-key order.
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from accounting.policies import INSUFFICIENT_BALANCE, has_sufficient_balance
from audit.emitter import record_audit, snapshot
from audit.models import AuditLog
from cashbox.models import Cashbox, CashboxTransaction

logger = logging.getLogger(__name__)

MONEY_Q = Decimal("0.01")

CASHBOX_FIELDS = ("name", "description", "location", "currency", "current_balance", "is_active", "is_deleted")
TRANSACTION_FIELDS = (
    "cashbox", "transaction_type", "amount", "description", "category", "reference",
    "balance_after", "transfer_to_cashbox", "transfer_from_cashbox",
)

NOT_FOUND = "Kasa bulunamadı"
NOT_FOUND_OR_FORBIDDEN = "Kasa bulunamadı veya erişim yetkiniz yok"
CURRENCY_MISMATCH = "Para birimleri farklı kasalar arasında transfer edilemez"
INACTIVE = "Pasif kasaya işlem yapılamaz"


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(MONEY_Q)


def _locked_cashbox(actor: ActorContext, cashbox_id: int, include_deleted: bool = False):
    qs = Cashbox.objects.select_for_update().filter(pk=cashbox_id, company=actor.company)
    if not include_deleted:
        qs = qs.filter(is_deleted=False)
    return qs.first()


# =============================================================================
# Cashbox Commands
# =============================================================================

@transaction.atomic
def create_cashbox(
    actor: ActorContext,
    name: str,
    description: str = "",
    location: str = "",
    currency: str = None,
    is_active: bool = True,
) -> CommandResult:
    """
    Create a cashbox with a zero balance.

    Returns:
        CommandResult with the Cashbox
    """
    require(actor, "cashbox.manage")

    cashbox = Cashbox.objects.create(
        company=actor.company,
        name=name.strip(),
        description=description or "",
        location=location or "",
        currency=(currency or actor.company.default_currency).upper(),
        is_active=is_active,
        created_by=actor.user,
    )

    record_audit(
        actor,
        AuditLog.Action.CREATE,
        "cashbox",
        cashbox.id,
        new_values=snapshot(cashbox, CASHBOX_FIELDS),
        cashbox=cashbox,
    )
    return CommandResult.ok(cashbox, message="Kasa başarıyla oluşturuldu")


@transaction.atomic
def update_cashbox(actor: ActorContext, cashbox_id: int, reason: str = "", **updates) -> CommandResult:
    """
    Update descriptive fields of a cashbox.

    The balance is not editable here. The currency can only change while
    the cashbox has no transactions.
    """
    require(actor, "cashbox.manage")

    cashbox = _locked_cashbox(actor, cashbox_id)
    if cashbox is None:
        return CommandResult.fail(NOT_FOUND)

    allowed_fields = {"name", "description", "location", "currency", "is_active"}
    updates = {k: v for k, v in updates.items() if k in allowed_fields}

    if "currency" in updates:
        updates["currency"] = updates["currency"].upper()
        if updates["currency"] != cashbox.currency and cashbox.transactions.exists():
            return CommandResult.fail("İşlem görmüş kasanın para birimi değiştirilemez")

    before = snapshot(cashbox, CASHBOX_FIELDS)
    for field, value in updates.items():
        setattr(cashbox, field, value)
    cashbox.save()

    record_audit(
        actor,
        AuditLog.Action.UPDATE,
        "cashbox",
        cashbox.id,
        old_values=before,
        new_values=snapshot(cashbox, updates.keys()) if updates else {},
        reason=reason,
        cashbox=cashbox,
    )
    return CommandResult.ok(cashbox, message="Kasa başarıyla güncellendi")


@transaction.atomic
def delete_cashbox(actor: ActorContext, cashbox_id: int, reason: str = "") -> CommandResult:
    """Soft-delete a cashbox. Its ledger stays intact and it can be restored."""
    require(actor, "cashbox.manage")

    cashbox = _locked_cashbox(actor, cashbox_id)
    if cashbox is None:
        return CommandResult.fail(NOT_FOUND)

    before = snapshot(cashbox, CASHBOX_FIELDS)
    cashbox.is_deleted = True
    cashbox.deleted_at = timezone.now()
    cashbox.save(update_fields=["is_deleted", "deleted_at", "updated_at"])

    record_audit(
        actor,
        AuditLog.Action.DELETE,
        "cashbox",
        cashbox.id,
        old_values=before,
        new_values={"is_deleted": True},
        reason=reason,
        cashbox=cashbox,
    )
    return CommandResult.ok(cashbox, message="Kasa başarıyla silindi")


@transaction.atomic
def restore_cashbox(actor: ActorContext, cashbox_id: int, reason: str = "") -> CommandResult:
    require(actor, "cashbox.manage")

    cashbox = Cashbox.objects.select_for_update().filter(
        pk=cashbox_id, company=actor.company, is_deleted=True,
    ).first()
    if cashbox is None:
        return CommandResult.fail(NOT_FOUND)

    cashbox.is_deleted = False
    cashbox.deleted_at = None
    cashbox.save(update_fields=["is_deleted", "deleted_at", "updated_at"])

    record_audit(
        actor,
        AuditLog.Action.RESTORE,
        "cashbox",
        cashbox.id,
        old_values={"is_deleted": True},
        new_values={"is_deleted": False},
        reason=reason,
        cashbox=cashbox,
    )
    return CommandResult.ok(cashbox, message="Kasa başarıyla geri yüklendi")


# =============================================================================
# Ledger Commands
# =============================================================================

@transaction.atomic
def create_cashbox_transaction(
    actor: ActorContext,
    cashbox_id: int,
    transaction_type: str,
    amount: Decimal,
    description: str = "",
    category: str = "",
    reference: str = "",
) -> CommandResult:
    """
    Record a deposit or withdrawal.

    A withdrawal larger than the current balance fails with
    "Yetersiz bakiye" and changes nothing.

    Returns:
        CommandResult with the CashboxTransaction
    """
    require(actor, "cashbox.manage")

    if transaction_type not in (
        CashboxTransaction.TransactionType.DEPOSIT,
        CashboxTransaction.TransactionType.WITHDRAWAL,
    ):
        return CommandResult.fail("Transfer işlemleri için transfer uç noktasını kullanın")

    amount = _money(amount)
    if amount <= 0:
        return CommandResult.fail("Tutar sıfırdan büyük olmalıdır")

    cashbox = _locked_cashbox(actor, cashbox_id)
    if cashbox is None:
        return CommandResult.fail(NOT_FOUND)
    if not cashbox.is_active:
        return CommandResult.fail(INACTIVE)

    if transaction_type == CashboxTransaction.TransactionType.WITHDRAWAL:
        if not has_sufficient_balance(cashbox.current_balance, amount):
            return CommandResult.fail(INSUFFICIENT_BALANCE)
        new_balance = cashbox.current_balance - amount
    else:
        new_balance = cashbox.current_balance + amount

    txn = CashboxTransaction.objects.create(
        company=actor.company,
        cashbox=cashbox,
        transaction_type=transaction_type,
        amount=amount,
        description=description or "",
        category=category or "",
        reference=reference or "",
        balance_after=new_balance,
        created_by=actor.user,
    )
    old_balance = cashbox.current_balance
    cashbox.current_balance = new_balance
    cashbox.save(update_fields=["current_balance", "updated_at"])

    record_audit(
        actor,
        transaction_type,
        "cashbox_transaction",
        txn.id,
        old_values={"current_balance": old_balance},
        new_values={"current_balance": new_balance, **snapshot(txn, TRANSACTION_FIELDS)},
        cashbox=cashbox,
        cashbox_transaction=txn,
    )
    return CommandResult.ok(txn, message="İşlem başarıyla oluşturuldu")


@transaction.atomic
def transfer_between_cashboxes(
    actor: ActorContext,
    from_cashbox_id: int,
    to_cashbox_id: int,
    amount: Decimal,
    description: str = "",
    reference: str = "",
) -> CommandResult:
    """
    Move cash from one cashbox to another.

    Both ledger rows and both balances are written in one transaction,
    followed by a single ``transfer`` audit entry.

    Returns:
        CommandResult with {"out_transaction", "in_transaction",
        "from_cashbox", "to_cashbox"}
    """
    require(actor, "cashbox.transfer")

    amount = _money(amount)
    if amount <= 0:
        return CommandResult.fail("Tutar sıfırdan büyük olmalıdır")

    if from_cashbox_id == to_cashbox_id:
        return CommandResult.fail("Aynı kasaya transfer yapılamaz")

    locked = {
        c.pk: c
        for c in Cashbox.objects.select_for_update().filter(
            company=actor.company,
            is_deleted=False,
            pk__in=[from_cashbox_id, to_cashbox_id],
        ).order_by("pk")
    }
    source = locked.get(from_cashbox_id)
    target = locked.get(to_cashbox_id)
    if source is None or target is None:
        return CommandResult.fail(NOT_FOUND_OR_FORBIDDEN)

    if not (source.is_active and target.is_active):
        return CommandResult.fail(INACTIVE)

    if source.currency != target.currency:
        return CommandResult.fail(CURRENCY_MISMATCH)

    if not has_sufficient_balance(source.current_balance, amount):
        return CommandResult.fail(INSUFFICIENT_BALANCE)

    source_before = source.current_balance
    target_before = target.current_balance
    source.current_balance = source.current_balance - amount
    target.current_balance = target.current_balance + amount

    out_txn = CashboxTransaction.objects.create(
        company=actor.company,
        cashbox=source,
        transaction_type=CashboxTransaction.TransactionType.TRANSFER_OUT,
        amount=amount,
        description=description or f"Transfer to {target.name}",
        category="transfer",
        reference=reference or "",
        balance_after=source.current_balance,
        transfer_to_cashbox=target,
        created_by=actor.user,
    )
    in_txn = CashboxTransaction.objects.create(
        company=actor.company,
        cashbox=target,
        transaction_type=CashboxTransaction.TransactionType.TRANSFER_IN,
        amount=amount,
        description=description or f"Transfer from {source.name}",
        category="transfer",
        reference=reference or "",
        balance_after=target.current_balance,
        transfer_from_cashbox=source,
        created_by=actor.user,
    )

    source.save(update_fields=["current_balance", "updated_at"])
    target.save(update_fields=["current_balance", "updated_at"])

    record_audit(
        actor,
        AuditLog.Action.TRANSFER,
        "cashbox_transfer",
        out_txn.id,
        old_values={
            "from_balance": source_before,
            "to_balance": target_before,
        },
        new_values={
            "from_cashbox": source.id,
            "to_cashbox": target.id,
            "amount": amount,
            "from_balance": source.current_balance,
            "to_balance": target.current_balance,
            "in_transaction": in_txn.id,
        },
        cashbox=source,
        cashbox_transaction=out_txn,
    )
    logger.info(
        "Cashbox transfer completed",
        extra={
            "company_id": actor.company.id,
            "from_cashbox": source.id,
            "to_cashbox": target.id,
            "amount": str(amount),
        },
    )

    return CommandResult.ok({
        "out_transaction": out_txn,
        "in_transaction": in_txn,
        "from_cashbox": source,
        "to_cashbox": target,
    }, message="Transfer başarıyla tamamlandı")
