# accounting/commands.py
"""
Command layer for bookkeeping operations.

Commands are the single point where business operations happen.
Views call commands; commands enforce rules and write the audit trail.

Pattern:
1. Validate permissions (require)
2. Apply business policies (can_*)
3. Perform the operation (row-locked model changes)
4. Record audit entry
5. Return CommandResult

Balance mutations lock the account row with select_for_update inside the
command's transaction, so the Transaction row and the balance change
commit together.
"""

import logging
import uuid
from datetime import date as date_cls
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from accounting.models import Account, Credit, Investment, RecurringTransaction, Transaction
from accounting.policies import (
    can_buy_investment,
    can_change_currency,
    can_delete_transaction,
    can_pay_credit,
    can_post_to_account,
    can_transfer,
)
from accounting.recurring import InvalidIntervalError, calculate_next_due_date
from audit.emitter import record_audit, record_audit_no_actor, snapshot
from audit.models import AuditLog

logger = logging.getLogger(__name__)

MONEY_Q = Decimal("0.01")

ACCOUNT_FIELDS = ("bank_name", "name", "account_type", "balance", "currency", "is_deleted")
RECURRING_FIELDS = (
    "account", "amount", "description", "category", "interval", "interval_count",
    "start_date", "end_date", "next_due_date", "is_active",
)

INVESTMENT_FIELDS = (
    "account", "title", "investment_type", "symbol", "quantity", "purchase_price",
    "current_price", "currency", "category", "risk_level", "purchase_date",
)
CREDIT_FIELDS = (
    "account", "title", "credit_type", "institution", "amount", "remaining_amount", "currency",
    "interest_rate", "minimum_payment", "start_date", "due_date", "status", "is_active",
)

DEFAULT_TRANSFER_DESCRIPTION = "Hesaplar arası transfer"


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(MONEY_Q)


def _locked_account(actor: ActorContext, account_id: int):
    return Account.objects.select_for_update().filter(
        pk=account_id, company=actor.company, is_deleted=False,
    ).first()


# =============================================================================
# Account Commands
# =============================================================================

@transaction.atomic
def create_account(
    actor: ActorContext,
    name: str,
    account_type: str,
    bank_name: str = "",
    balance: Decimal = Decimal("0.00"),
    currency: str = None,
) -> CommandResult:
    """
    Create a new bank account.

    Args:
        actor: The actor context
        name: Account name
        account_type: checking, savings, credit_card, loan or investment
        bank_name: Bank the account is held at
        balance: Opening balance
        currency: ISO currency code (defaults to the company currency)

    Returns:
        CommandResult with the created Account or error
    """
    require(actor, "accounts.manage")

    if account_type not in Account.AccountType.values:
        return CommandResult.fail("Geçersiz hesap tipi")

    account = Account.objects.create(
        company=actor.company,
        name=name.strip(),
        bank_name=(bank_name or "").strip(),
        account_type=account_type,
        balance=_money(balance or 0),
        currency=(currency or actor.company.default_currency).upper(),
        created_by=actor.user,
    )

    record_audit(
        actor,
        AuditLog.Action.CREATE,
        "account",
        account.id,
        new_values=snapshot(account, ACCOUNT_FIELDS),
    )
    return CommandResult.ok(account, message="Hesap başarıyla oluşturuldu")


@transaction.atomic
def update_account(actor: ActorContext, account_id: int, **updates) -> CommandResult:
    """
    Update name, bank, type or currency of an account.

    The balance is never edited directly; it only moves through
    transactions.
    """
    require(actor, "accounts.manage")

    account = _locked_account(actor, account_id)
    if account is None:
        return CommandResult.fail("Hesap bulunamadı")

    allowed_fields = {"name", "bank_name", "account_type", "currency"}
    updates = {k: v for k, v in updates.items() if k in allowed_fields}

    if "currency" in updates:
        updates["currency"] = updates["currency"].upper()
        allowed, reason = can_change_currency(actor, account, updates["currency"])
        if not allowed:
            return CommandResult.fail(reason)

    if "account_type" in updates and updates["account_type"] not in Account.AccountType.values:
        return CommandResult.fail("Geçersiz hesap tipi")

    before = snapshot(account, ACCOUNT_FIELDS)
    for field, value in updates.items():
        setattr(account, field, value)
    if not updates:
        return CommandResult.ok(account)
    account.save(update_fields=list(updates.keys()) + ["updated_at"])

    record_audit(
        actor,
        AuditLog.Action.UPDATE,
        "account",
        account.id,
        old_values=before,
        new_values=snapshot(account, updates.keys()),
    )
    return CommandResult.ok(account, message="Hesap güncellendi")


@transaction.atomic
def delete_account(actor: ActorContext, account_id: int) -> CommandResult:
    """
    Soft-delete an account.

    Active recurring schedules on the account are deactivated so they
    stop spawning transactions.
    """
    require(actor, "accounts.manage")

    account = _locked_account(actor, account_id)
    if account is None:
        return CommandResult.fail("Hesap bulunamadı")

    before = snapshot(account, ACCOUNT_FIELDS)
    account.is_deleted = True
    account.deleted_at = timezone.now()
    account.save(update_fields=["is_deleted", "deleted_at", "updated_at"])

    stopped = account.recurring_transactions.filter(is_active=True).update(is_active=False)

    record_audit(
        actor,
        AuditLog.Action.DELETE,
        "account",
        account.id,
        old_values=before,
        new_values={"is_deleted": True},
    )
    return CommandResult.ok({"deleted": True, "recurring_deactivated": stopped}, message="Hesap silindi")


# =============================================================================
# Transaction Commands
# =============================================================================

@transaction.atomic
def create_transaction(
    actor: ActorContext,
    account_id: int,
    transaction_type: str,
    amount: Decimal,
    description: str = "",
    category: str = "",
    date: date_cls = None,
) -> CommandResult:
    """
    Record an income or expense and move the account balance.

    Transfers have their own command; this one rejects transfer types.

    Returns:
        CommandResult with {"transaction", "balance"}
    """
    require(actor, "transactions.manage")

    if transaction_type not in (Transaction.TransactionType.INCOME, Transaction.TransactionType.EXPENSE):
        return CommandResult.fail("Bu endpoint sadece gelir ve gider işlemlerini destekler")

    amount = _money(amount)
    if amount <= 0:
        return CommandResult.fail("Tutar sıfırdan büyük olmalıdır")

    account = _locked_account(actor, account_id)
    if account is None:
        return CommandResult.fail("Hesap bulunamadı")

    allowed, reason = can_post_to_account(actor, account)
    if not allowed:
        return CommandResult.fail(reason)

    txn = Transaction.objects.create(
        company=actor.company,
        account=account,
        transaction_type=transaction_type,
        amount=amount,
        description=description or "",
        category=category or "",
        date=date or timezone.localdate(),
        created_by=actor.user,
    )
    account.balance = account.balance + txn.signed_amount
    account.save(update_fields=["balance", "updated_at"])

    record_audit(
        actor,
        AuditLog.Action.CREATE,
        "transaction",
        txn.id,
        new_values=snapshot(txn, ("account", "transaction_type", "amount", "description", "category", "date")),
    )
    return CommandResult.ok({"transaction": txn, "balance": account.balance}, message="İşlem kaydedildi")


@transaction.atomic
def delete_transaction(actor: ActorContext, transaction_id: int) -> CommandResult:
    """
    Delete an income/expense row and reverse its balance effect.

    The account is locked before the transaction row, the same order the
    posting commands use. The row is read again under the lock, so a
    concurrent delete of the same row reverses the balance only once.
    """
    require(actor, "transactions.manage")

    account_id = (
        Transaction.objects.filter(pk=transaction_id, company=actor.company)
        .values_list("account_id", flat=True)
        .first()
    )
    if account_id is None:
        return CommandResult.fail("İşlem bulunamadı")

    account = Account.objects.select_for_update().get(pk=account_id)
    txn = Transaction.objects.select_for_update().filter(
        pk=transaction_id, company=actor.company,
    ).first()
    if txn is None:
        return CommandResult.fail("İşlem bulunamadı")

    allowed, reason = can_delete_transaction(actor, txn)
    if not allowed:
        return CommandResult.fail(reason)

    account.balance = account.balance - txn.signed_amount
    account.save(update_fields=["balance", "updated_at"])

    before = snapshot(txn, ("account", "transaction_type", "amount", "description", "category", "date"))
    txn_id = txn.id
    txn.delete()

    record_audit(actor, AuditLog.Action.DELETE, "transaction", txn_id, old_values=before)
    return CommandResult.ok({"deleted": True, "balance": account.balance}, message="İşlem silindi")


@transaction.atomic
def transfer_between_accounts(
    actor: ActorContext,
    from_account_id: int,
    to_account_id: int,
    amount: Decimal,
    description: str = "",
    date: date_cls = None,
) -> CommandResult:
    """
    Move money between two accounts of the company (virman).

    Creates a transfer_out and a transfer_in row sharing one
    virman_pair_id. Both balances change in the same transaction.
    Rows are locked in primary-key order.

    Returns:
        CommandResult with from/to balances and both legs
    """
    require(actor, "transactions.manage")

    amount = _money(amount)
    if amount <= 0:
        return CommandResult.fail("Tutar sıfırdan büyük olmalıdır")

    if from_account_id == to_account_id:
        return CommandResult.fail("Aynı hesaba virman yapılamaz")

    locked = {
        a.pk: a
        for a in Account.objects.select_for_update().filter(
            company=actor.company,
            is_deleted=False,
            pk__in=[from_account_id, to_account_id],
        ).order_by("pk")
    }
    source = locked.get(from_account_id)
    target = locked.get(to_account_id)
    if source is None or target is None:
        return CommandResult.fail("Hesap bulunamadı")

    allowed, reason = can_transfer(actor, source, target, amount)
    if not allowed:
        return CommandResult.fail(reason)

    pair_id = uuid.uuid4()
    label = f"Virman: {description or DEFAULT_TRANSFER_DESCRIPTION}"
    when = date or timezone.localdate()

    out_leg = Transaction.objects.create(
        company=actor.company,
        account=source,
        transaction_type=Transaction.TransactionType.TRANSFER_OUT,
        amount=amount,
        description=label,
        category="transfer",
        date=when,
        virman_pair_id=pair_id,
        created_by=actor.user,
    )
    in_leg = Transaction.objects.create(
        company=actor.company,
        account=target,
        transaction_type=Transaction.TransactionType.TRANSFER_IN,
        amount=amount,
        description=label,
        category="transfer",
        date=when,
        virman_pair_id=pair_id,
        created_by=actor.user,
    )

    source.balance = source.balance - amount
    target.balance = target.balance + amount
    source.save(update_fields=["balance", "updated_at"])
    target.save(update_fields=["balance", "updated_at"])

    record_audit(
        actor,
        AuditLog.Action.TRANSFER,
        "transaction",
        str(pair_id),
        new_values={
            "from_account": source.id,
            "to_account": target.id,
            "amount": amount,
            "from_balance": source.balance,
            "to_balance": target.balance,
        },
    )
    logger.info(
        "Account transfer completed",
        extra={"company_id": actor.company.id, "virman_pair_id": str(pair_id), "amount": str(amount)},
    )

    return CommandResult.ok({
        "virman_pair_id": pair_id,
        "from_balance": source.balance,
        "to_balance": target.balance,
        "out_transaction": out_leg,
        "in_transaction": in_leg,
    }, message="Virman başarılı")


# =============================================================================
# Recurring Transaction Commands
# =============================================================================

@transaction.atomic
def create_recurring_transaction(
    actor: ActorContext,
    account_id: int,
    amount: Decimal,
    interval: str,
    start_date: date_cls,
    interval_count: int = 1,
    end_date: date_cls = None,
    description: str = "",
    category: str = "",
) -> CommandResult:
    """
    Create a recurring schedule.

    The first occurrence is one interval after ``start_date``.
    """
    require(actor, "recurring.manage")

    account = Account.objects.filter(pk=account_id, company=actor.company, is_deleted=False).first()
    if account is None:
        return CommandResult.fail("Hesap bulunamadı")

    if end_date and end_date < start_date:
        return CommandResult.fail("Bitiş tarihi başlangıç tarihinden önce olamaz")

    try:
        next_due = calculate_next_due_date(start_date, interval, interval_count)
    except InvalidIntervalError as exc:
        return CommandResult.fail(str(exc))

    recurring = RecurringTransaction.objects.create(
        company=actor.company,
        account=account,
        amount=_money(amount),
        description=description or "",
        category=category or "",
        interval=interval,
        interval_count=interval_count,
        start_date=start_date,
        end_date=end_date,
        next_due_date=next_due,
        is_active=True,
        created_by=actor.user,
    )

    record_audit(
        actor,
        AuditLog.Action.CREATE,
        "recurring_transaction",
        recurring.id,
        new_values=snapshot(recurring, RECURRING_FIELDS),
    )
    return CommandResult.ok(recurring, message="Tekrarlayan işlem oluşturuldu")


@transaction.atomic
def update_recurring_transaction(actor: ActorContext, recurring_id: int, **updates) -> CommandResult:
    """
    Update a recurring schedule.

    When interval or interval_count change, next_due_date is recomputed
    from the current next_due_date.
    """
    require(actor, "recurring.manage")

    recurring = RecurringTransaction.objects.select_for_update().filter(
        pk=recurring_id, company=actor.company,
    ).first()
    if recurring is None:
        return CommandResult.fail("Tekrarlayan işlem bulunamadı")

    allowed_fields = {"account_id", "amount", "description", "category", "interval", "interval_count", "end_date"}
    updates = {k: v for k, v in updates.items() if k in allowed_fields}

    if "account_id" in updates:
        if not Account.objects.filter(pk=updates["account_id"], company=actor.company, is_deleted=False).exists():
            return CommandResult.fail("Hesap bulunamadı")
    if "amount" in updates:
        updates["amount"] = _money(updates["amount"])

    before = snapshot(recurring, RECURRING_FIELDS)
    schedule_changed = (
        updates.get("interval", recurring.interval) != recurring.interval
        or updates.get("interval_count", recurring.interval_count) != recurring.interval_count
    )

    for field, value in updates.items():
        setattr(recurring, field, value)

    if schedule_changed:
        try:
            recurring.next_due_date = calculate_next_due_date(
                recurring.next_due_date, recurring.interval, recurring.interval_count,
            )
        except InvalidIntervalError as exc:
            return CommandResult.fail(str(exc))

    recurring.save()

    record_audit(
        actor,
        AuditLog.Action.UPDATE,
        "recurring_transaction",
        recurring.id,
        old_values=before,
        new_values=snapshot(recurring, RECURRING_FIELDS),
    )
    return CommandResult.ok(recurring, message="Tekrarlayan işlem güncellendi")


@transaction.atomic
def delete_recurring_transaction(actor: ActorContext, recurring_id: int) -> CommandResult:
    require(actor, "recurring.manage")

    recurring = RecurringTransaction.objects.filter(pk=recurring_id, company=actor.company).first()
    if recurring is None:
        return CommandResult.fail("Tekrarlayan işlem bulunamadı")

    before = snapshot(recurring, RECURRING_FIELDS)
    recurring_id = recurring.id
    recurring.delete()

    record_audit(actor, AuditLog.Action.DELETE, "recurring_transaction", recurring_id, old_values=before)
    return CommandResult.ok({"deleted": True}, message="Tekrarlayan işlem silindi")


@transaction.atomic
def toggle_recurring_transaction(actor: ActorContext, recurring_id: int) -> CommandResult:
    require(actor, "recurring.manage")

    recurring = RecurringTransaction.objects.select_for_update().filter(
        pk=recurring_id, company=actor.company,
    ).first()
    if recurring is None:
        return CommandResult.fail("Tekrarlayan işlem bulunamadı")

    recurring.is_active = not recurring.is_active
    recurring.save(update_fields=["is_active", "updated_at"])

    record_audit(
        actor,
        AuditLog.Action.UPDATE,
        "recurring_transaction",
        recurring.id,
        old_values={"is_active": not recurring.is_active},
        new_values={"is_active": recurring.is_active},
    )
    return CommandResult.ok(recurring)


def _spawn_occurrence(recurring: RecurringTransaction, due: date_cls) -> bool:
    """
    Create the transaction for one due date unless it already exists.

    Returns True when a transaction was created.
    """
    amount = recurring.amount
    txn_type = (
        Transaction.TransactionType.INCOME if amount >= 0 else Transaction.TransactionType.EXPENSE
    )
    description = recurring.description or f"Recurring: {recurring.interval}"

    duplicate = Transaction.objects.filter(
        account_id=recurring.account_id,
        transaction_type=txn_type,
        amount=abs(amount),
        description=description,
        date=due,
    ).exists()
    if duplicate:
        return False

    account = Account.objects.select_for_update().get(pk=recurring.account_id)
    if account.is_deleted:
        raise ValueError("Silinmiş hesaba işlem yapılamaz")

    txn = Transaction.objects.create(
        company=recurring.company,
        account=account,
        transaction_type=txn_type,
        amount=abs(amount),
        description=description,
        category=recurring.category,
        date=due,
        recurring=recurring,
        created_by=recurring.created_by,
    )
    account.balance = account.balance + txn.signed_amount
    account.save(update_fields=["balance", "updated_at"])
    return True


def process_recurring_transactions(company=None, as_of: date_cls = None, actor: ActorContext = None) -> dict:
    """
    Spawn transactions for every active schedule that is due.

    Each schedule is processed in its own database transaction; a failure
    is collected in ``errors`` and does not stop the others. Missed
    occurrences are caught up one by one. A schedule whose end_date falls
    before its new next_due_date is deactivated.

    Args:
        company: Limit to one company (all companies when None)
        as_of: Processing date (defaults to today)
        actor: When given, permission is checked and the run is audited

    Returns:
        {"processed": int, "created": int, "errors": [str]}
    """
    if actor is not None:
        require(actor, "recurring.process")
        company = actor.company

    as_of = as_of or timezone.localdate()
    qs = RecurringTransaction.objects.filter(is_active=True, next_due_date__lte=as_of)
    if company is not None:
        qs = qs.filter(company=company)

    processed = 0
    created = 0
    errors = []

    for recurring_id in qs.values_list("id", flat=True):
        spawned = 0
        try:
            with transaction.atomic():
                recurring = RecurringTransaction.objects.select_for_update().select_related(
                    "company", "created_by",
                ).get(pk=recurring_id)
                if not recurring.is_active:
                    continue

                while recurring.is_active and recurring.next_due_date <= as_of:
                    if recurring.end_date and recurring.next_due_date > recurring.end_date:
                        recurring.is_active = False
                        break
                    if _spawn_occurrence(recurring, recurring.next_due_date):
                        spawned += 1
                    recurring.next_due_date = calculate_next_due_date(
                        recurring.next_due_date, recurring.interval, recurring.interval_count,
                    )
                    if recurring.end_date and recurring.end_date < recurring.next_due_date:
                        recurring.is_active = False

                recurring.last_processed = timezone.now()
                recurring.save(update_fields=["next_due_date", "last_processed", "is_active", "updated_at"])
            processed += 1
            created += spawned
        except (ValueError, Account.DoesNotExist) as exc:
            logger.warning(
                "Recurring transaction %s failed: %s",
                recurring_id,
                exc,
                extra={"recurring_id": recurring_id},
            )
            errors.append(f"{recurring_id}: {exc}")

    summary = {"processed": processed, "created": created, "errors": errors}

    if actor is not None:
        record_audit(actor, AuditLog.Action.PROCESS, "recurring_transaction", "", new_values=summary)
    elif company is not None and processed:
        record_audit_no_actor(company, AuditLog.Action.PROCESS, "recurring_transaction", "", new_values=summary)

    logger.info(
        "Recurring transactions processed",
        extra={"processed": processed, "created_count": created, "error_count": len(errors)},
    )
    return summary


# =============================================================================
# Investment Commands
# =============================================================================

@transaction.atomic
def create_investment(
    actor: ActorContext,
    account_id: int,
    title: str,
    investment_type: str,
    quantity: Decimal,
    purchase_price: Decimal,
    current_price: Decimal = None,
    symbol: str = "",
    currency: str = None,
    category: str = "",
    risk_level: str = Investment.RiskLevel.MEDIUM,
    purchase_date: date_cls = None,
) -> CommandResult:
    """
    Buy a holding from an account.

    The cost (quantity * purchase_price) leaves the account as an expense
    Transaction dated on the purchase date.

    Returns:
        CommandResult with {"investment", "transaction", "balance"}
    """
    require(actor, "investments.manage")

    if investment_type not in Investment.InvestmentType.values:
        return CommandResult.fail("Geçersiz yatırım tipi")
    if risk_level not in Investment.RiskLevel.values:
        return CommandResult.fail("Geçersiz risk seviyesi")

    quantity = Decimal(str(quantity))
    purchase_price = Decimal(str(purchase_price))
    if quantity <= 0:
        return CommandResult.fail("Miktar pozitif olmalıdır")
    if purchase_price <= 0:
        return CommandResult.fail("Alış fiyatı pozitif olmalıdır")
    if current_price is not None and Decimal(str(current_price)) <= 0:
        return CommandResult.fail("Güncel fiyat pozitif olmalıdır")

    cost = _money(quantity * purchase_price)
    if cost <= 0:
        return CommandResult.fail("Tutar sıfırdan büyük olmalıdır")

    account = _locked_account(actor, account_id)
    if account is None:
        return CommandResult.fail("Hesap bulunamadı")

    currency = (currency or account.currency).upper()
    allowed, reason = can_buy_investment(actor, account, currency)
    if not allowed:
        return CommandResult.fail(reason)

    title = title.strip()
    when = purchase_date or timezone.localdate()

    txn = Transaction.objects.create(
        company=actor.company,
        account=account,
        transaction_type=Transaction.TransactionType.EXPENSE,
        amount=cost,
        description=f"{title} yatırım alımı",
        category="investment",
        date=when,
        created_by=actor.user,
    )
    account.balance = account.balance - cost
    account.save(update_fields=["balance", "updated_at"])

    investment = Investment.objects.create(
        company=actor.company,
        account=account,
        title=title,
        investment_type=investment_type,
        symbol=(symbol or "").strip().upper(),
        quantity=quantity,
        purchase_price=purchase_price,
        current_price=current_price,
        currency=currency,
        category=category or "",
        risk_level=risk_level,
        purchase_date=when,
        purchase_transaction=txn,
        created_by=actor.user,
    )

    record_audit(
        actor,
        AuditLog.Action.CREATE,
        "investment",
        investment.id,
        new_values={**snapshot(investment, INVESTMENT_FIELDS), "cost_basis": cost},
    )
    return CommandResult.ok(
        {"investment": investment, "transaction": txn, "balance": account.balance},
        message="Yatırım başarıyla oluşturuldu",
    )


@transaction.atomic
def update_investment(actor: ActorContext, investment_id: int, **updates) -> CommandResult:
    """
    Update descriptive fields or the current price of a holding.

    Quantity and purchase price are fixed: they define the purchase
    transaction already posted to the account.
    """
    require(actor, "investments.manage")

    investment = Investment.objects.select_for_update().filter(
        pk=investment_id, company=actor.company,
    ).first()
    if investment is None:
        return CommandResult.fail("Yatırım bulunamadı")

    allowed_fields = {"title", "investment_type", "symbol", "current_price", "category", "risk_level"}
    updates = {k: v for k, v in updates.items() if k in allowed_fields}

    if "investment_type" in updates and updates["investment_type"] not in Investment.InvestmentType.values:
        return CommandResult.fail("Geçersiz yatırım tipi")
    if "risk_level" in updates and updates["risk_level"] not in Investment.RiskLevel.values:
        return CommandResult.fail("Geçersiz risk seviyesi")
    if updates.get("current_price") is not None and Decimal(str(updates["current_price"])) <= 0:
        return CommandResult.fail("Güncel fiyat pozitif olmalıdır")
    if "symbol" in updates:
        updates["symbol"] = (updates["symbol"] or "").strip().upper()

    if not updates:
        return CommandResult.ok(investment)

    before = snapshot(investment, INVESTMENT_FIELDS)
    for field, value in updates.items():
        setattr(investment, field, value)
    investment.save(update_fields=list(updates.keys()) + ["updated_at"])

    record_audit(
        actor,
        AuditLog.Action.UPDATE,
        "investment",
        investment.id,
        old_values=before,
        new_values=snapshot(investment, updates.keys()),
    )
    return CommandResult.ok(investment, message="Yatırım güncellendi")


@transaction.atomic
def delete_investment(actor: ActorContext, investment_id: int) -> CommandResult:
    """Remove a holding. The purchase transaction stays on the account."""
    require(actor, "investments.manage")

    investment = Investment.objects.filter(pk=investment_id, company=actor.company).first()
    if investment is None:
        return CommandResult.fail("Yatırım bulunamadı")

    before = snapshot(investment, INVESTMENT_FIELDS)
    investment_id = investment.id
    investment.delete()

    record_audit(actor, AuditLog.Action.DELETE, "investment", investment_id, old_values=before)
    return CommandResult.ok({"deleted": True}, message="Yatırım başarıyla silindi")


# =============================================================================
# Credit Commands
# =============================================================================

def _credit_account(actor: ActorContext, account_id):
    return Account.objects.filter(pk=account_id, company=actor.company, is_deleted=False).first()


@transaction.atomic
def create_credit(
    actor: ActorContext,
    title: str,
    credit_type: str,
    amount: Decimal,
    remaining_amount: Decimal = None,
    account_id: int = None,
    currency: str = None,
    interest_rate: Decimal = None,
    minimum_payment: Decimal = None,
    institution: str = "",
    description: str = "",
    start_date: date_cls = None,
    due_date: date_cls = None,
) -> CommandResult:
    """
    Register a loan, card debt or overdraft line.

    ``remaining_amount`` defaults to ``amount``. A credit created with
    nothing left to pay starts as paid off.
    """
    require(actor, "credits.manage")

    if credit_type not in Credit.CreditType.values:
        return CommandResult.fail("Geçersiz kredi tipi")

    amount = _money(amount)
    if amount <= 0:
        return CommandResult.fail("Tutar sıfırdan büyük olmalıdır")
    remaining = amount if remaining_amount is None else _money(remaining_amount)
    if remaining < 0 or remaining > amount:
        return CommandResult.fail("Kalan tutar 0 ile kredi tutarı arasında olmalıdır")

    start_date = start_date or timezone.localdate()
    if due_date and due_date < start_date:
        return CommandResult.fail("Vade tarihi başlangıç tarihinden önce olamaz")

    account = None
    if account_id is not None:
        account = _credit_account(actor, account_id)
        if account is None:
            return CommandResult.fail("Hesap bulunamadı")

    currency = (currency or (account.currency if account else actor.company.default_currency)).upper()
    if account is not None and account.currency != currency:
        return CommandResult.fail("Kredi ve hesap para birimleri farklı")

    credit = Credit.objects.create(
        company=actor.company,
        account=account,
        title=title.strip(),
        description=description or "",
        credit_type=credit_type,
        institution=(institution or "").strip(),
        amount=amount,
        remaining_amount=remaining,
        currency=currency,
        interest_rate=interest_rate,
        minimum_payment=_money(minimum_payment) if minimum_payment is not None else None,
        start_date=start_date,
        due_date=due_date,
        status=Credit.Status.PAID_OFF if remaining == 0 else Credit.Status.ACTIVE,
        created_by=actor.user,
    )

    record_audit(
        actor,
        AuditLog.Action.CREATE,
        "credit",
        credit.id,
        new_values=snapshot(credit, CREDIT_FIELDS),
    )
    return CommandResult.ok(credit, message="Kredi başarıyla oluşturuldu")


@transaction.atomic
def update_credit(actor: ActorContext, credit_id: int, **updates) -> CommandResult:
    """
    Update terms of a credit.

    Amounts only change through payments.
    """
    require(actor, "credits.manage")

    credit = Credit.objects.select_for_update().filter(
        pk=credit_id, company=actor.company, is_active=True,
    ).first()
    if credit is None:
        return CommandResult.fail("Kredi bulunamadı")

    allowed_fields = {
        "title", "description", "credit_type", "institution",
        "interest_rate", "minimum_payment", "due_date", "account_id",
    }
    updates = {k: v for k, v in updates.items() if k in allowed_fields}

    if "credit_type" in updates and updates["credit_type"] not in Credit.CreditType.values:
        return CommandResult.fail("Geçersiz kredi tipi")
    if updates.get("due_date") and updates["due_date"] < credit.start_date:
        return CommandResult.fail("Vade tarihi başlangıç tarihinden önce olamaz")
    if updates.get("account_id") is not None:
        account = _credit_account(actor, updates["account_id"])
        if account is None:
            return CommandResult.fail("Hesap bulunamadı")
        if account.currency != credit.currency:
            return CommandResult.fail("Kredi ve hesap para birimleri farklı")
    if updates.get("minimum_payment") is not None:
        updates["minimum_payment"] = _money(updates["minimum_payment"])

    if not updates:
        return CommandResult.ok(credit)

    before = snapshot(credit, CREDIT_FIELDS)
    for field, value in updates.items():
        setattr(credit, field, value)
    credit.save()

    record_audit(
        actor,
        AuditLog.Action.UPDATE,
        "credit",
        credit.id,
        old_values=before,
        new_values=snapshot(credit, CREDIT_FIELDS),
    )
    return CommandResult.ok(credit, message="Kredi güncellendi")


@transaction.atomic
def delete_credit(actor: ActorContext, credit_id: int) -> CommandResult:
    require(actor, "credits.manage")

    credit = Credit.objects.select_for_update().filter(
        pk=credit_id, company=actor.company, is_active=True,
    ).first()
    if credit is None:
        return CommandResult.fail("Kredi bulunamadı")

    before = snapshot(credit, CREDIT_FIELDS)
    credit.is_active = False
    credit.deleted_at = timezone.now()
    credit.save(update_fields=["is_active", "deleted_at", "updated_at"])

    record_audit(
        actor,
        AuditLog.Action.DELETE,
        "credit",
        credit.id,
        old_values=before,
        new_values={"is_active": False},
    )
    return CommandResult.ok({"deleted": True}, message="Kredi silindi")


@transaction.atomic
def make_credit_payment(
    actor: ActorContext,
    credit_id: int,
    amount: Decimal,
    description: str = "",
    date: date_cls = None,
) -> CommandResult:
    """
    Pay down a credit from its linked account.

    A payment larger than the remaining amount is capped at it. The paid
    amount leaves the account as an expense Transaction; a credit paid
    down to zero is marked paid off.

    Returns:
        CommandResult with {"credit", "transaction", "payment_amount", "balance"}
    """
    require(actor, "credits.manage")

    amount = _money(amount)
    if amount <= 0:
        return CommandResult.fail("Tutar sıfırdan büyük olmalıdır")

    credit = Credit.objects.select_for_update().filter(
        pk=credit_id, company=actor.company, is_active=True,
    ).first()
    if credit is None:
        return CommandResult.fail("Kredi bulunamadı")

    account = _locked_account(actor, credit.account_id) if credit.account_id else None
    allowed, reason = can_pay_credit(actor, credit, account)
    if not allowed:
        return CommandResult.fail(reason)

    payment = min(amount, credit.remaining_amount)
    when = date or timezone.localdate()

    txn = Transaction.objects.create(
        company=actor.company,
        account=account,
        transaction_type=Transaction.TransactionType.EXPENSE,
        amount=payment,
        description=description or f"Ödeme: {credit.title}",
        category="Kredi Ödemesi",
        date=when,
        created_by=actor.user,
    )
    account.balance = account.balance - payment
    account.save(update_fields=["balance", "updated_at"])

    before = {"remaining_amount": credit.remaining_amount, "status": credit.status}
    credit.remaining_amount = credit.remaining_amount - payment
    if credit.remaining_amount == 0:
        credit.status = Credit.Status.PAID_OFF
    credit.last_payment_date = when
    credit.last_payment_amount = payment
    credit.save(update_fields=[
        "remaining_amount", "status", "last_payment_date", "last_payment_amount", "updated_at",
    ])

    record_audit(
        actor,
        AuditLog.Action.UPDATE,
        "credit",
        credit.id,
        old_values=before,
        new_values={
            "remaining_amount": credit.remaining_amount,
            "status": credit.status,
            "payment_amount": payment,
            "transaction_id": txn.id,
        },
        reason="Kredi ödemesi",
    )
    logger.info(
        "Credit payment recorded",
        extra={"company_id": actor.company.id, "credit_id": credit.id, "amount": str(payment)},
    )

    message = "Kredi kapandı" if credit.status == Credit.Status.PAID_OFF else "Ödeme kaydedildi"
    return CommandResult.ok({
        "credit": credit,
        "transaction": txn,
        "payment_amount": payment,
        "balance": account.balance,
    }, message=message)
