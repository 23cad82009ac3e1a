# accounting/queries.py
"""
Read-side helpers for bookkeeping views and reports.

Nothing here writes; all functions take the tenant explicitly.
"""

from collections import Counter
from datetime import date, timedelta
from decimal import Decimal

from django.db.models import Q, Sum
from django.utils import timezone

from accounting.models import Account, Credit, Investment, RecurringTransaction, Transaction
from accounting.recurring import monthly_equivalent


def filter_transactions(company, params: dict):
    """
    Company transactions filtered by account, type, date range and a free
    text search over description and category.
    """
    qs = Transaction.objects.filter(company=company).select_related("account")

    if params.get("account_id"):
        qs = qs.filter(account_id=params["account_id"])
    if params.get("transaction_type"):
        qs = qs.filter(transaction_type=params["transaction_type"])
    if params.get("start_date"):
        qs = qs.filter(date__gte=params["start_date"])
    if params.get("end_date"):
        qs = qs.filter(date__lte=params["end_date"])
    if params.get("search"):
        term = params["search"]
        qs = qs.filter(Q(description__icontains=term) | Q(category__icontains=term))

    return qs.order_by("-date", "-created_at", "-id")


def balance_history(account: Account, days: int = 30, today: date = None) -> list[dict]:
    """
    End-of-day balances for the last ``days`` days, oldest first.

    Reconstructed backwards from the current balance by undoing the
    transactions dated after each day.
    """
    today = today or timezone.localdate()
    start = today - timedelta(days=days - 1)

    daily = {}
    rows = Transaction.objects.filter(account=account, date__gt=start).values_list(
        "date", "transaction_type", "amount",
    )
    for txn_date, txn_type, amount in rows:
        signed = amount if txn_type in Transaction.INFLOW_TYPES else -amount
        daily[txn_date] = daily.get(txn_date, Decimal("0")) + signed

    history = []
    balance = account.balance
    # Transactions dated in the future are not part of today's closing balance
    for txn_date, delta in daily.items():
        if txn_date > today:
            balance -= delta

    for offset in range(days):
        day = today - timedelta(days=offset)
        history.append({"date": day, "balance": balance})
        balance -= daily.get(day, Decimal("0"))

    history.reverse()
    return history


def account_summary(account: Account, today: date = None) -> dict:
    recent = list(
        Transaction.objects.filter(account=account).order_by("-date", "-created_at", "-id")[:10]
    )
    totals = Transaction.objects.filter(account=account).aggregate(
        income=Sum("amount", filter=Q(transaction_type__in=list(Transaction.INFLOW_TYPES))),
        expense=Sum("amount", filter=~Q(transaction_type__in=list(Transaction.INFLOW_TYPES))),
    )
    return {
        "account": account,
        "recent_transactions": recent,
        "balance_history": balance_history(account, days=30, today=today),
        "total_inflow": totals["income"] or Decimal("0.00"),
        "total_outflow": totals["expense"] or Decimal("0.00"),
    }


def list_recurring(company, is_active=None):
    qs = RecurringTransaction.objects.filter(company=company).select_related("account")
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs.order_by("next_due_date", "id")


def upcoming_recurring(company, days: int = 30, today: date = None):
    today = today or timezone.localdate()
    return list_recurring(company, is_active=True).filter(
        next_due_date__gte=today,
        next_due_date__lte=today + timedelta(days=days),
    )


def recurring_stats(company, today: date = None) -> dict:
    """Counts per state and interval plus the active monthly total."""
    today = today or timezone.localdate()
    items = list(RecurringTransaction.objects.filter(company=company))
    active = [r for r in items if r.is_active]

    total_amount = sum((r.amount for r in active), Decimal("0.00"))
    monthly_total = sum(
        (monthly_equivalent(r.amount, r.interval, r.interval_count) for r in active),
        Decimal("0"),
    ).quantize(Decimal("0.01"))

    return {
        "total": len(items),
        "active": len(active),
        "inactive": len(items) - len(active),
        "by_interval": dict(Counter(r.interval for r in items)),
        "total_amount": total_amount,
        "monthly_equivalent": monthly_total,
        "upcoming_count": upcoming_recurring(company, days=30, today=today).count(),
    }


def list_investments(company, params: dict = None):
    params = params or {}
    qs = Investment.objects.filter(company=company).select_related("account")
    if params.get("investment_type"):
        qs = qs.filter(investment_type=params["investment_type"])
    if params.get("account_id"):
        qs = qs.filter(account_id=params["account_id"])
    return qs


def portfolio_summary(company) -> dict:
    """Cost, current value and gain per currency and per investment type."""
    by_currency = {}
    by_type = Counter()
    for inv in Investment.objects.filter(company=company):
        totals = by_currency.setdefault(inv.currency, {
            "cost_basis": Decimal("0.00"),
            "current_value": Decimal("0.00"),
            "gain_loss": Decimal("0.00"),
        })
        totals["cost_basis"] += inv.cost_basis
        totals["current_value"] += inv.current_value
        totals["gain_loss"] += inv.gain_loss
        by_type[inv.investment_type] += 1

    return {
        "count": sum(by_type.values()),
        "by_type": dict(by_type),
        "by_currency": by_currency,
    }


def list_credits(company, params: dict = None):
    params = params or {}
    qs = Credit.objects.filter(company=company, is_active=True).select_related("account")
    if params.get("status"):
        qs = qs.filter(status=params["status"])
    if params.get("credit_type"):
        qs = qs.filter(credit_type=params["credit_type"])
    return qs


def overdue_credits(company, today: date = None):
    today = today or timezone.localdate()
    return list_credits(company).filter(due_date__lt=today, remaining_amount__gt=0)


def credit_summary(company, today: date = None) -> dict:
    """Outstanding debt per currency plus counts of open, closed and overdue credits."""
    today = today or timezone.localdate()
    credits = list(list_credits(company))

    remaining = {}
    for credit in credits:
        remaining[credit.currency] = remaining.get(credit.currency, Decimal("0.00")) + credit.remaining_amount

    return {
        "total": len(credits),
        "active": sum(1 for c in credits if c.status == Credit.Status.ACTIVE),
        "paid_off": sum(1 for c in credits if c.status == Credit.Status.PAID_OFF),
        "overdue": sum(1 for c in credits if c.is_overdue(today)),
        "remaining_by_currency": remaining,
    }
