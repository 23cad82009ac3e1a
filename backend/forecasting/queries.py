# forecasting/queries.py
"""Company figures that feed the forecasting engines."""

from datetime import date
from decimal import Decimal

from django.db.models import Sum
from django.utils import timezone

from accounting.models import Account, RecurringTransaction, Transaction
from accounting.recurring import add_months, monthly_equivalent
from forecasting.scenario import FinancialSnapshot

CASH_ACCOUNT_TYPES = (
    Account.AccountType.CHECKING,
    Account.AccountType.SAVINGS,
    Account.AccountType.INVESTMENT,
)
DEBT_ACCOUNT_TYPES = (
    Account.AccountType.CREDIT_CARD,
    Account.AccountType.LOAN,
)


def _total(qs, field) -> Decimal:
    return qs.aggregate(total=Sum(field))["total"] or Decimal("0")


def financial_snapshot(company, today: date = None) -> FinancialSnapshot:
    """
    Current cash and monthly run-rates for the scenario engine.

    Cash is the sum of all live account balances. Run-rates come from the
    last three months of income / expense transactions plus the monthly
    equivalent of active recurring schedules.
    """
    today = today or timezone.localdate()
    since = add_months(today, -3)

    accounts = Account.objects.filter(company=company, is_deleted=False)
    recent = Transaction.objects.filter(company=company, date__gte=since, date__lte=today)

    recurring_income = Decimal("0")
    recurring_expenses = Decimal("0")
    for amount, interval, count in RecurringTransaction.objects.filter(
        company=company, is_active=True,
    ).values_list("amount", "interval", "interval_count"):
        monthly = monthly_equivalent(amount, interval, count)
        if monthly >= 0:
            recurring_income += monthly
        else:
            recurring_expenses += -monthly

    return FinancialSnapshot.from_totals(
        current_cash=_total(accounts, "balance"),
        recent_income=_total(recent.filter(transaction_type=Transaction.TransactionType.INCOME), "amount"),
        recent_expenses=_total(recent.filter(transaction_type=Transaction.TransactionType.EXPENSE), "amount"),
        recurring_income=recurring_income,
        recurring_expenses=recurring_expenses,
    )


def simulation_base(company):
    """
    Returns (cash, debt) for the macro simulation, or None without accounts.

    Checking, savings and investment balances count as cash; credit card
    and loan balances as debt (absolute value).
    """
    accounts = Account.objects.filter(company=company, is_deleted=False)
    if not accounts.exists():
        return None

    cash = _total(accounts.filter(account_type__in=CASH_ACCOUNT_TYPES), "balance")
    debt = sum(
        (abs(b) for b in accounts.filter(account_type__in=DEBT_ACCOUNT_TYPES).values_list("balance", flat=True)),
        Decimal("0"),
    )
    return float(cash), float(debt)


def recent_transactions(company, months: int = 12, today: date = None):
    """Transactions of the last ``months`` months, oldest first."""
    today = today or timezone.localdate()
    return Transaction.objects.filter(
        company=company,
        date__gt=add_months(today, -months),
        date__lte=today,
    ).order_by("date", "id")
