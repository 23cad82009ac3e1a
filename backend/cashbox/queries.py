# cashbox/queries.py
"""Read-side helpers for cashbox views and exports."""

from decimal import Decimal

from django.db.models import Count, Max, Sum

from cashbox.models import Cashbox, CashboxTransaction


def list_cashboxes(company, include_deleted: bool = False):
    """Company cashboxes newest first, with ledger row count and last activity."""
    qs = Cashbox.objects.filter(company=company)
    if not include_deleted:
        qs = qs.filter(is_deleted=False)
    return qs.annotate(
        total_transactions=Count("transactions"),
        last_transaction_date=Max("transactions__created_at"),
    ).order_by("-created_at", "-id")


def filter_cashbox_transactions(cashbox: Cashbox, params: dict):
    """
    Returns (page, total) of a cashbox's ledger, newest first.

    Filters: transaction_type, start_date, end_date; paged by limit/offset.
    """
    qs = CashboxTransaction.objects.filter(cashbox=cashbox).select_related("created_by")

    if params.get("transaction_type"):
        qs = qs.filter(transaction_type=params["transaction_type"])
    if params.get("start_date"):
        qs = qs.filter(created_at__date__gte=params["start_date"])
    if params.get("end_date"):
        qs = qs.filter(created_at__date__lte=params["end_date"])

    total = qs.count()
    offset = params.get("offset", 0)
    limit = params.get("limit", 50)
    return qs.order_by("-created_at", "-id")[offset:offset + limit], total


def cashbox_summary(company) -> dict:
    live = Cashbox.objects.filter(company=company, is_deleted=False)
    totals = live.aggregate(
        total_balance=Sum("current_balance"),
        last_updated=Max("updated_at"),
    )
    return {
        "total_cashboxes": live.count(),
        "active_cashboxes": live.filter(is_active=True).count(),
        "total_balance": totals["total_balance"] or Decimal("0.00"),
        "currency": company.default_currency,
        "last_updated": totals["last_updated"],
    }
