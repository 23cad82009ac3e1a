# aging/analysis.py
"""
Pure AR/AP aging calculations.

Every function takes plain item objects (ArApItem instances or anything
with the same attributes) and an explicit ``as_of`` date, so results do
not depend on the wall clock and nothing here touches the database.
"""

import math
from collections import OrderedDict
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

BUCKETS = ("0-30", "31-60", "61-90", "90+")

BUCKET_LABELS = {
    "0-30": "0-30 gün",
    "31-60": "31-60 gün",
    "61-90": "61-90 gün",
    "90+": "90+ gün",
}

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}

RECOMMENDED_ACTIONS = {
    "high": "Immediate legal action or collection agency",
    "medium": "Send formal demand letter and follow up calls",
    "low": "Standard collection procedures",
}

ZERO = Decimal("0.00")
PCT_Q = Decimal("0.01")


def days_past_due(due_date: date, as_of: date) -> int:
    """Whole days since the due date; negative while not yet due."""
    return (as_of - due_date).days


def aging_bucket(days: int) -> str:
    if days <= 30:
        return "0-30"
    if days <= 60:
        return "31-60"
    if days <= 90:
        return "61-90"
    return "90+"


def risk_level(days: int) -> str:
    if days <= 30:
        return "low"
    if days <= 60:
        return "medium"
    if days <= 90:
        return "high"
    return "critical"


def item_status(days: int, paid: bool = False) -> str:
    if paid:
        return "paid"
    return "overdue" if days > 0 else "outstanding"


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if not whole:
        return ZERO
    return (Decimal(part) / Decimal(whole) * 100).quantize(PCT_Q, rounding=ROUND_HALF_UP)


def _open(items):
    return [item for item in items if item.status != "paid"]


def _average_days(days_list) -> int:
    if not days_list:
        return 0
    # half rounds up
    return math.floor(sum(days_list) / len(days_list) + 0.5)


def aging_summary(items, as_of: date) -> dict:
    """
    Bucket totals for unpaid items.

    All four buckets are always present, in order, with amount, count and
    percentage of the total amount.
    """
    items = _open(items)
    totals = OrderedDict((bucket, {"amount": ZERO, "count": 0}) for bucket in BUCKETS)

    total_amount = ZERO
    overdue_amount = ZERO
    overdue_count = 0
    all_days = []

    for item in items:
        days = days_past_due(item.due_date, as_of)
        all_days.append(days)
        amount = Decimal(item.current_amount)
        total_amount += amount

        slot = totals[aging_bucket(days)]
        slot["amount"] += amount
        slot["count"] += 1

        if days > 0:
            overdue_amount += amount
            overdue_count += 1

    return {
        "total_amount": total_amount,
        "total_count": len(items),
        "buckets": [
            {
                "bucket": bucket,
                "label": BUCKET_LABELS[bucket],
                "amount": slot["amount"],
                "count": slot["count"],
                "percentage": _percentage(slot["amount"], total_amount),
            }
            for bucket, slot in totals.items()
        ],
        "average_aging_days": _average_days(all_days),
        "overdue_amount": overdue_amount,
        "overdue_count": overdue_count,
        "overdue_percentage": _percentage(overdue_amount, total_amount),
    }


def aging_by_customer(items, as_of: date) -> list[dict]:
    """Per customer/supplier roll-up of unpaid items, largest total first."""
    grouped = OrderedDict()
    for item in _open(items):
        grouped.setdefault(item.customer_supplier, []).append(item)

    rows = []
    for name, group in grouped.items():
        days = [days_past_due(item.due_date, as_of) for item in group]
        total = sum((Decimal(item.current_amount) for item in group), ZERO)
        overdue = sum(
            (Decimal(item.current_amount) for item, d in zip(group, days) if d > 0),
            ZERO,
        )
        rows.append({
            "customer_supplier": name,
            "total_amount": total,
            "overdue_amount": overdue,
            "average_aging_days": _average_days(days),
            "risk_level": risk_level(max(days)),
            "item_count": len(group),
        })

    rows.sort(key=lambda row: row["total_amount"], reverse=True)
    return rows


def aging_statistics(items, as_of: date, top: int = 10) -> dict:
    items = _open(items)
    days = [days_past_due(item.due_date, as_of) for item in items]
    customers = aging_by_customer(items, as_of)

    return {
        "total_reports": len(items),
        "total_amount": sum((Decimal(item.current_amount) for item in items), ZERO),
        "overdue_amount": sum(
            (Decimal(item.current_amount) for item, d in zip(items, days) if d > 0),
            ZERO,
        ),
        "average_aging_days": _average_days(days),
        "critical_risk_count": sum(1 for d in days if d > 90),
        "top_customers": [
            {
                "customer_supplier": row["customer_supplier"],
                "total_amount": row["total_amount"],
                "overdue_amount": row["overdue_amount"],
            }
            for row in customers[:top]
        ],
    }


def days_outstanding(items, item_type: str, as_of: date, period_days: int = 90) -> float:
    """
    DSO (receivable) or DPO (payable).

    Mean days past due of the items invoiced within the last
    ``period_days`` days; 0 when there are none.
    """
    start = as_of - timedelta(days=period_days)
    window = [
        item for item in items
        if item.item_type == item_type and start <= item.invoice_date <= as_of
    ]
    if not window:
        return 0.0
    total = sum(days_past_due(item.due_date, as_of) for item in window)
    return round(total / len(window), 2)


def collection_priorities(items, as_of: date) -> list[dict]:
    """
    Rank unpaid items for follow-up.

    high: more than 90 days or above 100000; medium: more than 60 days or
    above 50000; low otherwise. Sorted by priority, then amount descending.
    """
    rows = []
    for item in _open(items):
        days = days_past_due(item.due_date, as_of)
        amount = Decimal(item.current_amount)

        if days > 90 or amount > 100000:
            priority = "high"
        elif days > 60 or amount > 50000:
            priority = "medium"
        else:
            priority = "low"

        rows.append({
            "id": item.id,
            "invoice_number": item.invoice_number,
            "customer_supplier": item.customer_supplier,
            "amount": amount,
            "days_outstanding": days,
            "priority": priority,
            "recommended_action": RECOMMENDED_ACTIONS[priority],
        })

    rows.sort(key=lambda row: (PRIORITY_ORDER[row["priority"]], row["amount"]), reverse=True)
    return rows
