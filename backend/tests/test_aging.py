# tests/test_aging.py
"""
Tests for AR/AP aging.

Tests cover:
- Bucket boundaries and risk levels
- Summary totals and percentages (paid items excluded)
- Customer roll-up ordering
- DSO/DPO window
- Collection priorities ordering
- Commands, recalculation task and API
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

from django.utils import timezone

from aging import analysis
from aging.commands import create_item, mark_paid, recalculate_aging
from aging.models import ArApItem
from aging.tasks import recalculate_company_aging


AS_OF = date(2024, 6, 30)


def _item(pk, customer, amount, due, status="outstanding", item_type="receivable", invoice=None):
    return SimpleNamespace(
        id=pk,
        invoice_number=f"FTR-{pk:04d}",
        customer_supplier=customer,
        current_amount=Decimal(amount),
        due_date=due,
        invoice_date=invoice or due - timedelta(days=30),
        status=status,
        item_type=item_type,
    )


@pytest.fixture
def book():
    return [
        _item(1, "Acme", "1000", date(2024, 6, 20)),   # 10 days
        _item(2, "Acme", "2000", date(2024, 5, 1)),    # 60 days
        _item(3, "Beta", "3000", date(2024, 3, 1)),    # 121 days
        _item(4, "Gamma", "4000", date(2024, 7, 15)),  # not yet due
        _item(5, "Delta", "9999", date(2024, 1, 1), status="paid"),
    ]


# =============================================================================
# Classification
# =============================================================================

class TestClassification:

    @pytest.mark.parametrize("days,bucket", [
        (-10, "0-30"), (0, "0-30"), (30, "0-30"),
        (31, "31-60"), (60, "31-60"),
        (61, "61-90"), (90, "61-90"),
        (91, "90+"), (400, "90+"),
    ])
    def test_bucket_boundaries(self, days, bucket):
        assert analysis.aging_bucket(days) == bucket

    @pytest.mark.parametrize("days,level", [(5, "low"), (45, "medium"), (75, "high"), (120, "critical")])
    def test_risk_level(self, days, level):
        assert analysis.risk_level(days) == level

    def test_status(self):
        assert analysis.item_status(-1) == "outstanding"
        assert analysis.item_status(0) == "outstanding"
        assert analysis.item_status(1) == "overdue"
        assert analysis.item_status(100, paid=True) == "paid"


# =============================================================================
# Summary and Roll-ups
# =============================================================================

class TestAgingSummary:

    def test_totals_exclude_paid(self, book):
        summary = analysis.aging_summary(book, AS_OF)

        assert summary["total_amount"] == Decimal("10000")
        assert summary["total_count"] == 4
        assert summary["overdue_amount"] == Decimal("6000")
        assert summary["overdue_count"] == 3
        assert summary["overdue_percentage"] == Decimal("60.00")
        assert summary["average_aging_days"] == 44

    def test_buckets_always_present_in_order(self, book):
        buckets = analysis.aging_summary(book, AS_OF)["buckets"]

        assert [b["bucket"] for b in buckets] == ["0-30", "31-60", "61-90", "90+"]
        assert [b["count"] for b in buckets] == [2, 1, 0, 1]
        assert [b["percentage"] for b in buckets] == [
            Decimal("50.00"), Decimal("20.00"), Decimal("0.00"), Decimal("30.00"),
        ]

    def test_empty(self):
        summary = analysis.aging_summary([], AS_OF)
        assert summary["total_amount"] == Decimal("0.00")
        assert summary["average_aging_days"] == 0
        assert all(b["percentage"] == Decimal("0.00") for b in summary["buckets"])

    def test_by_customer(self, book):
        rows = analysis.aging_by_customer(book, AS_OF)

        assert [r["customer_supplier"] for r in rows] == ["Gamma", "Acme", "Beta"]
        acme = rows[1]
        assert acme["total_amount"] == Decimal("3000")
        assert acme["average_aging_days"] == 35
        assert acme["risk_level"] == "medium"
        assert acme["item_count"] == 2
        assert rows[2]["risk_level"] == "critical"
        assert rows[0]["overdue_amount"] == Decimal("0.00")

    def test_statistics(self, book):
        stats = analysis.aging_statistics(book, AS_OF, top=2)

        assert stats["total_reports"] == 4
        assert stats["critical_risk_count"] == 1
        assert len(stats["top_customers"]) == 2


# =============================================================================
# DSO / DPO
# =============================================================================

class TestDaysOutstanding:

    def test_only_items_invoiced_in_window(self):
        items = [
            _item(1, "A", "100", date(2024, 6, 20), invoice=date(2024, 6, 1)),   # 10 days
            _item(2, "B", "100", date(2024, 6, 10), invoice=date(2024, 5, 1)),   # 20 days
            _item(3, "C", "100", date(2024, 1, 10), invoice=date(2023, 12, 1)),  # outside window
            _item(4, "D", "100", date(2024, 6, 1), item_type="payable", invoice=date(2024, 5, 2)),
        ]

        assert analysis.days_outstanding(items, "receivable", AS_OF) == 15.0
        assert analysis.days_outstanding(items, "payable", AS_OF) == 29.0

    def test_zero_when_nothing_in_window(self):
        assert analysis.days_outstanding([], "receivable", AS_OF) == 0.0


# =============================================================================
# Collection Priorities
# =============================================================================

class TestCollectionPriorities:

    def test_order_by_priority_then_amount(self, book):
        book.append(_item(6, "Büyük Müşteri", "150000", date(2024, 6, 25)))

        rows = analysis.collection_priorities(book, AS_OF)

        assert [r["id"] for r in rows] == [6, 3, 4, 2, 1]
        assert [r["priority"] for r in rows] == ["high", "high", "low", "low", "low"]
        assert rows[0]["recommended_action"] == analysis.RECOMMENDED_ACTIONS["high"]

    def test_medium_thresholds(self):
        rows = analysis.collection_priorities([
            _item(1, "A", "60000", date(2024, 6, 29)),
            _item(2, "B", "10", date(2024, 4, 15)),  # 76 days
        ], AS_OF)
        assert {r["id"]: r["priority"] for r in rows} == {1: "medium", 2: "medium"}


# =============================================================================
# Commands
# =============================================================================

@pytest.mark.django_db
class TestAgingCommands:

    def test_create_derives_fields(self, actor):
        today = timezone.localdate()
        result = create_item(
            actor,
            item_type="receivable",
            invoice_number="FTR-1",
            customer_supplier="Acme",
            original_amount=Decimal("500"),
            invoice_date=today - timedelta(days=80),
            due_date=today - timedelta(days=45),
        )

        assert result.success
        item = result.data
        assert item.current_amount == Decimal("500.00")
        assert item.aging_days == 45
        assert item.aging_bucket == "31-60"
        assert item.status == "overdue"

    def test_due_before_invoice_rejected(self, actor):
        result = create_item(
            actor, "payable", "F-2", "Tedarikçi", Decimal("10"),
            invoice_date=date(2024, 5, 10), due_date=date(2024, 5, 1),
        )
        assert result.error == "Vade tarihi fatura tarihinden önce olamaz"

    def test_current_above_original_rejected(self, actor):
        result = create_item(
            actor, "payable", "F-3", "Tedarikçi", Decimal("10"),
            invoice_date=date(2024, 5, 1), due_date=date(2024, 5, 10), current_amount=Decimal("11"),
        )
        assert not result.success

    def test_mark_paid_once(self, actor):
        item = create_item(
            actor, "receivable", "F-4", "Acme", Decimal("10"),
            invoice_date=date(2024, 5, 1), due_date=date(2024, 5, 10),
        ).data

        result = mark_paid(actor, item.id)
        assert result.success
        assert result.data.current_amount == Decimal("0.00")
        assert result.data.status == "paid"
        assert mark_paid(actor, item.id).error == "Kayıt zaten ödenmiş"

    def test_recalculate_keeps_paid(self, actor):
        open_item = create_item(
            actor, "receivable", "F-5", "Acme", Decimal("10"),
            invoice_date=date(2024, 5, 1), due_date=date(2024, 6, 1),
        ).data
        paid_item = create_item(
            actor, "receivable", "F-6", "Acme", Decimal("10"),
            invoice_date=date(2024, 5, 1), due_date=date(2024, 6, 1),
        ).data
        mark_paid(actor, paid_item.id)

        result = recalculate_aging(actor=actor, as_of=date(2024, 6, 11))

        assert result == {"updated": 2, "errors": []}
        open_item.refresh_from_db()
        paid_item.refresh_from_db()
        assert open_item.aging_days == 10
        assert open_item.status == "overdue"
        assert paid_item.status == "paid"

    def test_task_scopes_to_company(self, actor, outsider_actor):
        create_item(actor, "receivable", "F-7", "Acme", Decimal("10"),
                    invoice_date=date(2024, 5, 1), due_date=date(2024, 6, 1))
        create_item(outsider_actor, "receivable", "F-8", "Acme", Decimal("10"),
                    invoice_date=date(2024, 5, 1), due_date=date(2024, 6, 1))

        result = recalculate_company_aging.apply(args=[actor.company.id, "2024-06-30"]).get()

        assert result["updated"] == 1
        assert ArApItem.objects.get(invoice_number="F-7").aging_days == 29
        assert ArApItem.objects.get(invoice_number="F-8").aging_days != 29


# =============================================================================
# API
# =============================================================================

@pytest.mark.django_db
class TestAgingApi:

    @pytest.fixture
    def items(self, actor):
        create_item(actor, "receivable", "A-1", "Acme", Decimal("1000"),
                    invoice_date=date(2024, 5, 1), due_date=date(2024, 6, 20))
        create_item(actor, "receivable", "A-2", "Beta", Decimal("3000"),
                    invoice_date=date(2024, 1, 1), due_date=date(2024, 3, 1))
        create_item(actor, "payable", "B-1", "Tedarikçi", Decimal("500"),
                    invoice_date=date(2024, 6, 1), due_date=date(2024, 6, 15))

    def test_create_item(self, owner_client):
        response = owner_client.post("/api/aging/items/", {
            "item_type": "receivable",
            "invoice_number": "FTR-100",
            "customer_supplier": "Acme",
            "original_amount": "1250.00",
            "invoice_date": "2024-05-01",
            "due_date": "2024-05-31",
        }, format="json")

        assert response.status_code == 201
        assert response.data["current_amount"] == "1250.00"
        assert response.data["status"] == "overdue"

    def test_summary_as_of(self, owner_client, items):
        response = owner_client.get("/api/aging/summary/receivable/?as_of=2024-06-30")

        assert response.status_code == 200
        assert response.data["item_type"] == "receivable"
        assert response.data["total_count"] == 2
        assert response.data["total_amount"] == Decimal("4000.00")

    def test_unknown_item_type_is_404(self, owner_client):
        assert owner_client.get("/api/aging/summary/other/").status_code == 404

    def test_bad_as_of_is_400(self, owner_client):
        assert owner_client.get("/api/aging/summary/receivable/?as_of=yesterday").status_code == 400

    def test_priorities(self, owner_client, items):
        response = owner_client.get("/api/aging/priorities/receivable/?as_of=2024-06-30")
        assert [row["invoice_number"] for row in response.data] == ["A-2", "A-1"]

    def test_dso_dpo(self, owner_client, items):
        response = owner_client.get("/api/aging/dso-dpo/?as_of=2024-06-30")
        assert response.data["period_days"] == 90
        assert response.data["dso"] == 10.0
        assert response.data["dpo"] == 15.0

    def test_mark_paid_endpoint(self, owner_client, items):
        item = ArApItem.objects.get(invoice_number="A-1")
        response = owner_client.post(f"/api/aging/items/{item.id}/mark-paid/")
        assert response.status_code == 200
        assert response.data["status"] == "paid"

    def test_viewer_reads_but_cannot_recalculate(self, viewer_client, items):
        assert viewer_client.get("/api/aging/statistics/").status_code == 200
        assert viewer_client.post("/api/aging/recalculate/").status_code == 403
