# tests/test_ops.py
"""
Tests for health checks, metrics and API error formatting.
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from django.utils import timezone

from accounting.models import RecurringTransaction
from cashbox.commands import create_cashbox_transaction
from cashbox.models import Cashbox
from ops.health import HealthCheck


# =============================================================================
# Health
# =============================================================================

@pytest.mark.django_db
class TestHealth:

    @pytest.fixture(autouse=True)
    def no_broker(self, settings):
        settings.CELERY_BROKER_URL = "memory://"

    def test_live(self, client):
        response = client.get("/_health/live")
        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_ready(self, client):
        response = client.get("/_health/ready")
        assert response.status_code == 200
        assert response.json()["database"]["status"] == "healthy"

    def test_full_healthy(self, client):
        response = client.get("/_health/full")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["redis"]["status"] == "skipped"

    def test_ledger_consistent_after_commands(self, actor, main_cashbox):
        create_cashbox_transaction(actor, main_cashbox.id, "deposit", Decimal("100"))
        create_cashbox_transaction(actor, main_cashbox.id, "withdrawal", Decimal("40"))

        assert HealthCheck.check_cashbox_ledger()["status"] == "healthy"

    def test_ledger_mismatch_is_unhealthy(self, client, actor, main_cashbox):
        create_cashbox_transaction(actor, main_cashbox.id, "deposit", Decimal("100"))
        Cashbox.objects.filter(pk=main_cashbox.pk).update(current_balance=Decimal("5"))

        check = HealthCheck.check_cashbox_ledger()
        assert check["status"] == "unhealthy"
        assert check["mismatched_cashboxes"] == [main_cashbox.id]
        assert client.get("/_health/full").status_code == 503

    def test_recurring_backlog_degrades(self, settings, company, checking_account):
        settings.RECURRING_BACKLOG_THRESHOLD = 0
        RecurringTransaction.objects.create(
            company=company,
            account=checking_account,
            amount=Decimal("-10"),
            interval="monthly",
            start_date=date(2024, 1, 1),
            next_due_date=timezone.localdate() - timedelta(days=5),
        )

        check = HealthCheck.check_recurring_backlog()
        assert check == {"status": "degraded", "overdue_schedules": 1, "threshold": 0}


# =============================================================================
# Metrics
# =============================================================================

@pytest.mark.django_db
class TestMetrics:

    def test_exposes_domain_gauges(self, client, checking_account, main_cashbox):
        response = client.get("/_metrics/")

        assert response.status_code == 200
        text = response.content.decode()
        assert 'finbot_accounts_total{company_slug="test-sirketi",currency="TRY"} 1.0' in text
        assert "finbot_cashbox_balance" in text
        assert "finbot_request_duration_seconds" in text


# =============================================================================
# Error Formatting
# =============================================================================

@pytest.mark.django_db
class TestErrorMessages:

    def test_method_not_allowed(self, owner_client):
        response = owner_client.put("/api/cashbox/summary/", {}, format="json")
        assert response.status_code == 405
        assert response.data["detail"] == "PUT isteği desteklenmiyor."

    def test_invalid_token(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer bozuk")
        response = api_client.get("/api/accounts/")
        assert response.status_code == 401

    def test_custom_not_found_detail_kept(self, owner_client):
        response = owner_client.get("/api/cashbox/424242/")
        assert response.status_code == 404
        assert response.data["detail"] == "Kasa bulunamadı"

    def test_validation_errors_stay_field_keyed(self, owner_client):
        response = owner_client.post("/api/cashbox/", {}, format="json")
        assert response.status_code == 400
        assert "name" in response.data
