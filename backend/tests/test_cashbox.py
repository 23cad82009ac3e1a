# tests/test_cashbox.py
"""
Tests for the cashbox ledger.

Tests cover:
- Deposits and withdrawals keep balance_after in step with current_balance
- Transfers write two ledger rows and a single audit entry
- Exactly one audit entry per successful mutation, none on failure
- Soft delete / restore and the audit log endpoint
"""

import pytest
from decimal import Decimal

from django.core.exceptions import PermissionDenied

from audit.models import AuditLog
from cashbox.commands import (
    create_cashbox,
    create_cashbox_transaction,
    delete_cashbox,
    restore_cashbox,
    transfer_between_cashboxes,
    update_cashbox,
)
from cashbox.models import Cashbox, CashboxTransaction


def _deposit(actor, cashbox, amount):
    result = create_cashbox_transaction(actor, cashbox.id, "deposit", Decimal(amount))
    assert result.success, result.error
    return result.data


# =============================================================================
# Cashbox Commands
# =============================================================================

@pytest.mark.django_db
class TestCashboxCommands:

    def test_create_starts_at_zero(self, actor):
        result = create_cashbox(actor, name="Depo Kasası", location="Gebze")

        assert result.success
        assert result.data.current_balance == Decimal("0.00")
        assert result.data.currency == "TRY"
        entry = AuditLog.objects.get(entity_type="cashbox", action="create")
        assert entry.cashbox_id == result.data.id

    def test_viewer_cannot_create(self, viewer_actor):
        with pytest.raises(PermissionDenied):
            create_cashbox(viewer_actor, name="X")

    def test_update_records_reason(self, actor, main_cashbox):
        result = update_cashbox(actor, main_cashbox.id, reason="Yer değişti", location="Kadıköy")

        assert result.success
        entry = AuditLog.objects.get(entity_type="cashbox", action="update")
        assert entry.reason == "Yer değişti"

    def test_currency_locked_after_ledger_rows(self, actor, main_cashbox):
        _deposit(actor, main_cashbox, "10")
        result = update_cashbox(actor, main_cashbox.id, currency="USD")
        assert not result.success
        assert result.error == "İşlem görmüş kasanın para birimi değiştirilemez"

    def test_soft_delete_and_restore(self, actor, main_cashbox):
        _deposit(actor, main_cashbox, "40")

        assert delete_cashbox(actor, main_cashbox.id, reason="Kapandı").success
        main_cashbox.refresh_from_db()
        assert main_cashbox.is_deleted
        assert CashboxTransaction.objects.filter(cashbox=main_cashbox).count() == 1

        result = restore_cashbox(actor, main_cashbox.id)
        assert result.success
        assert result.data.is_deleted is False
        assert result.data.current_balance == Decimal("40.00")

    def test_restore_live_cashbox_fails(self, actor, main_cashbox):
        result = restore_cashbox(actor, main_cashbox.id)
        assert result.error == "Kasa bulunamadı"


# =============================================================================
# Ledger
# =============================================================================

@pytest.mark.django_db
class TestLedger:

    def test_deposit_then_withdraw(self, actor, main_cashbox):
        deposit = _deposit(actor, main_cashbox, "500")
        withdrawal = create_cashbox_transaction(
            actor, main_cashbox.id, "withdrawal", Decimal("120.25"), description="Kırtasiye",
        ).data

        assert deposit.balance_after == Decimal("500.00")
        assert withdrawal.balance_after == Decimal("379.75")
        main_cashbox.refresh_from_db()
        assert main_cashbox.current_balance == Decimal("379.75")

    def test_overdraw_fails_without_side_effects(self, actor, main_cashbox):
        _deposit(actor, main_cashbox, "50")
        audit_count = AuditLog.objects.count()

        result = create_cashbox_transaction(actor, main_cashbox.id, "withdrawal", Decimal("50.01"))

        assert not result.success
        assert result.error == "Yetersiz bakiye"
        main_cashbox.refresh_from_db()
        assert main_cashbox.current_balance == Decimal("50.00")
        assert CashboxTransaction.objects.count() == 1
        assert AuditLog.objects.count() == audit_count

    def test_inactive_cashbox_rejects(self, actor, main_cashbox):
        main_cashbox.is_active = False
        main_cashbox.save()
        result = create_cashbox_transaction(actor, main_cashbox.id, "deposit", Decimal("1"))
        assert result.error == "Pasif kasaya işlem yapılamaz"

    def test_transfer_types_go_through_transfer(self, actor, main_cashbox):
        result = create_cashbox_transaction(actor, main_cashbox.id, "transfer_in", Decimal("1"))
        assert not result.success

    def test_one_audit_entry_per_mutation(self, actor, main_cashbox):
        _deposit(actor, main_cashbox, "100")
        txn = create_cashbox_transaction(actor, main_cashbox.id, "withdrawal", Decimal("30")).data

        entries = AuditLog.objects.filter(cashbox_transaction__isnull=False).order_by("id")
        assert [e.action for e in entries] == ["deposit", "withdrawal"]
        assert entries.last().cashbox_transaction_id == txn.id
        assert entries.last().old_values["current_balance"] == "100.00"
        assert entries.last().new_values["current_balance"] == "70.00"

    def test_latest_balance_after_matches_balance(self, actor, main_cashbox):
        for amount in ("10", "20", "30"):
            _deposit(actor, main_cashbox, amount)
        create_cashbox_transaction(actor, main_cashbox.id, "withdrawal", Decimal("15"))

        main_cashbox.refresh_from_db()
        latest = CashboxTransaction.objects.filter(cashbox=main_cashbox).order_by("-created_at", "-id").first()
        assert latest.balance_after == main_cashbox.current_balance == Decimal("45.00")


# =============================================================================
# Transfers
# =============================================================================

@pytest.mark.django_db
class TestCashboxTransfer:

    def test_transfer_moves_cash(self, actor, main_cashbox, branch_cashbox):
        _deposit(actor, main_cashbox, "300")

        result = transfer_between_cashboxes(actor, main_cashbox.id, branch_cashbox.id, Decimal("120"))

        assert result.success
        out_txn = result.data["out_transaction"]
        in_txn = result.data["in_transaction"]
        assert out_txn.transaction_type == "transfer_out"
        assert out_txn.transfer_to_cashbox_id == branch_cashbox.id
        assert in_txn.transfer_from_cashbox_id == main_cashbox.id
        assert out_txn.balance_after == Decimal("180.00")
        assert in_txn.balance_after == Decimal("120.00")
        assert AuditLog.objects.filter(action="transfer").count() == 1

    def test_default_descriptions_name_the_other_cashbox(self, actor, main_cashbox, branch_cashbox):
        _deposit(actor, main_cashbox, "10")
        result = transfer_between_cashboxes(actor, main_cashbox.id, branch_cashbox.id, Decimal("5"))
        assert branch_cashbox.name in result.data["out_transaction"].description
        assert main_cashbox.name in result.data["in_transaction"].description

    def test_same_cashbox(self, actor, main_cashbox):
        result = transfer_between_cashboxes(actor, main_cashbox.id, main_cashbox.id, Decimal("1"))
        assert result.error == "Aynı kasaya transfer yapılamaz"

    def test_currency_mismatch(self, actor, main_cashbox):
        usd_box = create_cashbox(actor, name="Döviz Kasası", currency="USD").data
        _deposit(actor, main_cashbox, "10")

        result = transfer_between_cashboxes(actor, main_cashbox.id, usd_box.id, Decimal("5"))

        assert result.error == "Para birimleri farklı kasalar arasında transfer edilemez"

    @pytest.mark.parametrize("inactive", ["source", "target"])
    def test_inactive_cashbox_blocks_transfer(self, actor, main_cashbox, branch_cashbox, inactive):
        _deposit(actor, main_cashbox, "100")
        closed = main_cashbox if inactive == "source" else branch_cashbox
        Cashbox.objects.filter(pk=closed.pk).update(is_active=False)

        result = transfer_between_cashboxes(actor, main_cashbox.id, branch_cashbox.id, Decimal("50"))

        assert result.error == "Pasif kasaya işlem yapılamaz"
        main_cashbox.refresh_from_db()
        branch_cashbox.refresh_from_db()
        assert main_cashbox.current_balance == Decimal("100.00")
        assert branch_cashbox.current_balance == Decimal("0.00")
        assert not AuditLog.objects.filter(action="transfer").exists()

    def test_insufficient(self, actor, main_cashbox, branch_cashbox):
        result = transfer_between_cashboxes(actor, main_cashbox.id, branch_cashbox.id, Decimal("1"))
        assert result.error == "Yetersiz bakiye"
        assert CashboxTransaction.objects.count() == 0

    def test_other_company_cashbox(self, actor, outsider_actor, main_cashbox):
        foreign_box = create_cashbox(outsider_actor, name="Yabancı Kasa").data
        _deposit(actor, main_cashbox, "10")

        result = transfer_between_cashboxes(actor, main_cashbox.id, foreign_box.id, Decimal("5"))

        assert result.error == "Kasa bulunamadı veya erişim yetkiniz yok"
        assert Cashbox.objects.get(pk=foreign_box.id).current_balance == Decimal("0.00")


# =============================================================================
# API
# =============================================================================

@pytest.mark.django_db
class TestCashboxApi:

    def test_create_and_list(self, owner_client):
        response = owner_client.post("/api/cashbox/", {"name": "Mağaza Kasası"}, format="json")
        assert response.status_code == 201
        assert response.data["cashbox"]["current_balance"] == "0.00"

        response = owner_client.get("/api/cashbox/")
        assert [row["name"] for row in response.data] == ["Mağaza Kasası"]

    def test_deposit_endpoint(self, owner_client, main_cashbox):
        response = owner_client.post(
            f"/api/cashbox/{main_cashbox.id}/transactions/",
            {"transaction_type": "deposit", "amount": "75.50", "description": "Günlük satış"},
            format="json",
        )
        assert response.status_code == 201
        assert response.data["current_balance"] == "75.50"

    def test_withdraw_insufficient_is_400(self, owner_client, main_cashbox):
        response = owner_client.post(
            f"/api/cashbox/{main_cashbox.id}/transactions/",
            {"transaction_type": "withdrawal", "amount": "1"},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["detail"] == "Yetersiz bakiye"

    def test_unknown_cashbox_is_404(self, owner_client):
        response = owner_client.post(
            "/api/cashbox/999999/transactions/",
            {"transaction_type": "deposit", "amount": "1"},
            format="json",
        )
        assert response.status_code == 404

    def test_ledger_listing(self, owner_client, actor, main_cashbox):
        for amount in ("1", "2", "3"):
            _deposit(actor, main_cashbox, amount)

        response = owner_client.get(f"/api/cashbox/{main_cashbox.id}/transactions/?limit=2")

        assert response.data["count"] == 3
        assert len(response.data["results"]) == 2

    def test_transfer_endpoint(self, owner_client, actor, main_cashbox, branch_cashbox):
        _deposit(actor, main_cashbox, "100")

        response = owner_client.post(
            "/api/cashbox/transfer/",
            {"from_cashbox_id": main_cashbox.id, "to_cashbox_id": branch_cashbox.id, "amount": "40"},
            format="json",
        )

        assert response.status_code == 201
        assert response.data["from_balance"] == "60.00"
        assert response.data["to_balance"] == "40.00"

    def test_delete_then_restore(self, owner_client, main_cashbox):
        response = owner_client.delete(f"/api/cashbox/{main_cashbox.id}/", {"reason": "Test"}, format="json")
        assert response.status_code == 200
        assert owner_client.get(f"/api/cashbox/{main_cashbox.id}/").status_code == 404

        response = owner_client.post(f"/api/cashbox/{main_cashbox.id}/restore/", {}, format="json")
        assert response.status_code == 200

    def test_summary(self, owner_client, actor, main_cashbox, branch_cashbox):
        _deposit(actor, main_cashbox, "10")
        _deposit(actor, branch_cashbox, "5")

        response = owner_client.get("/api/cashbox/summary/")

        assert response.data["total_cashboxes"] == 2
        assert response.data["total_balance"] == "15.00"

    def test_audit_logs_filtered_by_cashbox(self, owner_client, actor, main_cashbox, branch_cashbox):
        _deposit(actor, main_cashbox, "10")
        _deposit(actor, branch_cashbox, "5")

        response = owner_client.get(f"/api/cashbox/audit-logs/?cashbox_id={main_cashbox.id}")

        assert response.status_code == 200
        assert response.data["count"] == 1
        assert response.data["results"][0]["action"] == "deposit"

    def test_viewer_cannot_read_audit_logs(self, viewer_client):
        assert viewer_client.get("/api/cashbox/audit-logs/").status_code == 403

    def test_auditor_reads_audit_logs(self, auditor_client, actor, main_cashbox):
        _deposit(actor, main_cashbox, "10")
        response = auditor_client.get("/api/cashbox/audit-logs/")
        assert response.status_code == 200
        assert response.data["count"] == 1

    def test_viewer_cannot_deposit(self, viewer_client, main_cashbox):
        response = viewer_client.post(
            f"/api/cashbox/{main_cashbox.id}/transactions/",
            {"transaction_type": "deposit", "amount": "1"},
            format="json",
        )
        assert response.status_code == 403
