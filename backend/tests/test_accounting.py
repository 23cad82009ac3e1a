# tests/test_accounting.py
"""
Tests for bank accounts and transactions.

Tests cover:
- Income/expense posting and balance movement
- Virman (inter-account transfer): atomic, balance-checked, same currency
- Soft delete of accounts and its effect on schedules
- Tenant isolation and permission checks through the API
"""

import pytest
from datetime import date
from decimal import Decimal

from django.core.exceptions import PermissionDenied

from accounting.commands import (
    create_account,
    create_recurring_transaction,
    create_transaction,
    delete_account,
    delete_transaction,
    transfer_between_accounts,
    update_account,
)
from accounting.models import Account, RecurringTransaction, Transaction
from accounting.queries import balance_history
from audit.models import AuditLog


# =============================================================================
# Account Commands
# =============================================================================

@pytest.mark.django_db
class TestAccountCommands:

    def test_create_uses_company_currency(self, actor):
        result = create_account(actor, name="Maaş Hesabı", account_type="checking", bank_name="Akbank")

        assert result.success
        assert result.message == "Hesap başarıyla oluşturuldu"
        assert result.data.currency == "TRY"
        assert result.data.balance == Decimal("0.00")
        assert AuditLog.objects.filter(entity_type="account", action="create").count() == 1

    def test_invalid_type_rejected(self, actor):
        result = create_account(actor, name="X", account_type="wallet")
        assert not result.success
        assert result.error == "Geçersiz hesap tipi"

    def test_viewer_cannot_create(self, viewer_actor):
        with pytest.raises(PermissionDenied):
            create_account(viewer_actor, name="X", account_type="checking")

    def test_balance_is_not_editable(self, actor, checking_account):
        result = update_account(actor, checking_account.id, balance=Decimal("999999"), name="Yeni Ad")
        assert result.success
        checking_account.refresh_from_db()
        assert checking_account.name == "Yeni Ad"
        assert checking_account.balance == Decimal("1000.00")

    def test_currency_locked_after_transactions(self, actor, checking_account):
        create_transaction(actor, checking_account.id, "income", Decimal("10"))
        result = update_account(actor, checking_account.id, currency="usd")
        assert not result.success
        assert "para birimi" in result.error

    def test_currency_change_without_transactions(self, actor, savings_account):
        result = update_account(actor, savings_account.id, currency="eur")
        assert result.success
        assert result.data.currency == "EUR"

    def test_soft_delete_stops_schedules(self, actor, checking_account):
        recurring = create_recurring_transaction(
            actor,
            account_id=checking_account.id,
            amount=Decimal("10"),
            interval="daily",
            start_date=date(2024, 1, 1),
        ).data

        result = delete_account(actor, checking_account.id)

        assert result.success
        assert result.data["recurring_deactivated"] == 1
        checking_account.refresh_from_db()
        assert checking_account.is_deleted is True
        assert checking_account.deleted_at is not None
        assert RecurringTransaction.objects.get(pk=recurring.pk).is_active is False

    def test_other_company_account_not_found(self, actor, foreign_account):
        result = update_account(actor, foreign_account.id, name="Hack")
        assert not result.success
        assert result.error == "Hesap bulunamadı"


# =============================================================================
# Transaction Commands
# =============================================================================

@pytest.mark.django_db
class TestTransactionCommands:

    def test_income_increases_balance(self, actor, checking_account):
        result = create_transaction(actor, checking_account.id, "income", Decimal("250.50"), description="Satış")
        assert result.success
        assert result.data["balance"] == Decimal("1250.50")

    def test_expense_decreases_balance(self, actor, checking_account):
        result = create_transaction(actor, checking_account.id, "expense", Decimal("300"))
        assert result.data["balance"] == Decimal("700.00")

    def test_transfer_types_rejected(self, actor, checking_account):
        result = create_transaction(actor, checking_account.id, "transfer_in", Decimal("1"))
        assert not result.success

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_amount_rejected(self, actor, checking_account, amount):
        result = create_transaction(actor, checking_account.id, "income", amount)
        assert not result.success
        assert result.error == "Tutar sıfırdan büyük olmalıdır"

    def test_deleted_account_rejected(self, actor, checking_account):
        checking_account.is_deleted = True
        checking_account.save()
        result = create_transaction(actor, checking_account.id, "income", Decimal("1"))
        assert not result.success

    def test_delete_reverses_balance(self, actor, checking_account):
        txn = create_transaction(actor, checking_account.id, "expense", Decimal("100")).data["transaction"]

        result = delete_transaction(actor, txn.id)

        assert result.success
        assert result.data["balance"] == Decimal("1000.00")
        assert not Transaction.objects.filter(pk=txn.id).exists()

    def test_concurrent_delete_reverses_once(self, actor, checking_account, monkeypatch):
        txn = create_transaction(actor, checking_account.id, "expense", Decimal("100")).data["transaction"]
        original_lock = Account.objects.select_for_update
        competing = []
        started = []

        # Another request deletes the same row while this one waits for the account lock
        def lock_after_competing_delete(*args, **kwargs):
            if not started:
                started.append(True)
                competing.append(delete_transaction(actor, txn.id))
            return original_lock(*args, **kwargs)

        monkeypatch.setattr(Account.objects, "select_for_update", lock_after_competing_delete)

        result = delete_transaction(actor, txn.id)

        assert competing[0].success
        assert not result.success
        assert result.error == "İşlem bulunamadı"
        checking_account.refresh_from_db()
        assert checking_account.balance == Decimal("1000.00")
        assert AuditLog.objects.filter(entity_type="transaction", action=AuditLog.Action.DELETE).count() == 1

    def test_transfer_leg_cannot_be_deleted_alone(self, actor, checking_account, savings_account):
        out_leg = transfer_between_accounts(
            actor, checking_account.id, savings_account.id, Decimal("100"),
        ).data["out_transaction"]

        result = delete_transaction(actor, out_leg.id)
        assert not result.success
        assert result.error == "Virman işlemleri tek tek silinemez"

    def test_balance_history_reconstructs_days(self, actor, checking_account):
        today = date(2024, 5, 10)
        create_transaction(actor, checking_account.id, "income", Decimal("100"), date=date(2024, 5, 9))
        create_transaction(actor, checking_account.id, "expense", Decimal("50"), date=date(2024, 5, 10))
        checking_account.refresh_from_db()

        history = balance_history(checking_account, days=3, today=today)

        assert [row["date"] for row in history] == [date(2024, 5, 8), date(2024, 5, 9), date(2024, 5, 10)]
        assert [row["balance"] for row in history] == [Decimal("1000.00"), Decimal("1100.00"), Decimal("1050.00")]


# =============================================================================
# Virman
# =============================================================================

@pytest.mark.django_db
class TestVirman:

    def test_moves_money_and_pairs_legs(self, actor, checking_account, savings_account):
        result = transfer_between_accounts(
            actor, checking_account.id, savings_account.id, Decimal("400"), description="Birikim",
        )

        assert result.success
        assert result.message == "Virman başarılı"
        assert result.data["from_balance"] == Decimal("600.00")
        assert result.data["to_balance"] == Decimal("400.00")

        legs = Transaction.objects.filter(virman_pair_id=result.data["virman_pair_id"])
        assert sorted(legs.values_list("transaction_type", flat=True)) == ["transfer_in", "transfer_out"]
        assert all(leg.description == "Virman: Birikim" for leg in legs)

        entry = AuditLog.objects.get(action=AuditLog.Action.TRANSFER)
        assert entry.entity_id == str(result.data["virman_pair_id"])

    def test_default_description(self, actor, checking_account, savings_account):
        result = transfer_between_accounts(actor, checking_account.id, savings_account.id, Decimal("1"))
        assert result.data["out_transaction"].description == "Virman: Hesaplar arası transfer"

    def test_insufficient_balance_changes_nothing(self, actor, checking_account, savings_account):
        result = transfer_between_accounts(actor, checking_account.id, savings_account.id, Decimal("1000.01"))

        assert not result.success
        assert result.error == "Yetersiz bakiye"
        checking_account.refresh_from_db()
        savings_account.refresh_from_db()
        assert checking_account.balance == Decimal("1000.00")
        assert savings_account.balance == Decimal("0.00")
        assert Transaction.objects.count() == 0

    def test_exact_balance_allowed(self, actor, checking_account, savings_account):
        result = transfer_between_accounts(actor, checking_account.id, savings_account.id, Decimal("1000"))
        assert result.success
        assert result.data["from_balance"] == Decimal("0.00")

    def test_same_account_rejected(self, actor, checking_account):
        result = transfer_between_accounts(actor, checking_account.id, checking_account.id, Decimal("1"))
        assert result.error == "Aynı hesaba virman yapılamaz"

    def test_currency_mismatch_rejected(self, actor, checking_account, usd_account):
        result = transfer_between_accounts(actor, checking_account.id, usd_account.id, Decimal("1"))
        assert not result.success
        assert "Para birimleri" in result.error

    def test_foreign_target_rejected(self, actor, checking_account, foreign_account):
        result = transfer_between_accounts(actor, checking_account.id, foreign_account.id, Decimal("1"))
        assert result.error == "Hesap bulunamadı"
        foreign_account.refresh_from_db()
        assert foreign_account.balance == Decimal("750.00")

    def test_failure_inside_transfer_rolls_back(self, actor, checking_account, savings_account, monkeypatch):
        from accounting import commands

        def boom(*args, **kwargs):
            raise RuntimeError("audit down")

        monkeypatch.setattr(commands, "record_audit", boom)

        with pytest.raises(RuntimeError):
            transfer_between_accounts(actor, checking_account.id, savings_account.id, Decimal("100"))

        checking_account.refresh_from_db()
        savings_account.refresh_from_db()
        assert checking_account.balance == Decimal("1000.00")
        assert savings_account.balance == Decimal("0.00")
        assert Transaction.objects.count() == 0


# =============================================================================
# API
# =============================================================================

@pytest.mark.django_db
class TestAccountingApi:

    def test_create_account(self, owner_client):
        response = owner_client.post(
            "/api/accounts/",
            {"name": "İş Bankası TL", "account_type": "checking", "bank_name": "İş Bankası", "balance": "150.00"},
            format="json",
        )
        assert response.status_code == 201
        assert response.data["message"] == "Hesap başarıyla oluşturuldu"
        assert response.data["account"]["balance"] == "150.00"

    def test_list_excludes_deleted(self, owner_client, checking_account, savings_account):
        savings_account.is_deleted = True
        savings_account.save()

        response = owner_client.get("/api/accounts/")
        assert [row["id"] for row in response.data] == [checking_account.id]

        response = owner_client.get("/api/accounts/?include_deleted=true")
        assert len(response.data) == 2

    def test_other_company_account_is_404(self, owner_client, foreign_account):
        response = owner_client.get(f"/api/accounts/{foreign_account.id}/")
        assert response.status_code == 404
        assert response.data["detail"] == "Hesap bulunamadı"

    def test_delete_returns_204(self, owner_client, checking_account):
        response = owner_client.delete(f"/api/accounts/{checking_account.id}/")
        assert response.status_code == 204
        assert Account.objects.get(pk=checking_account.id).is_deleted

    def test_summary(self, owner_client, actor, checking_account):
        create_transaction(actor, checking_account.id, "income", Decimal("100"))
        response = owner_client.get(f"/api/accounts/{checking_account.id}/summary/")
        assert response.status_code == 200
        assert len(response.data["recent_transactions"]) == 1
        assert len(response.data["balance_history"]) == 30

    def test_post_transaction(self, owner_client, checking_account):
        response = owner_client.post(
            "/api/transactions/",
            {"account_id": checking_account.id, "transaction_type": "expense", "amount": "99.90"},
            format="json",
        )
        assert response.status_code == 201
        assert response.data["balance"] == "900.10"

    def test_transaction_list_paginates_and_filters(self, owner_client, actor, checking_account, savings_account):
        for i in range(3):
            create_transaction(actor, checking_account.id, "income", Decimal("10"), description=f"Satış {i}")
        create_transaction(actor, savings_account.id, "income", Decimal("10"), description="Faiz")

        response = owner_client.get(f"/api/transactions/?account_id={checking_account.id}&page_size=2")

        assert response.data["count"] == 3
        assert response.data["total_pages"] == 2
        assert len(response.data["results"]) == 2

        response = owner_client.get("/api/transactions/?search=faiz")
        assert response.data["count"] == 1

    def test_transfer_endpoint(self, owner_client, checking_account, savings_account):
        response = owner_client.post(
            "/api/transactions/transfer/",
            {"from_account_id": checking_account.id, "to_account_id": savings_account.id, "amount": "250"},
            format="json",
        )
        assert response.status_code == 201
        assert response.data["message"] == "Virman başarılı"
        assert response.data["from_balance"] == "750.00"
        assert response.data["to_balance"] == "250.00"

    def test_transfer_insufficient_is_400(self, owner_client, checking_account, savings_account):
        response = owner_client.post(
            "/api/transactions/transfer/",
            {"from_account_id": savings_account.id, "to_account_id": checking_account.id, "amount": "1"},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["detail"] == "Yetersiz bakiye"

    def test_viewer_cannot_post(self, viewer_client, checking_account):
        response = viewer_client.post(
            "/api/transactions/",
            {"account_id": checking_account.id, "transaction_type": "income", "amount": "1"},
            format="json",
        )
        assert response.status_code == 403

    def test_viewer_can_read(self, viewer_client, checking_account):
        response = viewer_client.get("/api/accounts/")
        assert response.status_code == 200
        assert len(response.data) == 1
