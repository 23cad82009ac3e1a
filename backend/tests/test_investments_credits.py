# tests/test_investments_credits.py
"""
Tests for investments and credits.

Tests cover:
- Buying a holding debits the account through an expense transaction
- Valuation with and without a current price
- Credit payments: capped at the remainder, close the credit at zero
- Soft delete of credits, tenant isolation and permissions through the API
"""

import pytest
from datetime import date
from decimal import Decimal

from django.core.exceptions import PermissionDenied

from accounting.commands import (
    create_credit,
    create_investment,
    delete_credit,
    delete_investment,
    make_credit_payment,
    update_credit,
    update_investment,
)
from accounting.models import Account, Credit, Investment, Transaction
from accounting.queries import credit_summary, overdue_credits, portfolio_summary
from audit.models import AuditLog


def buy(actor, account, **overrides):
    kwargs = {
        "account_id": account.id,
        "title": "ASELSAN",
        "investment_type": "stock",
        "symbol": "asels",
        "quantity": Decimal("10"),
        "purchase_price": Decimal("25.50"),
    }
    kwargs.update(overrides)
    return create_investment(actor, **kwargs)


# =============================================================================
# Investment Commands
# =============================================================================

@pytest.mark.django_db
class TestInvestmentCommands:

    def test_purchase_debits_account(self, actor, checking_account):
        result = buy(actor, checking_account, purchase_date=date(2024, 3, 1))

        assert result.success
        assert result.message == "Yatırım başarıyla oluşturuldu"
        investment = result.data["investment"]
        assert investment.symbol == "ASELS"
        assert investment.currency == "TRY"
        assert investment.cost_basis == Decimal("255.00")
        assert result.data["balance"] == Decimal("745.00")

        txn = result.data["transaction"]
        assert investment.purchase_transaction_id == txn.id
        assert txn.transaction_type == Transaction.TransactionType.EXPENSE
        assert txn.amount == Decimal("255.00")
        assert txn.description == "ASELSAN yatırım alımı"
        assert txn.category == "investment"
        assert txn.date == date(2024, 3, 1)

        checking_account.refresh_from_db()
        assert checking_account.balance == Decimal("745.00")
        assert AuditLog.objects.filter(entity_type="investment", action="create").count() == 1

    def test_valued_at_cost_without_current_price(self, actor, checking_account):
        investment = buy(actor, checking_account).data["investment"]
        assert investment.current_value == Decimal("255.00")
        assert investment.gain_loss == Decimal("0.00")

    def test_currency_must_match_account(self, actor, checking_account):
        result = buy(actor, checking_account, currency="usd")

        assert not result.success
        assert result.error == "Yatırım para birimi hesap para birimiyle aynı olmalıdır"
        checking_account.refresh_from_db()
        assert checking_account.balance == Decimal("1000.00")
        assert not Transaction.objects.exists()

    def test_non_positive_quantity_rejected(self, actor, checking_account):
        result = buy(actor, checking_account, quantity=Decimal("0"))
        assert not result.success
        assert result.error == "Miktar pozitif olmalıdır"

    def test_invalid_type_rejected(self, actor, checking_account):
        result = buy(actor, checking_account, investment_type="nft")
        assert not result.success
        assert result.error == "Geçersiz yatırım tipi"

    def test_other_company_account_rejected(self, actor, foreign_account):
        result = buy(actor, foreign_account)
        assert not result.success
        assert result.error == "Hesap bulunamadı"

    def test_deleted_account_rejected(self, actor, checking_account):
        checking_account.is_deleted = True
        checking_account.save()

        result = buy(actor, checking_account)
        assert not result.success
        assert result.error == "Hesap bulunamadı"

    def test_update_current_price_moves_gain(self, actor, checking_account):
        investment = buy(actor, checking_account).data["investment"]

        result = update_investment(
            actor, investment.id, current_price=Decimal("30"), quantity=Decimal("999"),
        )

        assert result.success
        assert result.message == "Yatırım güncellendi"
        investment.refresh_from_db()
        assert investment.quantity == Decimal("10")
        assert investment.current_value == Decimal("300.00")
        assert investment.gain_loss == Decimal("45.00")

    def test_delete_keeps_purchase_transaction(self, actor, checking_account):
        created = buy(actor, checking_account).data
        investment = created["investment"]

        result = delete_investment(actor, investment.id)

        assert result.success
        assert not Investment.objects.filter(pk=investment.id).exists()
        assert Transaction.objects.filter(pk=created["transaction"].id).exists()
        checking_account.refresh_from_db()
        assert checking_account.balance == Decimal("745.00")
        assert AuditLog.objects.filter(entity_type="investment", action="delete").count() == 1

    def test_viewer_cannot_buy(self, viewer_actor, checking_account):
        with pytest.raises(PermissionDenied):
            buy(viewer_actor, checking_account)

    def test_portfolio_summary(self, actor, checking_account, usd_account):
        first = buy(actor, checking_account).data["investment"]
        update_investment(actor, first.id, current_price=Decimal("20"))
        buy(
            actor, checking_account, title="Altın Fonu", investment_type="fund",
            quantity=Decimal("2"), purchase_price=Decimal("100"),
        )
        buy(
            actor, usd_account, title="BTC", investment_type="crypto",
            quantity=Decimal("0.01"), purchase_price=Decimal("20000"),
        )

        summary = portfolio_summary(actor.company)

        assert summary["count"] == 3
        assert summary["by_type"] == {"stock": 1, "fund": 1, "crypto": 1}
        assert summary["by_currency"]["TRY"] == {
            "cost_basis": Decimal("455.00"),
            "current_value": Decimal("400.00"),
            "gain_loss": Decimal("-55.00"),
        }
        assert summary["by_currency"]["USD"]["cost_basis"] == Decimal("200.00")


# =============================================================================
# Credit Commands
# =============================================================================

@pytest.mark.django_db
class TestCreditCommands:

    def _credit(self, actor, account=None, **overrides):
        kwargs = {
            "title": "İhtiyaç Kredisi",
            "credit_type": "loan",
            "amount": Decimal("600"),
            "account_id": account.id if account else None,
            "institution": "Ziraat",
            "start_date": date(2024, 1, 1),
            "due_date": date(2024, 12, 31),
        }
        kwargs.update(overrides)
        result = create_credit(actor, **kwargs)
        assert result.success, result.error
        return result.data

    def test_create_defaults_remaining_to_amount(self, actor, checking_account):
        credit = self._credit(actor, checking_account)

        assert credit.remaining_amount == Decimal("600.00")
        assert credit.currency == "TRY"
        assert credit.status == Credit.Status.ACTIVE
        assert AuditLog.objects.filter(entity_type="credit", action="create").count() == 1

    def test_remaining_above_amount_rejected(self, actor):
        result = create_credit(
            actor, title="X", credit_type="loan", amount=Decimal("100"), remaining_amount=Decimal("150"),
        )
        assert not result.success
        assert result.error == "Kalan tutar 0 ile kredi tutarı arasında olmalıdır"

    def test_account_currency_must_match(self, actor, usd_account):
        result = create_credit(
            actor, title="X", credit_type="loan", amount=Decimal("100"),
            account_id=usd_account.id, currency="TRY",
        )
        assert not result.success
        assert result.error == "Kredi ve hesap para birimleri farklı"

    def test_payment_reduces_remaining_and_balance(self, actor, checking_account):
        credit = self._credit(actor, checking_account)

        result = make_credit_payment(actor, credit.id, Decimal("200"), date=date(2024, 2, 1))

        assert result.success
        assert result.message == "Ödeme kaydedildi"
        assert result.data["payment_amount"] == Decimal("200.00")
        assert result.data["balance"] == Decimal("800.00")

        credit.refresh_from_db()
        assert credit.remaining_amount == Decimal("400.00")
        assert credit.status == Credit.Status.ACTIVE
        assert credit.last_payment_date == date(2024, 2, 1)
        assert credit.last_payment_amount == Decimal("200.00")

        txn = result.data["transaction"]
        assert txn.transaction_type == Transaction.TransactionType.EXPENSE
        assert txn.description == "Ödeme: İhtiyaç Kredisi"
        assert txn.category == "Kredi Ödemesi"

        entry = AuditLog.objects.get(entity_type="credit", action="update")
        assert entry.reason == "Kredi ödemesi"

    def test_overpayment_is_capped_and_closes_credit(self, actor, checking_account):
        credit = self._credit(actor, checking_account)

        result = make_credit_payment(actor, credit.id, Decimal("900"))

        assert result.success
        assert result.message == "Kredi kapandı"
        assert result.data["payment_amount"] == Decimal("600.00")
        credit.refresh_from_db()
        assert credit.remaining_amount == Decimal("0.00")
        assert credit.status == Credit.Status.PAID_OFF
        checking_account.refresh_from_db()
        assert checking_account.balance == Decimal("400.00")

    def test_paid_off_credit_rejects_payment(self, actor, checking_account):
        credit = self._credit(actor, checking_account)
        make_credit_payment(actor, credit.id, Decimal("600"))

        result = make_credit_payment(actor, credit.id, Decimal("10"))

        assert not result.success
        assert result.error == "Kredi zaten kapanmış"
        assert Transaction.objects.filter(category="Kredi Ödemesi").count() == 1

    def test_payment_requires_linked_account(self, actor):
        credit = self._credit(actor)

        result = make_credit_payment(actor, credit.id, Decimal("10"))

        assert not result.success
        assert result.error == "Ödeme için krediye bağlı bir hesap gerekli"

    def test_payment_from_deleted_account_rejected(self, actor, checking_account):
        credit = self._credit(actor, checking_account)
        checking_account.is_deleted = True
        checking_account.save()

        result = make_credit_payment(actor, credit.id, Decimal("10"))

        assert not result.success
        assert result.error == "Ödeme için krediye bağlı bir hesap gerekli"
        credit.refresh_from_db()
        assert credit.remaining_amount == Decimal("600.00")

    def test_update_does_not_touch_amounts(self, actor, checking_account):
        credit = self._credit(actor, checking_account)

        result = update_credit(
            actor, credit.id, institution="Garanti", remaining_amount=Decimal("1"),
        )

        assert result.success
        assert result.message == "Kredi güncellendi"
        credit.refresh_from_db()
        assert credit.institution == "Garanti"
        assert credit.remaining_amount == Decimal("600.00")

    def test_update_due_before_start_rejected(self, actor):
        credit = self._credit(actor)
        result = update_credit(actor, credit.id, due_date=date(2023, 6, 1))
        assert not result.success
        assert result.error == "Vade tarihi başlangıç tarihinden önce olamaz"

    def test_delete_is_soft(self, actor, checking_account):
        credit = self._credit(actor, checking_account)

        result = delete_credit(actor, credit.id)

        assert result.success
        credit.refresh_from_db()
        assert not credit.is_active
        assert credit.deleted_at is not None

        again = make_credit_payment(actor, credit.id, Decimal("10"))
        assert not again.success
        assert again.error == "Kredi bulunamadı"

    def test_other_company_credit_not_found(self, actor, outsider_actor):
        credit = self._credit(outsider_actor)
        result = delete_credit(actor, credit.id)
        assert not result.success
        assert result.error == "Kredi bulunamadı"

    def test_viewer_cannot_pay(self, actor, viewer_actor, checking_account):
        credit = self._credit(actor, checking_account)
        with pytest.raises(PermissionDenied):
            make_credit_payment(viewer_actor, credit.id, Decimal("10"))

    def test_overdue_and_summary(self, actor, checking_account, usd_account):
        late = self._credit(actor, checking_account, due_date=date(2024, 3, 1))
        self._credit(actor, checking_account, title="Kart", credit_type="credit_card", due_date=date(2024, 9, 1))
        closed = self._credit(actor, checking_account, title="Eski", due_date=date(2024, 2, 1))
        make_credit_payment(actor, closed.id, Decimal("600"))
        self._credit(actor, usd_account, title="USD Kredi", amount=Decimal("50"), currency="USD")

        today = date(2024, 6, 1)
        assert [c.id for c in overdue_credits(actor.company, today=today)] == [late.id]

        summary = credit_summary(actor.company, today=today)
        assert summary["total"] == 4
        assert summary["active"] == 3
        assert summary["paid_off"] == 1
        assert summary["overdue"] == 1
        assert summary["remaining_by_currency"] == {
            "TRY": Decimal("1200.00"),
            "USD": Decimal("50.00"),
        }


# =============================================================================
# API
# =============================================================================

@pytest.mark.django_db
class TestInvestmentCreditApi:

    def test_buy_investment(self, owner_client, checking_account):
        response = owner_client.post(
            "/api/investments/",
            {
                "account_id": checking_account.id,
                "title": "Hisse Fonu",
                "investment_type": "fund",
                "quantity": "4",
                "purchase_price": "50",
            },
            format="json",
        )
        assert response.status_code == 201
        assert response.data["message"] == "Yatırım başarıyla oluşturuldu"
        assert response.data["investment"]["cost_basis"] == "200.00"
        assert response.data["balance"] == "800.00"

    def test_buy_rejects_zero_quantity(self, owner_client, checking_account):
        response = owner_client.post(
            "/api/investments/",
            {
                "account_id": checking_account.id,
                "title": "X",
                "investment_type": "stock",
                "quantity": "0",
                "purchase_price": "1",
            },
            format="json",
        )
        assert response.status_code == 400
        assert "quantity" in response.data

    def test_portfolio_summary_endpoint(self, owner_client, actor, checking_account):
        buy(actor, checking_account)
        response = owner_client.get("/api/investments/summary/")
        assert response.status_code == 200
        assert response.data["count"] == 1
        assert response.data["by_currency"]["TRY"]["cost_basis"] == "255.00"

    def test_other_company_investment_is_404(self, owner_client, outsider_actor):
        account = Account.objects.create(
            company=outsider_actor.company, name="Dış", account_type="checking",
            balance=Decimal("500"), currency="TRY",
        )
        investment = buy(outsider_actor, account).data["investment"]

        response = owner_client.get(f"/api/investments/{investment.id}/")
        assert response.status_code == 404
        assert response.data["detail"] == "Yatırım bulunamadı"

    def test_viewer_cannot_post_investment(self, viewer_client, checking_account):
        response = viewer_client.post(
            "/api/investments/",
            {
                "account_id": checking_account.id,
                "title": "X",
                "investment_type": "stock",
                "quantity": "1",
                "purchase_price": "1",
            },
            format="json",
        )
        assert response.status_code == 403

    def test_viewer_can_list_investments(self, viewer_client, actor, checking_account):
        buy(actor, checking_account)
        response = viewer_client.get("/api/investments/")
        assert response.status_code == 200
        assert len(response.data) == 1

    def test_credit_lifecycle(self, owner_client, checking_account):
        response = owner_client.post(
            "/api/credits/",
            {
                "title": "Taşıt Kredisi",
                "credit_type": "loan",
                "amount": "300.00",
                "account_id": checking_account.id,
            },
            format="json",
        )
        assert response.status_code == 201
        credit_id = response.data["id"]
        assert response.data["remaining_amount"] == "300.00"

        response = owner_client.post(
            f"/api/credits/{credit_id}/payment/", {"amount": "100.00"}, format="json",
        )
        assert response.status_code == 200
        assert response.data["message"] == "Ödeme kaydedildi"
        assert response.data["credit"]["remaining_amount"] == "200.00"
        assert response.data["balance"] == "900.00"

        response = owner_client.delete(f"/api/credits/{credit_id}/")
        assert response.status_code == 204

        response = owner_client.get("/api/credits/")
        assert response.data == []

    def test_credit_remaining_above_amount_is_400(self, owner_client):
        response = owner_client.post(
            "/api/credits/",
            {"title": "X", "credit_type": "loan", "amount": "100.00", "remaining_amount": "150.00"},
            format="json",
        )
        assert response.status_code == 400
        assert "remaining_amount" in response.data

    def test_payment_on_missing_credit_is_404(self, owner_client):
        response = owner_client.post("/api/credits/999999/payment/", {"amount": "10.00"}, format="json")
        assert response.status_code == 404

    def test_payment_without_account_is_400(self, owner_client, actor):
        credit = create_credit(actor, title="Kart", credit_type="credit_card", amount=Decimal("50")).data
        response = owner_client.post(f"/api/credits/{credit.id}/payment/", {"amount": "10.00"}, format="json")
        assert response.status_code == 400
        assert response.data["detail"] == "Ödeme için krediye bağlı bir hesap gerekli"

    def test_credit_summary_endpoint(self, owner_client, actor, checking_account):
        create_credit(
            actor, title="Geciken", credit_type="loan", amount=Decimal("100"),
            account_id=checking_account.id, start_date=date(2020, 1, 1), due_date=date(2020, 6, 1),
        )
        response = owner_client.get("/api/credits/summary/")
        assert response.status_code == 200
        assert response.data["overdue"] == 1
        assert response.data["remaining_by_currency"] == {"TRY": "100.00"}
        assert response.data["overdue_credits"][0]["is_overdue"] is True

    def test_viewer_cannot_post_credit(self, viewer_client):
        response = viewer_client.post(
            "/api/credits/",
            {"title": "X", "credit_type": "loan", "amount": "10.00"},
            format="json",
        )
        assert response.status_code == 403
