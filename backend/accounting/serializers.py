# accounting/serializers.py
"""
Serializers for the bookkeeping API.

These serializers are used for:
1. Input validation
2. Output formatting

The actual business logic happens in commands.py.
"""

from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from .models import Account, Credit, Investment, RecurringTransaction, Transaction


MONEY_Q = Decimal("0.01")


def money_field(**kwargs):
    return serializers.DecimalField(max_digits=15, decimal_places=2, **kwargs)


# =============================================================================
# Account Serializers
# =============================================================================

class AccountSerializer(serializers.ModelSerializer):
    display_name = serializers.SerializerMethodField()

    class Meta:
        model = Account
        fields = [
            "id",
            "public_id",
            "bank_name",
            "name",
            "display_name",
            "account_type",
            "balance",
            "currency",
            "is_deleted",
            "deleted_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_display_name(self, obj):
        return str(obj)


class AccountCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    bank_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    account_type = serializers.ChoiceField(choices=Account.AccountType.choices)
    balance = money_field(required=False, default=Decimal("0.00"))
    currency = serializers.CharField(max_length=3, min_length=3, required=False)


class AccountUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    bank_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    account_type = serializers.ChoiceField(choices=Account.AccountType.choices, required=False)
    currency = serializers.CharField(max_length=3, min_length=3, required=False)


# =============================================================================
# Transaction Serializers
# =============================================================================

class TransactionSerializer(serializers.ModelSerializer):
    account_name = serializers.CharField(source="account.name", read_only=True)
    signed_amount = money_field(read_only=True)

    class Meta:
        model = Transaction
        fields = [
            "id",
            "public_id",
            "account",
            "account_name",
            "transaction_type",
            "amount",
            "signed_amount",
            "description",
            "category",
            "date",
            "virman_pair_id",
            "recurring",
            "created_at",
        ]
        read_only_fields = fields


class TransactionCreateSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    transaction_type = serializers.ChoiceField(choices=Transaction.TransactionType.choices)
    amount = money_field(min_value=MONEY_Q)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    date = serializers.DateField(required=False)


class TransferSerializer(serializers.Serializer):
    from_account_id = serializers.IntegerField()
    to_account_id = serializers.IntegerField()
    amount = money_field(min_value=MONEY_Q)
    description = serializers.CharField(max_length=400, required=False, allow_blank=True, default="")
    date = serializers.DateField(required=False)

    def validate(self, attrs):
        if attrs["from_account_id"] == attrs["to_account_id"]:
            raise serializers.ValidationError("Aynı hesaba virman yapılamaz")
        return attrs


class TransactionFilterSerializer(serializers.Serializer):
    account_id = serializers.IntegerField(required=False)
    transaction_type = serializers.ChoiceField(choices=Transaction.TransactionType.choices, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    page_size = serializers.IntegerField(required=False, min_value=1, max_value=200, default=50)


# =============================================================================
# Recurring Transaction Serializers
# =============================================================================

class RecurringTransactionSerializer(serializers.ModelSerializer):
    account_name = serializers.CharField(source="account.name", read_only=True)
    account_type = serializers.CharField(source="account.account_type", read_only=True)

    class Meta:
        model = RecurringTransaction
        fields = [
            "id",
            "account",
            "account_name",
            "account_type",
            "amount",
            "description",
            "category",
            "interval",
            "interval_count",
            "start_date",
            "end_date",
            "next_due_date",
            "last_processed",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RecurringTransactionCreateSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    amount = money_field()
    interval = serializers.ChoiceField(choices=RecurringTransaction.Interval.choices)
    interval_count = serializers.IntegerField(min_value=1, default=1)
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        end_date = attrs.get("end_date")
        if end_date and end_date < attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "Bitiş tarihi başlangıç tarihinden önce olamaz"})
        return attrs


class RecurringTransactionUpdateSerializer(serializers.Serializer):
    account_id = serializers.IntegerField(required=False)
    amount = money_field(required=False)
    interval = serializers.ChoiceField(choices=RecurringTransaction.Interval.choices, required=False)
    interval_count = serializers.IntegerField(min_value=1, required=False)
    end_date = serializers.DateField(required=False, allow_null=True)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)


# =============================================================================
# Investment Serializers
# =============================================================================

class InvestmentSerializer(serializers.ModelSerializer):
    account_name = serializers.CharField(source="account.name", read_only=True)
    cost_basis = money_field(read_only=True)
    current_value = money_field(read_only=True)
    gain_loss = money_field(read_only=True)

    class Meta:
        model = Investment
        fields = [
            "id",
            "public_id",
            "account",
            "account_name",
            "title",
            "investment_type",
            "symbol",
            "quantity",
            "purchase_price",
            "current_price",
            "currency",
            "category",
            "risk_level",
            "purchase_date",
            "purchase_transaction",
            "cost_basis",
            "current_value",
            "gain_loss",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


def _price_field(**kwargs):
    return serializers.DecimalField(max_digits=15, decimal_places=4, **kwargs)


class InvestmentCreateSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    title = serializers.CharField(max_length=255)
    investment_type = serializers.ChoiceField(choices=Investment.InvestmentType.choices)
    symbol = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    quantity = serializers.DecimalField(max_digits=20, decimal_places=6, min_value=Decimal("0.000001"))
    purchase_price = _price_field(min_value=Decimal("0.0001"))
    current_price = _price_field(min_value=Decimal("0.0001"), required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, min_length=3, required=False)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    risk_level = serializers.ChoiceField(
        choices=Investment.RiskLevel.choices, required=False, default=Investment.RiskLevel.MEDIUM,
    )
    purchase_date = serializers.DateField(required=False)


class InvestmentUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False)
    investment_type = serializers.ChoiceField(choices=Investment.InvestmentType.choices, required=False)
    symbol = serializers.CharField(max_length=20, required=False, allow_blank=True)
    current_price = _price_field(min_value=Decimal("0.0001"), required=False, allow_null=True)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    risk_level = serializers.ChoiceField(choices=Investment.RiskLevel.choices, required=False)


# =============================================================================
# Credit Serializers
# =============================================================================

class CreditSerializer(serializers.ModelSerializer):
    account_name = serializers.CharField(source="account.name", read_only=True, default=None)
    is_overdue = serializers.SerializerMethodField()

    class Meta:
        model = Credit
        fields = [
            "id",
            "public_id",
            "account",
            "account_name",
            "title",
            "description",
            "credit_type",
            "institution",
            "amount",
            "remaining_amount",
            "currency",
            "interest_rate",
            "minimum_payment",
            "start_date",
            "due_date",
            "status",
            "is_overdue",
            "last_payment_date",
            "last_payment_amount",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_is_overdue(self, obj):
        return obj.is_overdue(self.context.get("today") or timezone.localdate())


class CreditCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    credit_type = serializers.ChoiceField(choices=Credit.CreditType.choices)
    amount = money_field(min_value=MONEY_Q)
    remaining_amount = money_field(min_value=Decimal("0.00"), required=False)
    account_id = serializers.IntegerField(required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, min_length=3, required=False)
    interest_rate = serializers.DecimalField(
        max_digits=7, decimal_places=4, min_value=Decimal("0"), required=False, allow_null=True,
    )
    minimum_payment = money_field(min_value=Decimal("0.00"), required=False, allow_null=True)
    institution = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    start_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        remaining = attrs.get("remaining_amount")
        if remaining is not None and remaining > attrs["amount"]:
            raise serializers.ValidationError({"remaining_amount": "Kalan tutar kredi tutarını aşamaz"})
        return attrs


class CreditUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    credit_type = serializers.ChoiceField(choices=Credit.CreditType.choices, required=False)
    institution = serializers.CharField(max_length=255, required=False, allow_blank=True)
    account_id = serializers.IntegerField(required=False, allow_null=True)
    interest_rate = serializers.DecimalField(
        max_digits=7, decimal_places=4, min_value=Decimal("0"), required=False, allow_null=True,
    )
    minimum_payment = money_field(min_value=Decimal("0.00"), required=False, allow_null=True)
    due_date = serializers.DateField(required=False, allow_null=True)


class CreditPaymentSerializer(serializers.Serializer):
    amount = money_field(min_value=MONEY_Q)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    date = serializers.DateField(required=False)
