"""Input validation and output formatting for the cashbox API."""

from rest_framework import serializers

from accounting.serializers import MONEY_Q, money_field
from cashbox.models import Cashbox, CashboxTransaction


class CashboxSerializer(serializers.ModelSerializer):
    total_transactions = serializers.IntegerField(read_only=True, default=None)
    last_transaction_date = serializers.DateTimeField(read_only=True, default=None)

    class Meta:
        model = Cashbox
        fields = [
            "id",
            "name",
            "description",
            "location",
            "currency",
            "current_balance",
            "is_active",
            "is_deleted",
            "deleted_at",
            "total_transactions",
            "last_transaction_date",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CashboxCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    location = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    currency = serializers.CharField(max_length=3, min_length=3, required=False)
    is_active = serializers.BooleanField(required=False, default=True)


class CashboxUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    currency = serializers.CharField(max_length=3, min_length=3, required=False)
    is_active = serializers.BooleanField(required=False)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class CashboxTransactionSerializer(serializers.ModelSerializer):
    cashbox_name = serializers.CharField(source="cashbox.name", read_only=True)
    created_by_email = serializers.EmailField(source="created_by.email", read_only=True, default=None)

    class Meta:
        model = CashboxTransaction
        fields = [
            "id",
            "cashbox",
            "cashbox_name",
            "transaction_type",
            "amount",
            "description",
            "category",
            "reference",
            "balance_after",
            "transfer_to_cashbox",
            "transfer_from_cashbox",
            "created_by_email",
            "created_at",
        ]
        read_only_fields = fields


class CashboxTransactionCreateSerializer(serializers.Serializer):
    transaction_type = serializers.ChoiceField(choices=[
        CashboxTransaction.TransactionType.DEPOSIT,
        CashboxTransaction.TransactionType.WITHDRAWAL,
    ])
    amount = money_field(min_value=MONEY_Q)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")


class CashboxTransactionFilterSerializer(serializers.Serializer):
    transaction_type = serializers.ChoiceField(choices=CashboxTransaction.TransactionType.choices, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=500, default=50)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)


class CashboxTransferSerializer(serializers.Serializer):
    from_cashbox_id = serializers.IntegerField()
    to_cashbox_id = serializers.IntegerField()
    amount = money_field(min_value=MONEY_Q)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
