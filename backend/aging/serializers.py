"""Serializers for the AR/AP aging API."""

from rest_framework import serializers

from accounting.serializers import MONEY_Q, money_field
from aging.analysis import risk_level
from aging.models import ArApItem


class ArApItemSerializer(serializers.ModelSerializer):
    risk_level = serializers.SerializerMethodField()

    class Meta:
        model = ArApItem
        fields = [
            "id",
            "item_type",
            "invoice_number",
            "customer_supplier",
            "original_amount",
            "current_amount",
            "currency",
            "invoice_date",
            "due_date",
            "aging_days",
            "aging_bucket",
            "status",
            "risk_level",
            "description",
            "paid_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_risk_level(self, obj):
        return risk_level(obj.aging_days)


class ArApItemCreateSerializer(serializers.Serializer):
    item_type = serializers.ChoiceField(choices=ArApItem.ItemType.choices)
    invoice_number = serializers.CharField(max_length=100)
    customer_supplier = serializers.CharField(max_length=255)
    original_amount = money_field(min_value=MONEY_Q)
    current_amount = money_field(min_value=0, required=False)
    currency = serializers.CharField(max_length=3, min_length=3, required=False)
    invoice_date = serializers.DateField()
    due_date = serializers.DateField()
    description = serializers.CharField(required=False, allow_blank=True, default="")


class ArApItemUpdateSerializer(serializers.Serializer):
    invoice_number = serializers.CharField(max_length=100, required=False)
    customer_supplier = serializers.CharField(max_length=255, required=False)
    current_amount = money_field(min_value=0, required=False)
    invoice_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False)
    description = serializers.CharField(required=False, allow_blank=True)


class ArApItemFilterSerializer(serializers.Serializer):
    item_type = serializers.ChoiceField(choices=ArApItem.ItemType.choices, required=False)
    status = serializers.ChoiceField(choices=ArApItem.Status.choices, required=False)
    aging_bucket = serializers.CharField(required=False)
    customer_supplier = serializers.CharField(required=False)
