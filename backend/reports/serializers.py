from rest_framework import serializers

from aging.models import ArApItem
from reports.exports import DATE_FORMATS, LOCALES, ExportFormat


class ExportQuerySerializer(serializers.Serializer):
    format = serializers.ChoiceField(choices=ExportFormat.CHOICES, default=ExportFormat.CSV)
    locale = serializers.ChoiceField(choices=LOCALES, required=False)
    date_format = serializers.ChoiceField(choices=list(DATE_FORMATS), required=False)
    show_currency = serializers.BooleanField(default=False)
    include_headers = serializers.BooleanField(default=True)

    # Dataset filters
    account_id = serializers.IntegerField(required=False)
    transaction_type = serializers.CharField(required=False)
    search = serializers.CharField(required=False)
    cashbox_id = serializers.IntegerField(required=False)
    item_type = serializers.ChoiceField(choices=ArApItem.ItemType.choices, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
