from rest_framework import serializers

from audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source="user.email", read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "action",
            "entity_type",
            "entity_id",
            "cashbox",
            "cashbox_transaction",
            "user",
            "user_email",
            "old_values",
            "new_values",
            "changes",
            "reason",
            "ip_address",
            "user_agent",
            "created_at",
        ]
        read_only_fields = fields


class AuditLogFilterSerializer(serializers.Serializer):
    cashbox_id = serializers.IntegerField(required=False)
    action = serializers.ChoiceField(choices=AuditLog.Action.choices, required=False)
    entity_type = serializers.CharField(required=False, max_length=50)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=500, default=50)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)
