# audit/views.py
"""
Audit trail API views.

All endpoints require authentication, the ``audit.view`` permission, and
are scoped to the actor's company.
"""

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from audit.models import AuditLog
from audit.serializers import AuditLogFilterSerializer, AuditLogSerializer


def filter_audit_logs(company, params: dict):
    """
    Apply list filters to the company's audit logs.

    Returns (page, total) ordered newest first.
    """
    qs = AuditLog.objects.filter(company=company).select_related("user")

    if params.get("cashbox_id"):
        qs = qs.filter(cashbox_id=params["cashbox_id"])
    elif params.get("cashbox_only"):
        qs = qs.filter(cashbox__isnull=False)
    if params.get("action"):
        qs = qs.filter(action=params["action"])
    if params.get("entity_type"):
        qs = qs.filter(entity_type=params["entity_type"])
    if params.get("start_date"):
        qs = qs.filter(created_at__date__gte=params["start_date"])
    if params.get("end_date"):
        qs = qs.filter(created_at__date__lte=params["end_date"])

    total = qs.count()
    offset = params.get("offset", 0)
    limit = params.get("limit", 50)
    return qs.order_by("-created_at", "-id")[offset:offset + limit], total


class AuditLogListView(APIView):
    """
    GET /api/audit/ -> list audit logs

    Query params: cashbox_id, action, entity_type, start_date, end_date,
    limit (default 50), offset.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "audit.view")

        filters = AuditLogFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        logs, total = filter_audit_logs(actor.company, filters.validated_data)
        return Response({
            "results": AuditLogSerializer(logs, many=True).data,
            "count": total,
        })
