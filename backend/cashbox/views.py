# cashbox/views.py
"""
Thin views over cashbox/commands.py.

Every mutation response carries the Turkish success message returned by
the command.
"""

from django.http import Http404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from audit.serializers import AuditLogFilterSerializer, AuditLogSerializer
from audit.views import filter_audit_logs
from cashbox.commands import (
    NOT_FOUND,
    create_cashbox,
    create_cashbox_transaction,
    delete_cashbox,
    restore_cashbox,
    transfer_between_cashboxes,
    update_cashbox,
)
from cashbox.models import Cashbox
from cashbox.queries import cashbox_summary, filter_cashbox_transactions, list_cashboxes
from cashbox.serializers import (
    CashboxCreateSerializer,
    CashboxSerializer,
    CashboxTransactionCreateSerializer,
    CashboxTransactionFilterSerializer,
    CashboxTransactionSerializer,
    CashboxTransferSerializer,
    CashboxUpdateSerializer,
    ReasonSerializer,
)


def _failure(result):
    return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)


def _get_cashbox(actor, pk, include_deleted=False):
    qs = list_cashboxes(actor.company, include_deleted=include_deleted)
    cashbox = qs.filter(pk=pk).first()
    if not cashbox:
        raise Http404(NOT_FOUND)
    return cashbox


class CashboxListCreateView(APIView):
    """
    GET /api/cashbox/?include_deleted=true -> list cashboxes
    POST /api/cashbox/ -> create cashbox
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "cashbox.view")

        include_deleted = request.query_params.get("include_deleted", "").lower() in ("1", "true", "yes")
        cashboxes = list_cashboxes(actor.company, include_deleted=include_deleted)
        return Response(CashboxSerializer(cashboxes, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = CashboxCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_cashbox(actor, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)

        return Response(
            {"message": result.message, "cashbox": CashboxSerializer(result.data).data},
            status=status.HTTP_201_CREATED,
        )


class CashboxSummaryView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "cashbox.view")

        summary = cashbox_summary(actor.company)
        summary["total_balance"] = f"{summary['total_balance']:.2f}"
        return Response(summary)


class CashboxDetailView(APIView):
    """
    GET /api/cashbox/<pk>/
    PATCH /api/cashbox/<pk>/ -> update (optional "reason")
    DELETE /api/cashbox/<pk>/ -> soft delete (optional "reason")
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "cashbox.view")
        return Response(CashboxSerializer(_get_cashbox(actor, pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        _get_cashbox(actor, pk)

        input_serializer = CashboxUpdateSerializer(data=request.data, partial=True)
        input_serializer.is_valid(raise_exception=True)
        data = dict(input_serializer.validated_data)
        reason = data.pop("reason", "")

        result = update_cashbox(actor, pk, reason=reason, **data)
        if not result.success:
            return _failure(result)
        return Response({"message": result.message, "cashbox": CashboxSerializer(result.data).data})

    def delete(self, request, pk):
        actor = resolve_actor(request)
        _get_cashbox(actor, pk)

        input_serializer = ReasonSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = delete_cashbox(actor, pk, reason=input_serializer.validated_data["reason"])
        if not result.success:
            return _failure(result)
        return Response({"message": result.message})


class CashboxRestoreView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = ReasonSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = restore_cashbox(actor, pk, reason=input_serializer.validated_data["reason"])
        if not result.success:
            raise Http404(result.error)
        return Response({"message": result.message, "cashbox": CashboxSerializer(result.data).data})


class CashboxTransactionListCreateView(APIView):
    """
    GET /api/cashbox/<pk>/transactions/ -> ledger (limit, offset, transaction_type, dates)
    POST /api/cashbox/<pk>/transactions/ -> deposit or withdrawal
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "cashbox.view")
        cashbox = _get_cashbox(actor, pk)

        filters = CashboxTransactionFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        rows, total = filter_cashbox_transactions(cashbox, filters.validated_data)
        return Response({
            "results": CashboxTransactionSerializer(rows, many=True).data,
            "count": total,
        })

    def post(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = CashboxTransactionCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_cashbox_transaction(actor, pk, **input_serializer.validated_data)
        if not result.success:
            if result.error == NOT_FOUND:
                raise Http404(result.error)
            return _failure(result)

        txn = result.data
        return Response(
            {
                "message": result.message,
                "transaction": CashboxTransactionSerializer(txn).data,
                "current_balance": f"{txn.balance_after:.2f}",
            },
            status=status.HTTP_201_CREATED,
        )


class CashboxTransferView(APIView):
    """POST /api/cashbox/transfer/ -> move cash between two cashboxes."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = CashboxTransferSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = transfer_between_cashboxes(actor, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)

        data = result.data
        return Response(
            {
                "message": result.message,
                "out_transaction": CashboxTransactionSerializer(data["out_transaction"]).data,
                "in_transaction": CashboxTransactionSerializer(data["in_transaction"]).data,
                "from_balance": f"{data['from_cashbox'].current_balance:.2f}",
                "to_balance": f"{data['to_cashbox'].current_balance:.2f}",
            },
            status=status.HTTP_201_CREATED,
        )


class CashboxAuditLogView(APIView):
    """GET /api/cashbox/audit-logs/?cashbox_id=&action=&start_date=&end_date=&limit=&offset="""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "audit.view")

        filters = AuditLogFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = dict(filters.validated_data)

        params["cashbox_only"] = True

        logs, total = filter_audit_logs(actor.company, params)
        return Response({
            "results": AuditLogSerializer(logs, many=True).data,
            "count": total,
        })
