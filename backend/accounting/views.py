# accounting/views.py
"""
Thin views that delegate to the commands layer.

Views handle: HTTP parsing, authentication, response formatting.
Commands handle: business logic, validation, audit trail.

All mutations (create, update, delete) go through commands. Views never
call .save() on models.
"""

from django.http import Http404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from .commands import (
    # Account commands
    create_account,
    update_account,
    delete_account,
    # Transaction commands
    create_transaction,
    delete_transaction,
    transfer_between_accounts,
    # Recurring commands
    create_recurring_transaction,
    update_recurring_transaction,
    delete_recurring_transaction,
    toggle_recurring_transaction,
    process_recurring_transactions,
    # Investment commands
    create_investment,
    update_investment,
    delete_investment,
    # Credit commands
    create_credit,
    update_credit,
    delete_credit,
    make_credit_payment,
)
from .models import Account, Credit, Investment, RecurringTransaction, Transaction
from .queries import (
    account_summary,
    credit_summary,
    filter_transactions,
    list_credits,
    list_investments,
    list_recurring,
    overdue_credits,
    portfolio_summary,
    recurring_stats,
    upcoming_recurring,
)
from .serializers import (
    AccountSerializer,
    AccountCreateSerializer,
    AccountUpdateSerializer,
    TransactionSerializer,
    TransactionCreateSerializer,
    TransactionFilterSerializer,
    TransferSerializer,
    RecurringTransactionSerializer,
    RecurringTransactionCreateSerializer,
    RecurringTransactionUpdateSerializer,
    InvestmentSerializer,
    InvestmentCreateSerializer,
    InvestmentUpdateSerializer,
    CreditSerializer,
    CreditCreateSerializer,
    CreditUpdateSerializer,
    CreditPaymentSerializer,
)


def _failure(result):
    return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)


def _parse_bool(value):
    if value is None or value == "":
        return None
    return str(value).lower() in ("1", "true", "yes")


# =============================================================================
# Account Views
# =============================================================================

class AccountListCreateView(APIView):
    """
    GET /api/accounts/ -> list accounts for active company
    POST /api/accounts/ -> create account in active company
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        accounts = Account.objects.filter(company=actor.company)
        if not _parse_bool(request.query_params.get("include_deleted")):
            accounts = accounts.filter(is_deleted=False)
        if request.query_params.get("account_type"):
            accounts = accounts.filter(account_type=request.query_params["account_type"])

        return Response(AccountSerializer(accounts, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = AccountCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_account(actor, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)

        return Response(
            {"message": result.message, "account": AccountSerializer(result.data).data},
            status=status.HTTP_201_CREATED,
        )


class AccountDetailView(APIView):
    """
    GET /api/accounts/<pk>/ -> retrieve account
    PATCH /api/accounts/<pk>/ -> update account
    DELETE /api/accounts/<pk>/ -> soft delete account
    """
    permission_classes = [IsAuthenticated]

    def get_object(self, actor, pk):
        account = Account.objects.filter(company=actor.company, pk=pk, is_deleted=False).first()
        if not account:
            raise Http404("Hesap bulunamadı")
        return account

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "accounts.view")
        return Response(AccountSerializer(self.get_object(actor, pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        input_serializer = AccountUpdateSerializer(data=request.data, partial=True)
        input_serializer.is_valid(raise_exception=True)

        result = update_account(actor, pk, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)
        return Response(AccountSerializer(result.data).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        result = delete_account(actor, pk)
        if not result.success:
            return _failure(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AccountSummaryView(APIView):
    """GET /api/accounts/<pk>/summary/ -> recent transactions + 30-day balance history."""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "accounts.view")

        account = Account.objects.filter(company=actor.company, pk=pk, is_deleted=False).first()
        if not account:
            raise Http404("Hesap bulunamadı")

        summary = account_summary(account)
        return Response({
            "account": AccountSerializer(account).data,
            "recent_transactions": TransactionSerializer(summary["recent_transactions"], many=True).data,
            "balance_history": [
                {"date": row["date"], "balance": f"{row['balance']:.2f}"}
                for row in summary["balance_history"]
            ],
            "total_inflow": f"{summary['total_inflow']:.2f}",
            "total_outflow": f"{summary['total_outflow']:.2f}",
        })


# =============================================================================
# Transaction Views
# =============================================================================

class TransactionListCreateView(APIView):
    """
    GET /api/transactions/ -> paginated, filtered list
    POST /api/transactions/ -> record income or expense
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "transactions.view")

        filters = TransactionFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data

        qs = filter_transactions(actor.company, params)
        total = qs.count()
        page, page_size = params["page"], params["page_size"]
        start = (page - 1) * page_size
        rows = qs[start:start + page_size]

        return Response({
            "results": TransactionSerializer(rows, many=True).data,
            "count": total,
            "page": page,
            "page_size": page_size,
            "total_pages": (total + page_size - 1) // page_size,
        })

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = TransactionCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_transaction(actor, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)

        return Response(
            {
                "message": result.message,
                "transaction": TransactionSerializer(result.data["transaction"]).data,
                "balance": f"{result.data['balance']:.2f}",
            },
            status=status.HTTP_201_CREATED,
        )


class TransactionDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, actor, pk):
        txn = Transaction.objects.filter(company=actor.company, pk=pk).select_related("account").first()
        if not txn:
            raise Http404("İşlem bulunamadı")
        return txn

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "transactions.view")
        return Response(TransactionSerializer(self.get_object(actor, pk)).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        result = delete_transaction(actor, pk)
        if not result.success:
            return _failure(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TransferView(APIView):
    """POST /api/transactions/transfer/ -> virman between two accounts."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = TransferSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = transfer_between_accounts(actor, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)

        data = result.data
        return Response(
            {
                "message": result.message,
                "virman_pair_id": str(data["virman_pair_id"]),
                "from_balance": f"{data['from_balance']:.2f}",
                "to_balance": f"{data['to_balance']:.2f}",
                "out_transaction": TransactionSerializer(data["out_transaction"]).data,
                "in_transaction": TransactionSerializer(data["in_transaction"]).data,
            },
            status=status.HTTP_201_CREATED,
        )


# =============================================================================
# Recurring Transaction Views
# =============================================================================

class RecurringListCreateView(APIView):
    """
    GET /api/recurring/?is_active=true -> schedules ordered by next due date
    POST /api/recurring/ -> create schedule
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "recurring.view")

        items = list_recurring(actor.company, is_active=_parse_bool(request.query_params.get("is_active")))
        return Response(RecurringTransactionSerializer(items, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = RecurringTransactionCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_recurring_transaction(actor, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)
        return Response(RecurringTransactionSerializer(result.data).data, status=status.HTTP_201_CREATED)


class RecurringDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, actor, pk):
        recurring = RecurringTransaction.objects.filter(
            company=actor.company, pk=pk,
        ).select_related("account").first()
        if not recurring:
            raise Http404("Tekrarlayan işlem bulunamadı")
        return recurring

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "recurring.view")
        return Response(RecurringTransactionSerializer(self.get_object(actor, pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        input_serializer = RecurringTransactionUpdateSerializer(data=request.data, partial=True)
        input_serializer.is_valid(raise_exception=True)

        result = update_recurring_transaction(actor, pk, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)
        return Response(RecurringTransactionSerializer(result.data).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        result = delete_recurring_transaction(actor, pk)
        if not result.success:
            return _failure(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class RecurringToggleView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        result = toggle_recurring_transaction(actor, pk)
        if not result.success:
            raise Http404(result.error)
        return Response(RecurringTransactionSerializer(result.data).data)


class RecurringUpcomingView(APIView):
    """GET /api/recurring/upcoming/?days=30"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "recurring.view")

        try:
            days = max(1, min(int(request.query_params.get("days", 30)), 366))
        except ValueError:
            return Response({"detail": "Geçersiz gün sayısı"}, status=status.HTTP_400_BAD_REQUEST)

        items = upcoming_recurring(actor.company, days=days)
        return Response(RecurringTransactionSerializer(items, many=True).data)


class RecurringStatsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "recurring.view")

        stats = recurring_stats(actor.company)
        stats["total_amount"] = f"{stats['total_amount']:.2f}"
        stats["monthly_equivalent"] = f"{stats['monthly_equivalent']:.2f}"
        return Response(stats)


class RecurringProcessView(APIView):
    """POST /api/recurring/process/ -> spawn due transactions for the company now."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        summary = process_recurring_transactions(actor=actor)
        return Response(summary)


def _totals_as_text(by_currency):
    return {
        currency: {key: f"{value:.2f}" for key, value in totals.items()}
        for currency, totals in by_currency.items()
    }


# =============================================================================
# Investment Views
# =============================================================================

class InvestmentListCreateView(APIView):
    """
    GET /api/investments/?investment_type=&account_id= -> list holdings
    POST /api/investments/ -> buy a holding from an account
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "investments.view")

        investments = list_investments(actor.company, request.query_params)
        return Response(InvestmentSerializer(investments, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = InvestmentCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_investment(actor, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)

        return Response(
            {
                "message": result.message,
                "investment": InvestmentSerializer(result.data["investment"]).data,
                "transaction": TransactionSerializer(result.data["transaction"]).data,
                "balance": f"{result.data['balance']:.2f}",
            },
            status=status.HTTP_201_CREATED,
        )


class InvestmentDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, actor, pk):
        investment = Investment.objects.filter(
            company=actor.company, pk=pk,
        ).select_related("account").first()
        if not investment:
            raise Http404("Yatırım bulunamadı")
        return investment

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "investments.view")
        return Response(InvestmentSerializer(self.get_object(actor, pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        input_serializer = InvestmentUpdateSerializer(data=request.data, partial=True)
        input_serializer.is_valid(raise_exception=True)

        result = update_investment(actor, pk, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)
        return Response(InvestmentSerializer(result.data).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        result = delete_investment(actor, pk)
        if not result.success:
            return _failure(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PortfolioSummaryView(APIView):
    """GET /api/investments/summary/ -> cost, value and gain per currency."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "investments.view")

        summary = portfolio_summary(actor.company)
        summary["by_currency"] = _totals_as_text(summary["by_currency"])
        return Response(summary)


# =============================================================================
# Credit Views
# =============================================================================

class CreditListCreateView(APIView):
    """
    GET /api/credits/?status=&credit_type= -> list open credits
    POST /api/credits/ -> register a credit
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "credits.view")

        credits = list_credits(actor.company, request.query_params)
        return Response(CreditSerializer(credits, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = CreditCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_credit(actor, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)
        return Response(CreditSerializer(result.data).data, status=status.HTTP_201_CREATED)


class CreditDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, actor, pk):
        credit = Credit.objects.filter(
            company=actor.company, pk=pk, is_active=True,
        ).select_related("account").first()
        if not credit:
            raise Http404("Kredi bulunamadı")
        return credit

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "credits.view")
        return Response(CreditSerializer(self.get_object(actor, pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        input_serializer = CreditUpdateSerializer(data=request.data, partial=True)
        input_serializer.is_valid(raise_exception=True)

        result = update_credit(actor, pk, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)
        return Response(CreditSerializer(result.data).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        result = delete_credit(actor, pk)
        if not result.success:
            return _failure(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CreditPaymentView(APIView):
    """POST /api/credits/<pk>/payment/ -> pay down from the linked account."""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = CreditPaymentSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = make_credit_payment(actor, pk, **input_serializer.validated_data)
        if not result.success:
            if result.error == "Kredi bulunamadı":
                raise Http404(result.error)
            return _failure(result)

        return Response({
            "message": result.message,
            "credit": CreditSerializer(result.data["credit"]).data,
            "transaction": TransactionSerializer(result.data["transaction"]).data,
            "payment_amount": f"{result.data['payment_amount']:.2f}",
            "balance": f"{result.data['balance']:.2f}",
        })


class CreditSummaryView(APIView):
    """GET /api/credits/summary/ -> outstanding debt and overdue credits."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "credits.view")

        summary = credit_summary(actor.company)
        summary["remaining_by_currency"] = {
            currency: f"{value:.2f}" for currency, value in summary["remaining_by_currency"].items()
        }
        summary["overdue_credits"] = CreditSerializer(overdue_credits(actor.company), many=True).data
        return Response(summary)
