"""URL configuration for the cashbox API (mounted at /api/cashbox/)."""

from django.urls import path

from .views import (
    CashboxAuditLogView,
    CashboxDetailView,
    CashboxListCreateView,
    CashboxRestoreView,
    CashboxSummaryView,
    CashboxTransactionListCreateView,
    CashboxTransferView,
)

app_name = "cashbox"

urlpatterns = [
    path("", CashboxListCreateView.as_view(), name="cashbox-list"),
    path("summary/", CashboxSummaryView.as_view(), name="cashbox-summary"),
    path("transfer/", CashboxTransferView.as_view(), name="cashbox-transfer"),
    path("audit-logs/", CashboxAuditLogView.as_view(), name="cashbox-audit-logs"),
    path("<int:pk>/", CashboxDetailView.as_view(), name="cashbox-detail"),
    path("<int:pk>/restore/", CashboxRestoreView.as_view(), name="cashbox-restore"),
    path("<int:pk>/transactions/", CashboxTransactionListCreateView.as_view(), name="cashbox-transactions"),
]
