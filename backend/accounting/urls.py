# accounting/urls.py
"""
URL configuration for the bookkeeping API.

Endpoints:
- /accounts/ - Bank accounts
- /transactions/ - Income, expense and transfers (virman)
- /recurring/ - Recurring transaction schedules
- /investments/ - Holdings bought from accounts
- /credits/ - Loans and card debt with payments
"""

from django.urls import path

from .views import (
    # Accounts
    AccountListCreateView,
    AccountDetailView,
    AccountSummaryView,
    # Transactions
    TransactionListCreateView,
    TransactionDetailView,
    TransferView,
    # Recurring
    RecurringListCreateView,
    RecurringDetailView,
    RecurringToggleView,
    RecurringUpcomingView,
    RecurringStatsView,
    RecurringProcessView,
    # Investments
    InvestmentListCreateView,
    InvestmentDetailView,
    PortfolioSummaryView,
    # Credits
    CreditListCreateView,
    CreditDetailView,
    CreditPaymentView,
    CreditSummaryView,
)

app_name = "accounting"

urlpatterns = [
    # ==========================================================================
    # Accounts
    # ==========================================================================
    path("accounts/", AccountListCreateView.as_view(), name="account-list"),
    path("accounts/<int:pk>/", AccountDetailView.as_view(), name="account-detail"),
    path("accounts/<int:pk>/summary/", AccountSummaryView.as_view(), name="account-summary"),

    # ==========================================================================
    # Transactions
    # ==========================================================================
    path("transactions/", TransactionListCreateView.as_view(), name="transaction-list"),
    path("transactions/transfer/", TransferView.as_view(), name="transaction-transfer"),
    path("transactions/<int:pk>/", TransactionDetailView.as_view(), name="transaction-detail"),

    # ==========================================================================
    # Recurring Transactions
    # ==========================================================================
    path("recurring/", RecurringListCreateView.as_view(), name="recurring-list"),
    path("recurring/upcoming/", RecurringUpcomingView.as_view(), name="recurring-upcoming"),
    path("recurring/stats/", RecurringStatsView.as_view(), name="recurring-stats"),
    path("recurring/process/", RecurringProcessView.as_view(), name="recurring-process"),
    path("recurring/<int:pk>/", RecurringDetailView.as_view(), name="recurring-detail"),
    path("recurring/<int:pk>/toggle/", RecurringToggleView.as_view(), name="recurring-toggle"),

    # ==========================================================================
    # Investments
    # ==========================================================================
    path("investments/", InvestmentListCreateView.as_view(), name="investment-list"),
    path("investments/summary/", PortfolioSummaryView.as_view(), name="investment-summary"),
    path("investments/<int:pk>/", InvestmentDetailView.as_view(), name="investment-detail"),

    # ==========================================================================
    # Credits
    # ==========================================================================
    path("credits/", CreditListCreateView.as_view(), name="credit-list"),
    path("credits/summary/", CreditSummaryView.as_view(), name="credit-summary"),
    path("credits/<int:pk>/", CreditDetailView.as_view(), name="credit-detail"),
    path("credits/<int:pk>/payment/", CreditPaymentView.as_view(), name="credit-payment"),
]
