"""URL configuration for the AR/AP aging API (mounted at /api/aging/)."""

from django.urls import path

from .views import (
    AgingByCustomerView,
    AgingStatisticsView,
    AgingSummaryView,
    ArApItemDetailView,
    ArApItemListCreateView,
    ArApItemMarkPaidView,
    CollectionPrioritiesView,
    DaysOutstandingView,
    RecalculateAgingView,
)

app_name = "aging"

urlpatterns = [
    path("items/", ArApItemListCreateView.as_view(), name="item-list"),
    path("items/<int:pk>/", ArApItemDetailView.as_view(), name="item-detail"),
    path("items/<int:pk>/mark-paid/", ArApItemMarkPaidView.as_view(), name="item-mark-paid"),
    path("summary/<str:item_type>/", AgingSummaryView.as_view(), name="summary"),
    path("customers/<str:item_type>/", AgingByCustomerView.as_view(), name="customers"),
    path("statistics/", AgingStatisticsView.as_view(), name="statistics"),
    path("dso-dpo/", DaysOutstandingView.as_view(), name="dso-dpo"),
    path("priorities/<str:item_type>/", CollectionPrioritiesView.as_view(), name="priorities"),
    path("recalculate/", RecalculateAgingView.as_view(), name="recalculate"),
]
