"""URL configuration for exports (mounted at /api/export/)."""

from django.urls import path

from .views import ExportView

app_name = "reports"

urlpatterns = [
    path("<slug:dataset>/", ExportView.as_view(), name="export"),
]
