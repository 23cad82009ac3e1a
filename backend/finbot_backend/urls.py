from django.contrib import admin
from django.urls import include, path

from ops.urls import metrics_patterns

urlpatterns = [
    # Operations endpoints (no auth required)
    path("_health/", include("ops.urls")),
    path("_metrics/", include(metrics_patterns)),

    # Admin and API
    path("admin/", admin.site.urls),
    path("api/", include("accounts.urls")),
    path("api/", include("accounting.urls")),
    path("api/cashbox/", include("cashbox.urls")),
    path("api/aging/", include("aging.urls")),
    path("api/forecasting/", include("forecasting.urls")),
    path("api/export/", include("reports.urls")),
    path("api/audit/", include("audit.urls")),
]
