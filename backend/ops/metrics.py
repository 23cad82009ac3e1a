"""
Prometheus metrics endpoint.

Exposes application metrics in Prometheus format for scraping.

Metrics exposed:
- finbot_accounts_total: Active accounts by company and currency
- finbot_cashbox_balance: Current cashbox balance by company and cashbox
- finbot_recurring_due: Active recurring schedules due today or earlier
- finbot_aging_outstanding: Unpaid AR/AP amount by company, type and bucket
- finbot_request_duration_seconds: HTTP request duration histogram
"""
import logging
import re
import time

from django.db.models import Count, Sum
from django.http import HttpResponse
from django.utils import timezone
from django.views import View
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Gauge,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

ACCOUNTS_TOTAL = Gauge(
    "finbot_accounts_total",
    "Number of active accounts",
    ["company_slug", "currency"],
)

CASHBOX_BALANCE = Gauge(
    "finbot_cashbox_balance",
    "Current cashbox balance",
    ["company_slug", "cashbox"],
)

RECURRING_DUE = Gauge(
    "finbot_recurring_due",
    "Active recurring schedules with next_due_date on or before today",
    ["company_slug"],
)

AGING_OUTSTANDING = Gauge(
    "finbot_aging_outstanding",
    "Unpaid receivable/payable amount",
    ["company_slug", "item_type", "bucket"],
)

REQUEST_DURATION = Histogram(
    "finbot_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

ACTIVE_REQUESTS = Gauge(
    "finbot_active_requests",
    "Number of requests currently being processed",
)


def collect_metrics():
    """Collect current metrics values."""
    from accounting.models import Account, RecurringTransaction
    from aging.models import ArApItem
    from cashbox.models import Cashbox

    try:
        rows = (
            Account.objects.filter(is_deleted=False)
            .values("company__slug", "currency")
            .annotate(count=Count("id"))
        )
        for row in rows:
            ACCOUNTS_TOTAL.labels(
                company_slug=row["company__slug"],
                currency=row["currency"],
            ).set(row["count"])

        for cashbox in Cashbox.objects.filter(is_deleted=False).select_related("company"):
            CASHBOX_BALANCE.labels(
                company_slug=cashbox.company.slug,
                cashbox=cashbox.name,
            ).set(float(cashbox.current_balance))

        due = (
            RecurringTransaction.objects.filter(
                is_active=True,
                next_due_date__lte=timezone.localdate(),
            )
            .values("company__slug")
            .annotate(count=Count("id"))
        )
        for row in due:
            RECURRING_DUE.labels(company_slug=row["company__slug"]).set(row["count"])

        outstanding = (
            ArApItem.objects.exclude(status=ArApItem.Status.PAID)
            .values("company__slug", "item_type", "aging_bucket")
            .annotate(total=Sum("current_amount"))
        )
        for row in outstanding:
            AGING_OUTSTANDING.labels(
                company_slug=row["company__slug"],
                item_type=row["item_type"],
                bucket=row["aging_bucket"],
            ).set(float(row["total"] or 0))

    except Exception as e:
        logger.error(f"Error collecting metrics: {e}")


def get_prometheus_response():
    """Generate Prometheus metrics response."""
    try:
        collect_metrics()
        output = generate_latest()
        return HttpResponse(output, content_type=CONTENT_TYPE_LATEST)

    except Exception as e:
        logger.error(f"Error generating metrics: {e}")
        return HttpResponse(
            f"# Error generating metrics: {e}\n",
            content_type="text/plain",
            status=500,
        )


class MetricsView(View):
    """
    Prometheus metrics endpoint.

    Exposes metrics in Prometheus format at /_metrics.
    Should be protected in production (internal network only).
    """

    def get(self, request):
        return get_prometheus_response()


def track_request_metrics(get_response):
    """
    Middleware to track request duration metrics.

    Add to MIDDLEWARE after SecurityMiddleware:
        "ops.metrics.track_request_metrics",
    """

    def middleware(request):
        start = time.time()
        ACTIVE_REQUESTS.inc()
        status = 500

        try:
            response = get_response(request)
            status = response.status_code
            return response
        finally:
            ACTIVE_REQUESTS.dec()
            duration = time.time() - start

            # Normalize endpoint for cardinality control
            endpoint = re.sub(r"/\d+/", "/{id}/", request.path)

            REQUEST_DURATION.labels(
                method=request.method,
                endpoint=endpoint[:50],
                status=f"{status // 100}xx",
            ).observe(duration)

    return middleware
