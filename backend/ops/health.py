"""
Health check endpoints for operations monitoring.

Provides health checks for:
- Database connectivity (all configured databases)
- Redis/Celery broker connectivity
- Recurring transaction backlog (schedules overdue by more than a day)
- Cashbox ledger consistency (newest balance_after matches the balance)

Endpoints:
- /_health/live    - Kubernetes liveness check (is the process running?)
- /_health/ready   - Kubernetes readiness check (can we serve traffic?)
- /_health/full    - Full health report (for debugging/dashboards)
"""
import logging
import time
from datetime import timedelta
from typing import Dict, Any

import redis
from django.conf import settings
from django.db import connections
from django.db.models import OuterRef, Subquery
from django.http import JsonResponse
from django.utils import timezone
from django.views import View

logger = logging.getLogger(__name__)


class HealthCheck:
    """Health check implementation."""

    @staticmethod
    def check_database(alias: str = "default") -> Dict[str, Any]:
        """Check database connectivity."""
        start = time.time()
        try:
            conn = connections[alias]
            conn.ensure_connection()
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "healthy",
                "alias": alias,
                "duration_ms": round(duration_ms, 2),
            }
        except Exception as e:
            duration_ms = (time.time() - start) * 1000
            logger.warning("Database health check failed", extra={"alias": alias, "error": str(e)})
            return {
                "status": "unhealthy",
                "alias": alias,
                "error": str(e),
                "duration_ms": round(duration_ms, 2),
            }

    @staticmethod
    def check_all_databases() -> Dict[str, Any]:
        """Check all configured databases."""
        results = {}
        all_healthy = True

        for alias in settings.DATABASES.keys():
            result = HealthCheck.check_database(alias)
            results[alias] = result
            if result["status"] != "healthy":
                all_healthy = False

        return {
            "status": "healthy" if all_healthy else "degraded",
            "databases": results,
        }

    @staticmethod
    def check_redis() -> Dict[str, Any]:
        """Check Redis connectivity (if configured)."""
        redis_url = getattr(settings, "CELERY_BROKER_URL", None)
        if not redis_url or not redis_url.startswith("redis"):
            return {"status": "skipped", "reason": "Redis not configured"}

        start = time.time()
        try:
            client = redis.from_url(redis_url, socket_connect_timeout=2)
            client.ping()
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "healthy",
                "duration_ms": round(duration_ms, 2),
            }
        except redis.RedisError as e:
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "unhealthy",
                "error": str(e),
                "duration_ms": round(duration_ms, 2),
            }

    @staticmethod
    def check_recurring_backlog() -> Dict[str, Any]:
        """Active recurring schedules that the beat task should already have processed."""
        try:
            from accounting.models import RecurringTransaction

            cutoff = timezone.localdate() - timedelta(days=1)
            backlog = RecurringTransaction.objects.filter(
                is_active=True,
                next_due_date__lt=cutoff,
            ).count()

            threshold = getattr(settings, "RECURRING_BACKLOG_THRESHOLD", 0)
            return {
                "status": "healthy" if backlog <= threshold else "degraded",
                "overdue_schedules": backlog,
                "threshold": threshold,
            }
        except Exception as e:
            return {
                "status": "error",
                "error": str(e),
            }

    @staticmethod
    def check_cashbox_ledger() -> Dict[str, Any]:
        """Cashboxes whose newest ledger row disagrees with current_balance."""
        try:
            from cashbox.models import Cashbox, CashboxTransaction

            newest = CashboxTransaction.objects.filter(
                cashbox=OuterRef("pk"),
            ).order_by("-created_at", "-id").values("balance_after")[:1]

            rows = Cashbox.objects.annotate(
                last_balance=Subquery(newest),
            ).filter(last_balance__isnull=False).values_list("id", "current_balance", "last_balance")

            mismatched = [pk for pk, current, last in rows if current != last]
            return {
                "status": "healthy" if not mismatched else "unhealthy",
                "mismatched_cashboxes": mismatched[:10],
            }
        except Exception as e:
            return {
                "status": "error",
                "error": str(e),
            }

    @staticmethod
    def get_full_health() -> Dict[str, Any]:
        """Get comprehensive health report."""
        checks = {
            "databases": HealthCheck.check_all_databases(),
            "redis": HealthCheck.check_redis(),
            "recurring_backlog": HealthCheck.check_recurring_backlog(),
            "cashbox_ledger": HealthCheck.check_cashbox_ledger(),
        }

        # Determine overall status
        statuses = [c.get("status", "unknown") for c in checks.values()]
        if all(s == "healthy" or s == "skipped" for s in statuses):
            overall = "healthy"
        elif any(s == "unhealthy" for s in statuses):
            overall = "unhealthy"
        else:
            overall = "degraded"

        return {
            "status": overall,
            "checks": checks,
            "version": getattr(settings, "VERSION", "unknown"),
            "environment": "production" if not settings.DEBUG else "development",
        }


class LivenessView(View):
    """
    Kubernetes liveness check.

    Returns 200 if the process is running.
    This should be very fast and not check external dependencies.
    """

    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    """
    Kubernetes readiness check.

    Returns 200 if the service can handle traffic.
    Checks database connectivity.
    """

    def get(self, request):
        db_check = HealthCheck.check_database("default")

        if db_check["status"] == "healthy":
            return JsonResponse({
                "status": "ready",
                "database": db_check,
            })
        else:
            return JsonResponse({
                "status": "not_ready",
                "database": db_check,
            }, status=503)


class FullHealthView(View):
    """
    Full health check for debugging and dashboards.

    Should be protected in production (internal network only).
    """

    def get(self, request):
        health = HealthCheck.get_full_health()

        status_code = 200 if health["status"] == "healthy" else 503
        return JsonResponse(health, status=status_code)
