"""
Celery tasks for AR/AP aging.

Tasks:
- recalculate_company_aging: Refresh aging fields for one company
- recalculate_all_aging: Refresh aging fields for every active company

Scheduled daily via CELERY_BEAT_SCHEDULE in settings.
"""
import logging
from datetime import date
from typing import Optional

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True,
)
def recalculate_company_aging(self, company_id: int, as_of: Optional[str] = None) -> dict:
    from accounts.models import Company
    from aging.commands import recalculate_aging

    logger.info(f"Recalculating aging for company {company_id}")

    try:
        company = Company.objects.get(id=company_id)
    except Company.DoesNotExist:
        logger.error(f"Company {company_id} not found")
        return {"error": f"Company {company_id} not found"}

    result = recalculate_aging(
        company=company,
        as_of=date.fromisoformat(as_of) if as_of else None,
    )
    return {"company_id": company_id, **result}


@shared_task(bind=True)
def recalculate_all_aging(self) -> dict:
    from accounts.models import Company

    results = {}
    total_updated = 0

    for company in Company.objects.filter(is_active=True):
        result = recalculate_company_aging(company_id=company.id)
        results[company.slug] = result
        total_updated += result.get("updated", 0)

    logger.info(f"Completed aging recalculation: {total_updated} items updated")

    return {
        "companies_processed": len(results),
        "total_updated": total_updated,
        "results": results,
    }
