"""
Celery tasks for recurring transactions.

Tasks:
- process_company_recurring: Spawn due transactions for one company
- process_all_recurring: Spawn due transactions for every active company

Usage:
    from accounting.tasks import process_company_recurring
    process_company_recurring.delay(company_id=company.id)

    # Scheduled hourly via CELERY_BEAT_SCHEDULE in settings
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
def process_company_recurring(self, company_id: int, as_of: Optional[str] = None) -> dict:
    """
    Process due recurring schedules for a company.

    Args:
        company_id: ID of the company to process
        as_of: ISO date to process up to (defaults to today)

    Returns:
        Dict with processed/created counts and collected errors
    """
    from accounts.models import Company
    from accounting.commands import process_recurring_transactions

    logger.info(f"Processing recurring transactions for company {company_id}")

    try:
        company = Company.objects.get(id=company_id)
    except Company.DoesNotExist:
        logger.error(f"Company {company_id} not found")
        return {"error": f"Company {company_id} not found"}

    result = process_recurring_transactions(
        company=company,
        as_of=date.fromisoformat(as_of) if as_of else None,
    )
    return {"company_id": company_id, **result}


@shared_task(bind=True)
def process_all_recurring(self) -> dict:
    """
    Process due recurring schedules for all active companies.

    Returns:
        Summary keyed by company slug
    """
    from accounts.models import Company

    logger.info("Processing recurring transactions for all companies")

    results = {}
    total_created = 0

    for company in Company.objects.filter(is_active=True):
        result = process_company_recurring(company_id=company.id)
        results[company.slug] = result
        total_created += result.get("created", 0)

    logger.info(f"Completed recurring processing: {total_created} transactions created")

    return {
        "companies_processed": len(results),
        "total_created": total_created,
        "results": results,
    }
