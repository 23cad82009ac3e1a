# forecasting/commands.py
"""
Command layer for forecasting.

Only saving forecasts and simulation runs writes to the database; the
analysis endpoints call the pure engines directly.
"""

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from accounting.models import Account
from audit.emitter import record_audit, snapshot
from audit.models import AuditLog
from forecasting.models import Forecast, SimulationRun
from forecasting.queries import simulation_base
from forecasting.simulation import SimulationEngine, analyze_parameter_impact

logger = logging.getLogger(__name__)

FORECAST_FIELDS = (
    "forecast_type", "scenario", "title", "forecast_date", "target_date",
    "predicted_value", "confidence", "lower_bound", "upper_bound", "category",
)


@transaction.atomic
def create_forecast(
    actor: ActorContext,
    forecast_type: str,
    title: str,
    forecast_date: date,
    target_date: date,
    predicted_value: Decimal,
    scenario: str = "",
    description: str = "",
    confidence: Decimal = None,
    lower_bound: Decimal = None,
    upper_bound: Decimal = None,
    currency: str = None,
    category: str = "balance",
    account_id: int = None,
    parameters: dict = None,
) -> CommandResult:
    require(actor, "forecasts.run")

    if target_date < forecast_date:
        return CommandResult.fail("Hedef tarih tahmin tarihinden önce olamaz")
    if lower_bound is not None and upper_bound is not None and lower_bound > upper_bound:
        return CommandResult.fail("Alt sınır üst sınırdan büyük olamaz")

    account = None
    if account_id is not None:
        account = Account.objects.filter(pk=account_id, company=actor.company, is_deleted=False).first()
        if account is None:
            return CommandResult.fail("Hesap bulunamadı")

    forecast = Forecast.objects.create(
        company=actor.company,
        forecast_type=forecast_type,
        scenario=scenario or "",
        title=title,
        description=description or f"{forecast_type} forecast for {category or 'financial data'}",
        forecast_date=forecast_date,
        target_date=target_date,
        predicted_value=predicted_value,
        confidence=confidence,
        lower_bound=lower_bound,
        upper_bound=upper_bound,
        currency=(currency or (account.currency if account else actor.company.default_currency)).upper(),
        category=category or "balance",
        account=account,
        parameters=parameters or {},
        created_by=actor.user,
    )

    record_audit(
        actor,
        AuditLog.Action.CREATE,
        "forecast",
        forecast.id,
        new_values=snapshot(forecast, FORECAST_FIELDS),
    )
    return CommandResult.ok(forecast)


@transaction.atomic
def delete_forecast(actor: ActorContext, forecast_id: int) -> CommandResult:
    require(actor, "forecasts.run")

    forecast = Forecast.objects.filter(pk=forecast_id, company=actor.company).first()
    if forecast is None:
        return CommandResult.fail("Tahmin bulunamadı")

    before = snapshot(forecast, FORECAST_FIELDS)
    pk = forecast.pk
    forecast.delete()

    record_audit(actor, AuditLog.Action.DELETE, "forecast", pk, old_values=before)
    return CommandResult.ok()


@transaction.atomic
def run_simulation(actor: ActorContext, params) -> CommandResult:
    """
    Run the macro simulation on the company's balances and store the run.

    Args:
        params: validated SimulationParameters

    Returns:
        CommandResult with {"run", "results", "impact", "base_cash", "base_debt"}
    """
    require(actor, "forecasts.run")

    base = simulation_base(actor.company)
    if base is None:
        return CommandResult.fail("Simülasyon için en az bir hesap gereklidir")
    base_cash, base_debt = base

    results = SimulationEngine(base_cash, base_debt).run(params)
    impact = analyze_parameter_impact(params)

    run = SimulationRun.objects.create(
        company=actor.company,
        horizon_months=params.horizon_months,
        parameters=params.to_dict(),
        results={**results, "impact": impact, "base_cash": base_cash, "base_debt": base_debt},
        created_by=actor.user,
    )

    logger.info(
        "Simulation run stored",
        extra={"company_id": actor.company.id, "simulation_run_id": run.id},
    )
    return CommandResult.ok({
        "run": run,
        "results": results,
        "impact": impact,
        "base_cash": base_cash,
        "base_debt": base_debt,
    })
