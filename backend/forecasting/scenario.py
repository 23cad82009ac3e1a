# forecasting/scenario.py
"""
Scenario engine: monthly cash projection under percentage adjustments.

The engine works on a FinancialSnapshot (built from the company's data by
forecasting.queries.financial_snapshot) so projections are reproducible
and testable without a database.
"""

import uuid
from dataclasses import asdict, dataclass, fields
from datetime import date
from typing import Optional

from accounting.recurring import add_months

HORIZONS = (3, 6, 12)

INVESTMENT_RETURN_RATE = 0.02
INTEREST_SHARE_OF_EXPENSES = 0.1

RECOMMENDATION_DESCRIPTIONS = {
    "conservative": "Muhafazakar yaklaşım - düşük risk, istikrarlı büyüme",
    "moderate": "Orta seviye yaklaşım - dengeli risk-getiri profili",
    "aggressive": "Agresif yaklaşım - yüksek risk, potansiyel yüksek getiri",
}


@dataclass
class ScenarioParameters:
    """Percentage adjustments; 10 means +10%."""

    revenue_delta: float = 0.0
    opex_delta: float = 0.0
    investment_delta: float = 0.0
    rate_delta: float = 0.0
    inflation_delta: float = 0.0
    fx_delta: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ScenarioParameters":
        data = data or {}
        names = {f.name for f in fields(cls)}
        return cls(**{k: float(v or 0) for k, v in data.items() if k in names})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class FinancialSnapshot:
    current_cash: float
    monthly_revenue: float
    monthly_expenses: float
    monthly_investment_returns: float
    monthly_interest: float

    @classmethod
    def from_totals(
        cls,
        current_cash: float,
        recent_income: float,
        recent_expenses: float,
        recurring_income: float = 0.0,
        recurring_expenses: float = 0.0,
    ) -> "FinancialSnapshot":
        """
        Build a snapshot from last-three-month totals and monthly recurring amounts.

        Transaction totals are averaged over three months. Investment returns
        assume 2% a year on cash; interest is 10% of transaction expenses.
        """
        monthly_expenses = float(recent_expenses) / 3
        return cls(
            current_cash=float(current_cash),
            monthly_revenue=float(recent_income) / 3 + float(recurring_income),
            monthly_expenses=monthly_expenses + abs(float(recurring_expenses)),
            monthly_investment_returns=float(current_cash) * INVESTMENT_RETURN_RATE / 12,
            monthly_interest=monthly_expenses * INTEREST_SHARE_OF_EXPENSES,
        )


def _r(value: float) -> float:
    return round(value, 2)


def project(snapshot: FinancialSnapshot, params: ScenarioParameters, horizon: int, start: date) -> list[dict]:
    """Month-by-month projection for ``horizon`` months after ``start``."""
    inflation = 1 + params.inflation_delta / 100
    revenue = snapshot.monthly_revenue * (1 + params.revenue_delta / 100) * inflation
    expenses = snapshot.monthly_expenses * (1 + params.opex_delta / 100) * inflation
    investment = snapshot.monthly_investment_returns * (1 + params.investment_delta / 100)
    interest = snapshot.monthly_interest * (1 + params.rate_delta / 100)
    net = revenue - expenses + investment - interest

    rows = []
    cash = snapshot.current_cash
    for month in range(1, horizon + 1):
        closing = cash + net
        rows.append({
            "month": add_months(start, month).strftime("%Y-%m"),
            "opening_cash": _r(cash),
            "revenue": _r(revenue),
            "expenses": _r(expenses),
            "investment_returns": _r(investment),
            "interest_payments": _r(interest),
            "net_cash_flow": _r(net),
            "closing_cash": _r(closing),
        })
        cash = closing
    return rows


def risk_level(initial_cash: float, final_cash: float, average_monthly_growth: float) -> str:
    if final_cash < initial_cash * 0.8:
        return "high"
    if final_cash < initial_cash or average_monthly_growth < -2:
        return "medium"
    return "low"


def key_insights(initial_cash: float, final_cash: float, average_monthly_growth: float,
                 params: ScenarioParameters) -> list[str]:
    insights = []
    if final_cash > initial_cash * 1.2:
        insights.append("Senaryo pozitif sonuçlar gösteriyor - nakit pozisyonunuz güçlenecek.")
    elif final_cash < initial_cash:
        insights.append("Senaryo negatif sonuçlar gösteriyor - nakit pozisyonunuzda düşüş bekleniyor.")
    if abs(average_monthly_growth) > 10:
        insights.append("Yüksek volatilite riski var - durumu yakından takip edin.")
    if params.opex_delta > 20:
        insights.append("Operasyonel giderlerdeki artış nakit akışını olumsuz etkileyebilir.")
    if params.revenue_delta < -10:
        insights.append("Gelir düşüşü senaryosu kritik - alternatif gelir kaynakları düşünün.")
    return insights


def summarize(projections: list[dict], params: ScenarioParameters) -> dict:
    initial = projections[0]["opening_cash"] if projections else 0.0
    final = projections[-1]["closing_cash"] if projections else 0.0
    months = len(projections)

    if initial and months:
        growth = (final - initial) / (initial * months) * 100
    else:
        growth = 0.0

    return {
        "initial_cash": _r(initial),
        "final_cash": _r(final),
        "total_change": _r(final - initial),
        "total_net_cash_flow": _r(sum(row["net_cash_flow"] for row in projections)),
        "average_monthly_growth": _r(growth),
        "risk_level": risk_level(initial, final, growth),
        "key_insights": key_insights(initial, final, growth, params),
    }


def run_scenario(
    snapshot: FinancialSnapshot,
    params: ScenarioParameters,
    horizon: int = 12,
    start: Optional[date] = None,
) -> dict:
    """
    Project and summarize one scenario.

    Raises:
        ValueError: horizon is not 3, 6 or 12
    """
    if horizon not in HORIZONS:
        raise ValueError("Süre 3, 6 veya 12 ay olmalıdır")

    projections = project(snapshot, params, horizon, start or date.today())
    return {
        "scenario_id": f"scenario_{uuid.uuid4().hex[:12]}",
        "parameters": params.to_dict(),
        "horizon": horizon,
        "projections": projections,
        "summary": summarize(projections, params),
    }


def compare_scenarios(snapshot: FinancialSnapshot, scenarios: list[dict], start: Optional[date] = None) -> dict:
    """
    Run several named scenarios and pick the best / worst by final cash.

    Each entry is {"name", "parameters", "horizon"}.
    """
    results = [
        {
            "name": item["name"],
            "result": run_scenario(
                snapshot,
                ScenarioParameters.from_dict(item.get("parameters")),
                item.get("horizon", 12),
                start,
            ),
        }
        for item in scenarios
    ]
    if not results:
        raise ValueError("En az bir senaryo gereklidir")

    ranked = sorted(results, key=lambda r: r["result"]["summary"]["final_cash"], reverse=True)
    high = [r["name"] for r in ranked if r["result"]["summary"]["risk_level"] == "high"]
    low = [r["name"] for r in ranked if r["result"]["summary"]["risk_level"] == "low"]

    return {
        "scenarios": ranked,
        "comparison": {
            "best_scenario": ranked[0]["name"],
            "worst_scenario": ranked[-1]["name"],
            "risk_analysis": {
                "highest_risk": high[0] if high else "",
                "lowest_risk": low[0] if low else "",
            },
        },
    }


def recommended_scenarios(base: Optional[ScenarioParameters] = None) -> dict:
    base = base or ScenarioParameters()
    conservative = ScenarioParameters(**base.to_dict())
    conservative.revenue_delta += 2
    conservative.opex_delta -= 5
    conservative.investment_delta += 1

    aggressive = ScenarioParameters(**base.to_dict())
    aggressive.revenue_delta -= 5
    aggressive.opex_delta += 10
    aggressive.investment_delta += 3

    return {
        "conservative": conservative.to_dict(),
        "moderate": base.to_dict(),
        "aggressive": aggressive.to_dict(),
        "description": dict(RECOMMENDATION_DESCRIPTIONS),
    }
