# forecasting/simulation.py
"""
Macro simulation: cash, debt and net worth under fx, interest and
inflation changes over 3, 6 or 12 months.

Assumptions:
- 15% of cash is held in foreign currency
- cash earns 2% and debt costs 3% a month, scaled by the rate change
- 30% of the rate effect is added to debt
- fixed monthly income 50000 and expenses 35000
"""

from dataclasses import asdict, dataclass
from typing import Optional

HORIZONS = (3, 6, 12)

FX_EXPOSURE = 0.15
CASH_RETURN = 0.02
DEBT_INTEREST = 0.03
DEBT_RATE_SHARE = 0.3
MONTHLY_INCOME = 50000
MONTHLY_EXPENSES = 35000

PARAMETER_INFO = {
    "fx_delta": {
        "name": "Döviz Kuru Değişimi",
        "description": "USD/TRY kurundaki yıllık değişim oranı",
        "unit": "%",
        "min": -50,
        "max": 50,
        "step": 1,
        "default": 0,
    },
    "rate_delta": {
        "name": "Faiz Oranı Değişimi",
        "description": "Faiz oranlarındaki yıllık değişim oranı",
        "unit": "%",
        "min": -20,
        "max": 20,
        "step": 0.5,
        "default": 0,
    },
    "inflation_delta": {
        "name": "Enflasyon Değişimi",
        "description": "Enflasyon oranındaki değişim",
        "unit": "%",
        "min": 0,
        "max": 100,
        "step": 1,
        "default": 0,
    },
    "horizon_months": {
        "name": "Simülasyon Süresi",
        "description": "Projeksiyon süresi",
        "unit": "ay",
        "options": list(HORIZONS),
        "default": 6,
    },
}


@dataclass
class SimulationParameters:
    fx_delta: float
    rate_delta: float
    inflation_delta: float
    horizon_months: int

    def to_dict(self) -> dict:
        return asdict(self)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_simulation_parameters(data: dict):
    """
    Check raw input and build SimulationParameters.

    Returns:
        (parameters or None, list of Turkish error messages)
    """
    errors = []
    fx = data.get("fx_delta")
    rate = data.get("rate_delta")
    inflation = data.get("inflation_delta")
    horizon = data.get("horizon_months")

    if not _is_number(fx) or not -50 <= fx <= 50:
        errors.append("fx_delta -50 ile +50 arasında olmalıdır")
    if not _is_number(rate) or not -20 <= rate <= 20:
        errors.append("rate_delta -20 ile +20 arasında olmalıdır")
    if not _is_number(inflation) or not 0 <= inflation <= 100:
        errors.append("inflation_delta 0 ile 100 arasında olmalıdır")
    if horizon not in HORIZONS or isinstance(horizon, bool):
        errors.append("horizon_months 3, 6 veya 12 olmalıdır")

    if errors:
        return None, errors
    return SimulationParameters(float(fx), float(rate), float(inflation), int(horizon)), []


def format_try(value: float) -> str:
    """Turkish lira with '.' thousands and ',' decimals, e.g. ₺1.234,56"""
    text = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{'-' if value < 0 else ''}₺{text}"


def _signed(value: float) -> str:
    return ("+" if value >= 0 else "") + format_try(value)


class SimulationEngine:
    def __init__(self, base_cash: float, base_debt: float):
        self.base_cash = float(base_cash)
        self.base_debt = float(base_debt)
        self.base_net_worth = self.base_cash - self.base_debt

    @staticmethod
    def fx_effect(cash: float, fx_delta: float) -> float:
        return cash * FX_EXPOSURE * (fx_delta / 12 / 100)

    @staticmethod
    def rate_effect(cash: float, debt: float, rate_delta: float) -> float:
        multiplier = 1 + rate_delta / 100 / 12
        return cash * CASH_RETURN * multiplier - debt * DEBT_INTEREST * multiplier

    @staticmethod
    def inflation_effect(cash: float, inflation_delta: float) -> float:
        return cash * (inflation_delta / 12 / 100)

    def projections(self, params: SimulationParameters) -> list[dict]:
        rows = []
        cash = self.base_cash
        debt = self.base_debt
        monthly_net = MONTHLY_INCOME - MONTHLY_EXPENSES

        for month in range(1, params.horizon_months + 1):
            fx = self.fx_effect(cash, params.fx_delta)
            rate = self.rate_effect(cash, debt, params.rate_delta)
            inflation = self.inflation_effect(cash, params.inflation_delta)

            cash = cash + fx + rate - inflation + monthly_net
            debt = debt + rate * DEBT_RATE_SHARE

            rows.append({
                "month": month,
                "cash": round(cash),
                "debt": round(debt),
                "net_worth": round(cash - debt),
            })
        return rows

    @staticmethod
    def cash_deficit_month(projections: list[dict]) -> Optional[int]:
        for row in projections:
            if row["cash"] < 0:
                return row["month"]
        return None

    def summary_text(self, projections: list[dict], deficit_month: Optional[int], horizon: int) -> str:
        last = projections[-1]
        lines = [
            f"{horizon} aylık simülasyon sonuçları:",
            f"• Nakit değişimi: {_signed(last['cash'] - self.base_cash)}",
            f"• Borç değişimi: {_signed(last['debt'] - self.base_debt)}",
            f"• Net değer değişimi: {_signed(last['net_worth'] - self.base_net_worth)}",
        ]
        if deficit_month:
            lines.append(f"• Nakit açığı: {deficit_month}. ayda oluşabilir")
        else:
            lines.append("• Nakit açığı riski: Düşük")
        return "\n".join(lines)

    def run(self, params: SimulationParameters) -> dict:
        projections = self.projections(params)
        deficit_month = self.cash_deficit_month(projections)
        last = projections[-1]

        if deficit_month:
            formatted = f"Bu senaryoda {deficit_month} ay içinde nakit açığı oluşabilir."
        else:
            formatted = f"Bu senaryoda {params.horizon_months} ay boyunca nakit açığı riski düşük görünüyor."

        return {
            "projections": projections,
            "summary": self.summary_text(projections, deficit_month, params.horizon_months),
            "formatted_summary": formatted,
            "cash_deficit_month": deficit_month,
            "total_cash_change": round(last["cash"] - self.base_cash, 2),
            "total_debt_change": round(last["debt"] - self.base_debt, 2),
            "total_net_worth_change": round(last["net_worth"] - self.base_net_worth, 2),
        }


def analyze_parameter_impact(params: SimulationParameters) -> dict:
    total = abs(params.fx_delta) + abs(params.rate_delta) + abs(params.inflation_delta)

    if params.fx_delta > 5:
        fx = "Olumlu (güçlü TRY)"
    elif params.fx_delta < -5:
        fx = "Olumsuz (zayıf TRY)"
    elif params.fx_delta > 0:
        fx = "Hafif olumlu"
    elif params.fx_delta < 0:
        fx = "Hafif olumsuz"
    else:
        fx = "Nötr"

    if params.rate_delta > 2:
        rate = "Olumlu (yüksek getiri)"
    elif params.rate_delta < -2:
        rate = "Olumsuz (düşük getiri)"
    elif params.rate_delta > 0:
        rate = "Hafif olumlu"
    elif params.rate_delta < 0:
        rate = "Hafif olumsuz"
    else:
        rate = "Nötr"

    if params.inflation_delta > 10:
        inflation = "Olumsuz (yüksek enflasyon)"
    elif params.inflation_delta < 5:
        inflation = "Olumlu (düşük enflasyon)"
    elif params.inflation_delta > 8:
        inflation = "Hafif olumsuz"
    elif params.inflation_delta < 7:
        inflation = "Hafif olumlu"
    else:
        inflation = "Nötr"

    if total > 20:
        risk = "high"
    elif total > 10:
        risk = "medium"
    else:
        risk = "low"

    return {
        "fx_impact": fx,
        "rate_impact": rate,
        "inflation_impact": inflation,
        "risk_level": risk,
    }
