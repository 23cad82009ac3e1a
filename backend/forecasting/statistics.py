# forecasting/statistics.py
"""
Statistical forecasting functions.

All functions are pure: they take plain numbers (or objects with
date / transaction_type / amount attributes) and return plain dicts of
floats, so they can be tested without a database.
"""

from collections import OrderedDict
from datetime import date
from typing import Optional, Sequence

import numpy as np

from accounting.recurring import add_months

PERCENTILES = (10, 25, 75, 90, 95, 99)

INCOME_TYPES = {"income", "transfer_in"}


class InsufficientDataError(ValueError):
    """Raised when there are too few data points for a forecast."""


def _round(value, places: int = 2) -> float:
    return round(float(value), places)


def percentile(sorted_values, p: float) -> float:
    """
    Linear interpolation at index ``p * (n - 1)`` of an ascending sequence.

    ``p`` is a fraction in [0, 1].
    """
    if not 0 <= p <= 1:
        raise ValueError("Percentile must be between 0 and 1")
    return float(np.percentile(np.asarray(sorted_values, dtype=float), p * 100))


def relative_volatility(values: Sequence[float]) -> float:
    """Sample standard deviation divided by the absolute mean (0 when the mean is 0)."""
    data = np.asarray(values, dtype=float)
    mean = data.mean()
    if mean == 0 or len(data) < 2:
        return 0.0
    return float(data.std(ddof=1) / abs(mean))


def monte_carlo_simulation(
    historical: Sequence[float],
    iterations: int = 1000,
    time_horizon: int = 12,
    confidence_level: float = 0.95,
    volatility: Optional[float] = None,
    seed: Optional[int] = None,
) -> dict:
    """
    Simulate ``iterations`` paths of ``time_horizon`` monthly returns.

    Every path starts at the historical mean and compounds by
    ``1 + N(0, volatility)`` each month. The same seed always produces the
    same result.

    Returns:
        Dict with mean, median, percentiles (p10..p99), confidence_interval
        and the sorted final values of all scenarios.
    """
    data = np.asarray(historical, dtype=float)
    if data.size < 2:
        raise InsufficientDataError("Insufficient historical data")
    if iterations < 1 or time_horizon < 1:
        raise ValueError("iterations and time_horizon must be positive")
    if not 0 < confidence_level < 1:
        raise ValueError("confidence_level must be between 0 and 1")

    if volatility is None:
        volatility = relative_volatility(data)

    rng = np.random.default_rng(seed)
    returns = rng.normal(0.0, volatility, size=(iterations, time_horizon))
    scenarios = np.sort(data.mean() * np.prod(1.0 + returns, axis=1))

    tail = (1 - confidence_level) / 2
    return {
        "mean": _round(scenarios.mean()),
        "median": _round(np.median(scenarios)),
        "percentiles": {f"p{p}": _round(percentile(scenarios, p / 100)) for p in PERCENTILES},
        "confidence_interval": {
            "lower": _round(percentile(scenarios, tail)),
            "upper": _round(percentile(scenarios, 1 - tail)),
        },
        "volatility": _round(volatility, 6),
        "iterations": iterations,
        "time_horizon": time_horizon,
        "confidence_level": confidence_level,
        "scenarios": [_round(v) for v in scenarios],
    }


def _linear_fit(values: np.ndarray):
    x = np.arange(values.size, dtype=float)
    slope, intercept = np.polyfit(x, values, 1)
    fitted = slope * x + intercept
    ss_res = float(((values - fitted) ** 2).sum())
    ss_tot = float(((values - values.mean()) ** 2).sum())
    r_squared = 1.0 if ss_tot == 0 else 1 - ss_res / ss_tot
    return float(slope), float(intercept), r_squared


def trend_forecast(historical: Sequence[float], months_ahead: int = 12, start: Optional[date] = None) -> dict:
    """
    Least-squares trend over monthly values, extended ``months_ahead`` months.

    ``start`` is the month of the first historical value; it defaults to
    the month that makes the last value fall in the current month.
    Predicted values are clamped at zero.
    """
    data = np.asarray(historical, dtype=float)
    if data.size < 3:
        raise InsufficientDataError("Insufficient data for trend analysis")

    slope, intercept, r_squared = _linear_fit(data)

    if start is None:
        start = add_months(date.today().replace(day=1), -(data.size - 1))
    start = start.replace(day=1)

    predictions = []
    for i in range(data.size, data.size + months_ahead):
        predictions.append({
            "date": add_months(start, i).isoformat(),
            "value": _round(max(0.0, slope * i + intercept)),
        })

    return {
        "slope": _round(slope, 4),
        "intercept": _round(intercept, 4),
        "r_squared": _round(r_squared, 4),
        "predictions": predictions,
    }


def generate_scenarios(base_value: float, growth_rate: float, volatility: float, months: int = 12) -> dict:
    """
    Optimistic, realistic and pessimistic monthly compounding paths.

    Rates are monthly fractions: optimistic grows by growth + volatility,
    pessimistic by growth - volatility.
    """
    rates = OrderedDict([
        ("optimistic", growth_rate + volatility),
        ("realistic", growth_rate),
        ("pessimistic", growth_rate - volatility),
    ])
    steps = np.arange(1, months + 1, dtype=float)

    result = {}
    for name, rate in rates.items():
        path = float(base_value) * np.power(1.0 + rate, steps)
        result[name] = {
            "monthly_rate": _round(rate, 6),
            "values": [_round(v) for v in path],
            "final_value": _round(path[-1]) if months else _round(base_value),
            "total": _round(path.sum()),
        }
    return result


def analyze_transaction_patterns(transactions) -> dict:
    """
    Monthly income / expense totals and their net-flow statistics.

    income and transfer_in count as income; every other type is an expense.
    """
    monthly = {}
    for txn in transactions:
        key = txn.date.strftime("%Y-%m")
        bucket = monthly.setdefault(key, [0.0, 0.0])
        if txn.transaction_type in INCOME_TYPES:
            bucket[0] += float(txn.amount)
        else:
            bucket[1] += float(txn.amount)

    months = sorted(monthly)
    income = np.array([monthly[m][0] for m in months], dtype=float)
    expenses = np.array([monthly[m][1] for m in months], dtype=float)
    net = income - expenses

    volatility = float(net.std()) if net.size > 1 else 0.0
    trend = _linear_fit(net)[0] if net.size > 1 else 0.0

    return {
        "months": months,
        "monthly_income": [_round(v) for v in income],
        "monthly_expenses": [_round(v) for v in expenses],
        "net_cash_flow": [_round(v) for v in net],
        "volatility": _round(volatility),
        "trend": _round(trend),
        "average_income": _round(income.mean()) if income.size else 0.0,
        "average_expenses": _round(expenses.mean()) if expenses.size else 0.0,
        "average_net_flow": _round(net.mean()) if net.size else 0.0,
    }
