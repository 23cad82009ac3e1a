# tests/test_forecasting.py
"""
Tests for forecasting.

Tests cover:
- Monte Carlo: seeded reproducibility, percentile ordering, zero volatility
- Linear trend extension with clamping at zero
- Growth paths and transaction pattern analysis
- Scenario engine projections, risk levels and comparison
- Macro simulation validation, engine and persistence
"""

import pytest
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from accounting.commands import create_transaction
from forecasting import statistics
from forecasting.models import SimulationRun
from forecasting.scenario import (
    FinancialSnapshot,
    ScenarioParameters,
    compare_scenarios,
    recommended_scenarios,
    run_scenario,
)
from forecasting.simulation import (
    SimulationEngine,
    SimulationParameters,
    analyze_parameter_impact,
    format_try,
    validate_simulation_parameters,
)


# =============================================================================
# Monte Carlo
# =============================================================================

class TestMonteCarlo:

    HISTORY = [1200.0, 900.0, 1500.0, 1100.0, 1300.0, 1000.0]

    def test_same_seed_same_result(self):
        first = statistics.monte_carlo_simulation(self.HISTORY, iterations=500, seed=42)
        second = statistics.monte_carlo_simulation(self.HISTORY, iterations=500, seed=42)
        assert first == second

    def test_percentiles_are_ordered(self):
        result = statistics.monte_carlo_simulation(self.HISTORY, iterations=2000, seed=7)

        p = result["percentiles"]
        assert p["p10"] <= p["p25"] <= result["median"] <= p["p75"] <= p["p90"] <= p["p95"] <= p["p99"]
        assert result["confidence_interval"]["lower"] <= result["confidence_interval"]["upper"]
        assert result["scenarios"] == sorted(result["scenarios"])
        assert len(result["scenarios"]) == 2000

    def test_zero_volatility_collapses_to_mean(self):
        result = statistics.monte_carlo_simulation([100.0, 200.0], iterations=100, volatility=0.0, seed=1)

        assert result["mean"] == 150.0
        assert result["confidence_interval"] == {"lower": 150.0, "upper": 150.0}

    def test_needs_two_points(self):
        with pytest.raises(statistics.InsufficientDataError):
            statistics.monte_carlo_simulation([100.0])

    @pytest.mark.parametrize("level", [0, 1, 1.5])
    def test_confidence_level_bounds(self, level):
        with pytest.raises(ValueError):
            statistics.monte_carlo_simulation(self.HISTORY, confidence_level=level)

    def test_percentile_interpolates(self):
        assert statistics.percentile([0, 10, 20, 30], 0.5) == 15.0
        with pytest.raises(ValueError):
            statistics.percentile([1, 2], 2)


# =============================================================================
# Trend and Growth
# =============================================================================

class TestTrend:

    def test_linear_extension(self):
        result = statistics.trend_forecast([100, 200, 300], months_ahead=2, start=date(2024, 1, 15))

        assert result["slope"] == pytest.approx(100.0)
        assert result["r_squared"] == pytest.approx(1.0)
        assert [p["date"] for p in result["predictions"]] == ["2024-04-01", "2024-05-01"]
        assert [p["value"] for p in result["predictions"]] == pytest.approx([400.0, 500.0])

    def test_negative_values_clamped(self):
        result = statistics.trend_forecast([300, 200, 100], months_ahead=2, start=date(2024, 1, 1))
        assert all(p["value"] == 0.0 for p in result["predictions"])

    def test_needs_three_points(self):
        with pytest.raises(statistics.InsufficientDataError):
            statistics.trend_forecast([1, 2])

    def test_growth_paths(self):
        result = statistics.generate_scenarios(1000, growth_rate=0.1, volatility=0.05, months=2)

        assert result["realistic"]["values"] == pytest.approx([1100.0, 1210.0])
        assert result["realistic"]["total"] == pytest.approx(2310.0)
        assert result["optimistic"]["final_value"] == pytest.approx(1322.5)
        assert result["pessimistic"]["values"] == pytest.approx([1050.0, 1102.5])

    def test_transaction_patterns(self):
        txns = [
            SimpleNamespace(date=date(2024, 1, 5), transaction_type="income", amount=Decimal("1000")),
            SimpleNamespace(date=date(2024, 1, 9), transaction_type="expense", amount=Decimal("400")),
            SimpleNamespace(date=date(2024, 2, 3), transaction_type="transfer_in", amount=Decimal("200")),
            SimpleNamespace(date=date(2024, 2, 20), transaction_type="transfer_out", amount=Decimal("100")),
        ]

        result = statistics.analyze_transaction_patterns(txns)

        assert result["months"] == ["2024-01", "2024-02"]
        assert result["net_cash_flow"] == [600.0, 100.0]
        assert result["trend"] == pytest.approx(-500.0)
        assert result["average_income"] == 600.0

    def test_patterns_empty(self):
        result = statistics.analyze_transaction_patterns([])
        assert result["months"] == []
        assert result["average_net_flow"] == 0.0


# =============================================================================
# Scenario Engine
# =============================================================================

class TestScenarioEngine:

    @pytest.fixture
    def snapshot(self):
        return FinancialSnapshot(
            current_cash=10000.0,
            monthly_revenue=5000.0,
            monthly_expenses=3000.0,
            monthly_investment_returns=0.0,
            monthly_interest=0.0,
        )

    def test_from_totals(self):
        snap = FinancialSnapshot.from_totals(12000, 9000, 3000, recurring_income=500, recurring_expenses=-200)

        assert snap.monthly_revenue == pytest.approx(3500.0)
        assert snap.monthly_expenses == pytest.approx(1200.0)
        assert snap.monthly_investment_returns == pytest.approx(20.0)
        assert snap.monthly_interest == pytest.approx(100.0)

    def test_baseline_projection(self, snapshot):
        result = run_scenario(snapshot, ScenarioParameters(), horizon=3, start=date(2024, 1, 15))

        rows = result["projections"]
        assert [r["month"] for r in rows] == ["2024-02", "2024-03", "2024-04"]
        assert [r["closing_cash"] for r in rows] == [12000.0, 14000.0, 16000.0]
        assert rows[1]["opening_cash"] == rows[0]["closing_cash"]

        summary = result["summary"]
        assert summary["total_change"] == 6000.0
        assert summary["average_monthly_growth"] == 20.0
        assert summary["risk_level"] == "low"
        assert len(summary["key_insights"]) == 2

    def test_cost_shock_is_high_risk(self, snapshot):
        result = run_scenario(snapshot, ScenarioParameters(opex_delta=100), horizon=3, start=date(2024, 1, 1))

        assert result["projections"][0]["net_cash_flow"] == -1000.0
        assert result["summary"]["final_cash"] == 7000.0
        assert result["summary"]["risk_level"] == "high"

    def test_invalid_horizon(self, snapshot):
        with pytest.raises(ValueError):
            run_scenario(snapshot, ScenarioParameters(), horizon=5)

    def test_compare_picks_best_and_worst(self, snapshot):
        result = compare_scenarios(snapshot, [
            {"name": "Baz", "parameters": {}, "horizon": 6},
            {"name": "Büyüme", "parameters": {"revenue_delta": 20}, "horizon": 6},
            {"name": "Kriz", "parameters": {"revenue_delta": -50}, "horizon": 6},
        ], start=date(2024, 1, 1))

        assert result["comparison"]["best_scenario"] == "Büyüme"
        assert result["comparison"]["worst_scenario"] == "Kriz"
        assert result["comparison"]["risk_analysis"]["highest_risk"] == "Kriz"

    def test_compare_requires_scenarios(self, snapshot):
        with pytest.raises(ValueError):
            compare_scenarios(snapshot, [])

    def test_recommendations_shift_base(self):
        rec = recommended_scenarios(ScenarioParameters(revenue_delta=10))
        assert rec["conservative"]["revenue_delta"] == 12
        assert rec["moderate"]["revenue_delta"] == 10
        assert rec["aggressive"]["opex_delta"] == 10


# =============================================================================
# Macro Simulation
# =============================================================================

class TestSimulation:

    def test_validation_errors(self):
        params, errors = validate_simulation_parameters({
            "fx_delta": 60, "rate_delta": 0, "inflation_delta": -1, "horizon_months": 4,
        })

        assert params is None
        assert errors == [
            "fx_delta -50 ile +50 arasında olmalıdır",
            "inflation_delta 0 ile 100 arasında olmalıdır",
            "horizon_months 3, 6 veya 12 olmalıdır",
        ]

    def test_validation_rejects_strings_and_bools(self):
        _, errors = validate_simulation_parameters({
            "fx_delta": "5", "rate_delta": True, "inflation_delta": 0, "horizon_months": 6,
        })
        assert len(errors) == 2

    def test_engine_first_month(self):
        engine = SimulationEngine(base_cash=100000, base_debt=0)
        result = engine.run(SimulationParameters(0, 0, 0, 3))

        first = result["projections"][0]
        assert first == {"month": 1, "cash": 117000, "debt": 600, "net_worth": 116400}
        assert result["cash_deficit_month"] is None
        assert "Nakit açığı riski: Düşük" in result["summary"]

    def test_engine_detects_deficit(self):
        result = SimulationEngine(base_cash=-100000, base_debt=0).run(SimulationParameters(0, 0, 0, 6))

        assert result["cash_deficit_month"] == 1
        assert result["formatted_summary"] == "Bu senaryoda 1 ay içinde nakit açığı oluşabilir."

    def test_format_try(self):
        assert format_try(1234.56) == "₺1.234,56"
        assert format_try(-5) == "-₺5,00"

    def test_parameter_impact(self):
        impact = analyze_parameter_impact(SimulationParameters(10, 0, 7.5, 6))
        assert impact == {
            "fx_impact": "Olumlu (güçlü TRY)",
            "rate_impact": "Nötr",
            "inflation_impact": "Nötr",
            "risk_level": "medium",
        }


# =============================================================================
# API
# =============================================================================

@pytest.mark.django_db
class TestForecastingApi:

    def test_monte_carlo_with_history(self, owner_client):
        response = owner_client.post("/api/forecasting/monte-carlo/", {
            "historical_data": [100, 120, 90, 110],
            "iterations": 200,
            "seed": 3,
        }, format="json")

        assert response.status_code == 200
        assert "scenarios" not in response.data
        assert response.data["iterations"] == 200

    def test_monte_carlo_negative_seed_is_400(self, owner_client):
        response = owner_client.post("/api/forecasting/monte-carlo/", {
            "historical_data": [100, 120, 90],
            "seed": -1,
        }, format="json")

        assert response.status_code == 400
        assert "seed" in response.data

    def test_monte_carlo_without_history_is_400(self, owner_client):
        response = owner_client.post("/api/forecasting/monte-carlo/", {}, format="json")
        assert response.status_code == 400
        assert response.data["detail"] == "Tahmin için yeterli geçmiş veri yok"

    def test_patterns_from_company_transactions(self, owner_client, actor, checking_account):
        create_transaction(actor, checking_account.id, "income", Decimal("500"))
        response = owner_client.get("/api/forecasting/patterns/")
        assert response.status_code == 200
        assert response.data["average_income"] == 500.0

    def test_scenario_run(self, owner_client, checking_account):
        response = owner_client.post("/api/forecasting/scenario/run/", {
            "parameters": {"revenue_delta": 10},
            "horizon": 6,
        }, format="json")

        assert response.status_code == 200
        assert len(response.data["projections"]) == 6
        assert response.data["summary"]["initial_cash"] == 1000.0

    def test_simulation_run_is_stored(self, owner_client, checking_account):
        response = owner_client.post("/api/forecasting/simulation/run/", {
            "fx_delta": 5, "rate_delta": 1, "inflation_delta": 10, "horizon_months": 6,
        }, format="json")

        assert response.status_code == 201
        assert len(response.data["projections"]) == 6
        assert SimulationRun.objects.filter(pk=response.data["id"]).exists()

        history = owner_client.get("/api/forecasting/simulation/history/")
        assert [row["id"] for row in history.data] == [response.data["id"]]

    def test_simulation_invalid_parameters(self, owner_client, checking_account):
        response = owner_client.post("/api/forecasting/simulation/run/", {
            "fx_delta": 0, "rate_delta": 50, "inflation_delta": 0, "horizon_months": 6,
        }, format="json")

        assert response.status_code == 400
        assert response.data["errors"] == ["rate_delta -20 ile +20 arasında olmalıdır"]

    def test_simulation_needs_an_account(self, owner_client):
        response = owner_client.post("/api/forecasting/simulation/run/", {
            "fx_delta": 0, "rate_delta": 0, "inflation_delta": 0, "horizon_months": 3,
        }, format="json")
        assert response.status_code == 400

    def test_viewer_can_compute_but_not_store(self, viewer_client, checking_account):
        response = viewer_client.post("/api/forecasting/trend/", {"historical_data": [1, 2, 3]}, format="json")
        assert response.status_code == 200

        response = viewer_client.post("/api/forecasting/simulation/run/", {
            "fx_delta": 0, "rate_delta": 0, "inflation_delta": 0, "horizon_months": 3,
        }, format="json")
        assert response.status_code == 403

    def test_save_forecast(self, owner_client, checking_account):
        response = owner_client.post("/api/forecasting/forecasts/", {
            "forecast_type": "trend",
            "title": "Yıl sonu bakiye",
            "forecast_date": "2024-01-01",
            "target_date": "2024-12-31",
            "predicted_value": "25000.00",
            "account_id": checking_account.id,
        }, format="json")

        assert response.status_code == 201
        assert response.data["currency"] == "TRY"

        listing = owner_client.get("/api/forecasting/forecasts/?forecast_type=trend")
        assert len(listing.data) == 1

    def test_forecast_dates_validated(self, owner_client):
        response = owner_client.post("/api/forecasting/forecasts/", {
            "forecast_type": "trend",
            "title": "Hatalı",
            "forecast_date": "2024-12-31",
            "target_date": "2024-01-01",
            "predicted_value": "1",
        }, format="json")
        assert response.status_code == 400
        assert response.data["detail"] == "Hedef tarih tahmin tarihinden önce olamaz"
