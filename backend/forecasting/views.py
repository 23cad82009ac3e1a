# forecasting/views.py
"""
Forecasting API.

Pure computations (Monte Carlo, trend, growth scenarios, scenario
engine) need ``forecasts.view``; storing forecasts and simulation runs
needs ``forecasts.run``.
"""

from django.http import Http404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from forecasting import statistics
from forecasting.commands import create_forecast, delete_forecast, run_simulation
from forecasting.models import Forecast, SimulationRun
from forecasting.queries import financial_snapshot, recent_transactions
from forecasting.scenario import (
    ScenarioParameters,
    compare_scenarios,
    recommended_scenarios,
    run_scenario,
)
from forecasting.serializers import (
    ForecastCreateSerializer,
    ForecastSerializer,
    GrowthScenarioSerializer,
    MonteCarloSerializer,
    ScenarioCompareSerializer,
    ScenarioParametersSerializer,
    ScenarioRunSerializer,
    SimulationRunSerializer,
    TrendSerializer,
)
from forecasting.simulation import PARAMETER_INFO, validate_simulation_parameters

INSUFFICIENT_DATA = "Tahmin için yeterli geçmiş veri yok"


def _failure(result):
    return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)


def _insufficient(exc):
    return Response({"detail": INSUFFICIENT_DATA, "error": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


def _monthly_net_flows(company):
    return statistics.analyze_transaction_patterns(recent_transactions(company))["net_cash_flow"]


# =============================================================================
# Statistical Forecasts
# =============================================================================

class MonteCarloView(APIView):
    """
    POST /api/forecasting/monte-carlo/

    Without ``historical_data`` the company's monthly net cash flows of the
    last 12 months are used.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")

        input_serializer = MonteCarloSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        params = dict(input_serializer.validated_data)

        historical = params.pop("historical_data", None) or _monthly_net_flows(actor.company)
        include_scenarios = params.pop("include_scenarios")

        try:
            result = statistics.monte_carlo_simulation(historical, **params)
        except statistics.InsufficientDataError as exc:
            return _insufficient(exc)

        if not include_scenarios:
            result.pop("scenarios")
        return Response(result)


class TrendView(APIView):
    """POST /api/forecasting/trend/"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")

        input_serializer = TrendSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        params = input_serializer.validated_data

        historical = params.get("historical_data") or _monthly_net_flows(actor.company)
        try:
            result = statistics.trend_forecast(
                historical,
                months_ahead=params["months_ahead"],
                start=params.get("start_date"),
            )
        except statistics.InsufficientDataError as exc:
            return _insufficient(exc)
        return Response(result)


class GrowthScenariosView(APIView):
    """POST /api/forecasting/scenarios/ -> optimistic / realistic / pessimistic paths."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")

        input_serializer = GrowthScenarioSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        return Response(statistics.generate_scenarios(**input_serializer.validated_data))


class PatternsView(APIView):
    """GET /api/forecasting/patterns/?months=12"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")

        try:
            months = max(1, min(int(request.query_params.get("months", 12)), 60))
        except ValueError:
            return Response({"detail": "Geçersiz ay sayısı"}, status=status.HTTP_400_BAD_REQUEST)

        return Response(statistics.analyze_transaction_patterns(recent_transactions(actor.company, months)))


# =============================================================================
# Scenario Engine
# =============================================================================

class ScenarioRunView(APIView):
    """POST /api/forecasting/scenario/run/"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")

        input_serializer = ScenarioRunSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = run_scenario(
            financial_snapshot(actor.company),
            ScenarioParameters.from_dict(data.get("parameters")),
            data["horizon"],
        )
        return Response(result)


class ScenarioCompareView(APIView):
    """POST /api/forecasting/scenario/compare/"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")

        input_serializer = ScenarioCompareSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = compare_scenarios(
            financial_snapshot(actor.company),
            input_serializer.validated_data["scenarios"],
        )
        return Response(result)


class ScenarioRecommendationsView(APIView):
    """GET /api/forecasting/scenario/recommendations/?revenue_delta=..."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")

        base = ScenarioParametersSerializer(data=request.query_params)
        base.is_valid(raise_exception=True)
        return Response(recommended_scenarios(ScenarioParameters.from_dict(base.validated_data)))


# =============================================================================
# Macro Simulation
# =============================================================================

class SimulationRunView(APIView):
    """POST /api/forecasting/simulation/run/"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)

        params, errors = validate_simulation_parameters(request.data)
        if errors:
            return Response(
                {"detail": "Geçersiz parametreler", "errors": errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        result = run_simulation(actor, params)
        if not result.success:
            return _failure(result)

        data = result.data
        return Response(
            {
                "id": data["run"].id,
                "parameters": params.to_dict(),
                "base_cash": data["base_cash"],
                "base_debt": data["base_debt"],
                "impact": data["impact"],
                **data["results"],
            },
            status=status.HTTP_201_CREATED,
        )


class SimulationParametersView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")
        return Response({"parameters": PARAMETER_INFO})


class SimulationHistoryView(APIView):
    """GET /api/forecasting/simulation/history/?limit=10"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")

        try:
            limit = max(1, min(int(request.query_params.get("limit", 10)), 100))
        except ValueError:
            return Response({"detail": "Geçersiz limit"}, status=status.HTTP_400_BAD_REQUEST)

        runs = SimulationRun.objects.filter(company=actor.company)[:limit]
        return Response(SimulationRunSerializer(runs, many=True).data)


class SimulationDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")

        run = SimulationRun.objects.filter(company=actor.company, pk=pk).first()
        if not run:
            raise Http404("Simülasyon bulunamadı")
        return Response(SimulationRunSerializer(run).data)


# =============================================================================
# Saved Forecasts
# =============================================================================

class ForecastListCreateView(APIView):
    """
    GET /api/forecasting/forecasts/?forecast_type=
    POST /api/forecasting/forecasts/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")

        forecasts = Forecast.objects.filter(company=actor.company).select_related("account")
        if request.query_params.get("forecast_type"):
            forecasts = forecasts.filter(forecast_type=request.query_params["forecast_type"])
        return Response(ForecastSerializer(forecasts, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = ForecastCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_forecast(actor, **input_serializer.validated_data)
        if not result.success:
            return _failure(result)
        return Response(ForecastSerializer(result.data).data, status=status.HTTP_201_CREATED)


class ForecastDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, actor, pk):
        forecast = Forecast.objects.filter(company=actor.company, pk=pk).select_related("account").first()
        if not forecast:
            raise Http404("Tahmin bulunamadı")
        return forecast

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "forecasts.view")
        return Response(ForecastSerializer(self.get_object(actor, pk)).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        self.get_object(actor, pk)

        result = delete_forecast(actor, pk)
        if not result.success:
            return _failure(result)
        return Response(status=status.HTTP_204_NO_CONTENT)
