"""URL configuration for the forecasting API (mounted at /api/forecasting/)."""

from django.urls import path

from .views import (
    ForecastDetailView,
    ForecastListCreateView,
    GrowthScenariosView,
    MonteCarloView,
    PatternsView,
    ScenarioCompareView,
    ScenarioRecommendationsView,
    ScenarioRunView,
    SimulationDetailView,
    SimulationHistoryView,
    SimulationParametersView,
    SimulationRunView,
    TrendView,
)

app_name = "forecasting"

urlpatterns = [
    # Statistical forecasts
    path("monte-carlo/", MonteCarloView.as_view(), name="monte-carlo"),
    path("trend/", TrendView.as_view(), name="trend"),
    path("scenarios/", GrowthScenariosView.as_view(), name="growth-scenarios"),
    path("patterns/", PatternsView.as_view(), name="patterns"),

    # Scenario engine
    path("scenario/run/", ScenarioRunView.as_view(), name="scenario-run"),
    path("scenario/compare/", ScenarioCompareView.as_view(), name="scenario-compare"),
    path("scenario/recommendations/", ScenarioRecommendationsView.as_view(), name="scenario-recommendations"),

    # Macro simulation
    path("simulation/run/", SimulationRunView.as_view(), name="simulation-run"),
    path("simulation/parameters/", SimulationParametersView.as_view(), name="simulation-parameters"),
    path("simulation/history/", SimulationHistoryView.as_view(), name="simulation-history"),
    path("simulation/<int:pk>/", SimulationDetailView.as_view(), name="simulation-detail"),

    # Saved forecasts
    path("forecasts/", ForecastListCreateView.as_view(), name="forecast-list"),
    path("forecasts/<int:pk>/", ForecastDetailView.as_view(), name="forecast-detail"),
]
