"""Serializers for the forecasting API."""

from rest_framework import serializers

from accounting.serializers import money_field
from forecasting.models import Forecast, SimulationRun
from forecasting.scenario import HORIZONS


class ForecastSerializer(serializers.ModelSerializer):
    account_name = serializers.CharField(source="account.name", read_only=True, default=None)

    class Meta:
        model = Forecast
        fields = [
            "id",
            "forecast_type",
            "scenario",
            "title",
            "description",
            "forecast_date",
            "target_date",
            "predicted_value",
            "confidence",
            "lower_bound",
            "upper_bound",
            "currency",
            "category",
            "account",
            "account_name",
            "parameters",
            "is_active",
            "created_at",
        ]
        read_only_fields = fields


class ForecastCreateSerializer(serializers.Serializer):
    forecast_type = serializers.ChoiceField(choices=Forecast.ForecastType.choices)
    title = serializers.CharField(max_length=255)
    scenario = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    forecast_date = serializers.DateField()
    target_date = serializers.DateField()
    predicted_value = money_field()
    confidence = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)
    lower_bound = money_field(required=False)
    upper_bound = money_field(required=False)
    currency = serializers.CharField(max_length=3, min_length=3, required=False)
    category = serializers.CharField(max_length=100, required=False, default="balance")
    account_id = serializers.IntegerField(required=False)
    parameters = serializers.JSONField(required=False)


class SimulationRunSerializer(serializers.ModelSerializer):
    class Meta:
        model = SimulationRun
        fields = ["id", "horizon_months", "parameters", "results", "created_at"]
        read_only_fields = fields


class MonteCarloSerializer(serializers.Serializer):
    historical_data = serializers.ListField(child=serializers.FloatField(), required=False)
    iterations = serializers.IntegerField(min_value=100, max_value=100000, default=1000)
    time_horizon = serializers.IntegerField(min_value=1, max_value=120, default=12)
    confidence_level = serializers.FloatField(min_value=0.5, max_value=0.99, default=0.95)
    volatility = serializers.FloatField(min_value=0, max_value=5, required=False)
    seed = serializers.IntegerField(min_value=0, required=False)
    include_scenarios = serializers.BooleanField(default=False)


class TrendSerializer(serializers.Serializer):
    historical_data = serializers.ListField(child=serializers.FloatField(), required=False)
    months_ahead = serializers.IntegerField(min_value=1, max_value=60, default=12)
    start_date = serializers.DateField(required=False)


class GrowthScenarioSerializer(serializers.Serializer):
    base_value = serializers.FloatField()
    growth_rate = serializers.FloatField(min_value=-1, max_value=1)
    volatility = serializers.FloatField(min_value=0, max_value=1)
    months = serializers.IntegerField(min_value=1, max_value=60, default=12)


class ScenarioParametersSerializer(serializers.Serializer):
    revenue_delta = serializers.FloatField(min_value=-100, max_value=1000, default=0)
    opex_delta = serializers.FloatField(min_value=-100, max_value=1000, default=0)
    investment_delta = serializers.FloatField(min_value=-100, max_value=1000, default=0)
    rate_delta = serializers.FloatField(min_value=-100, max_value=1000, default=0)
    inflation_delta = serializers.FloatField(min_value=-100, max_value=1000, default=0)
    fx_delta = serializers.FloatField(min_value=-100, max_value=1000, default=0)


class ScenarioRunSerializer(serializers.Serializer):
    parameters = ScenarioParametersSerializer(required=False)
    horizon = serializers.ChoiceField(choices=HORIZONS, default=12)


class NamedScenarioSerializer(ScenarioRunSerializer):
    name = serializers.CharField(max_length=100)


class ScenarioCompareSerializer(serializers.Serializer):
    scenarios = NamedScenarioSerializer(many=True, allow_empty=False)
