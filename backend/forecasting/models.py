# forecasting/models.py
from django.conf import settings
from django.db import models

from accounts.models import Company
from accounting.models import default_currency


class Forecast(models.Model):
    """A saved forecast figure, produced by one of the forecasting methods."""

    class ForecastType(models.TextChoices):
        MONTE_CARLO = "monte_carlo", "Monte Carlo"
        SCENARIO = "scenario", "Senaryo"
        TREND = "trend", "Trend"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="forecasts")

    forecast_type = models.CharField(max_length=20, choices=ForecastType.choices)
    scenario = models.CharField(max_length=50, blank=True, default="")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    forecast_date = models.DateField()
    target_date = models.DateField()
    predicted_value = models.DecimalField(max_digits=15, decimal_places=2)
    confidence = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    lower_bound = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    upper_bound = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)

    currency = models.CharField(max_length=3, default=default_currency)
    category = models.CharField(max_length=100, blank=True, default="balance")
    account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="forecasts",
    )
    parameters = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.title


class SimulationRun(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="simulation_runs")
    horizon_months = models.PositiveSmallIntegerField()
    parameters = models.JSONField(default=dict)
    results = models.JSONField(default=dict)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Simulation {self.pk} ({self.horizon_months} ay)"
