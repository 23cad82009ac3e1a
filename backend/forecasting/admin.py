from django.contrib import admin

from .models import Forecast, SimulationRun


@admin.register(Forecast)
class ForecastAdmin(admin.ModelAdmin):
    list_display = ("title", "company", "forecast_type", "predicted_value", "target_date", "created_at")
    list_filter = ("forecast_type", "is_active")
    search_fields = ("title", "company__name")


@admin.register(SimulationRun)
class SimulationRunAdmin(admin.ModelAdmin):
    list_display = ("id", "company", "horizon_months", "created_at")
    readonly_fields = ("parameters", "results", "created_at")
