from django.contrib import admin

from .models import ArApItem


@admin.register(ArApItem)
class ArApItemAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number", "customer_supplier", "item_type", "current_amount",
        "due_date", "aging_bucket", "status",
    )
    list_filter = ("item_type", "status", "aging_bucket")
    search_fields = ("invoice_number", "customer_supplier", "company__name")
    readonly_fields = ("aging_days", "aging_bucket", "created_at", "updated_at")
