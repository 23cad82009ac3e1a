from django.contrib import admin

from .models import Cashbox, CashboxTransaction


@admin.register(Cashbox)
class CashboxAdmin(admin.ModelAdmin):
    list_display = ("name", "company", "location", "current_balance", "currency", "is_active", "is_deleted")
    list_filter = ("currency", "is_active", "is_deleted")
    search_fields = ("name", "location", "company__name")
    readonly_fields = ("current_balance", "created_at", "updated_at")


@admin.register(CashboxTransaction)
class CashboxTransactionAdmin(admin.ModelAdmin):
    list_display = ("created_at", "cashbox", "transaction_type", "amount", "balance_after", "reference")
    list_filter = ("transaction_type",)
    search_fields = ("description", "reference", "cashbox__name")

    def has_change_permission(self, request, obj=None):
        return False
