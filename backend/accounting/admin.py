from django.contrib import admin

from .models import Account, Credit, Investment, RecurringTransaction, Transaction


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("name", "bank_name", "company", "account_type", "balance", "currency", "is_deleted")
    list_filter = ("account_type", "currency", "is_deleted")
    search_fields = ("name", "bank_name", "company__name")
    readonly_fields = ("balance", "public_id", "created_at", "updated_at")


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("date", "account", "transaction_type", "amount", "description", "category")
    list_filter = ("transaction_type",)
    search_fields = ("description", "category", "account__name")
    date_hierarchy = "date"

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(RecurringTransaction)
class RecurringTransactionAdmin(admin.ModelAdmin):
    list_display = ("account", "amount", "interval", "interval_count", "next_due_date", "is_active")
    list_filter = ("interval", "is_active")
    search_fields = ("description", "account__name")


@admin.register(Investment)
class InvestmentAdmin(admin.ModelAdmin):
    list_display = ("title", "investment_type", "symbol", "quantity", "purchase_price", "current_price", "account")
    list_filter = ("investment_type", "risk_level", "currency")
    search_fields = ("title", "symbol", "account__name")
    readonly_fields = ("quantity", "purchase_price", "purchase_transaction", "public_id")


@admin.register(Credit)
class CreditAdmin(admin.ModelAdmin):
    list_display = ("title", "credit_type", "institution", "amount", "remaining_amount", "due_date", "status")
    list_filter = ("credit_type", "status", "is_active")
    search_fields = ("title", "institution")
    readonly_fields = ("remaining_amount", "last_payment_date", "last_payment_amount", "public_id")
