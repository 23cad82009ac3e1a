from django.apps import AppConfig


class CashboxConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "cashbox"
    verbose_name = "Cashboxes"
