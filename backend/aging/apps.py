from django.apps import AppConfig


class AgingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "aging"
    verbose_name = "AR/AP Aging"
