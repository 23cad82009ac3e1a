"""
Celery application configuration.

Runs recurring-transaction processing and nightly aging recalculation.

Usage:
    # Start worker
    celery -A finbot_backend worker -l INFO

    # Start beat scheduler (schedule lives in settings.CELERY_BEAT_SCHEDULE)
    celery -A finbot_backend beat -l INFO
"""
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "finbot_backend.settings")

app = Celery("finbot_backend")

# Load config from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
