"""
Celery configuration for the messaging backend.

Redis is both broker and result backend. Tasks are auto-discovered from the
installed apps; the beat schedule lives in settings (CELERY_BEAT_SCHEDULE).

Usage:
    celery -A config worker -l info
    celery -A config beat -l info
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
