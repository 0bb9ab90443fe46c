import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All CELERY_* Django settings (broker, result backend, acks_late, ...) apply.
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
