import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "miles_backend.settings")

app = Celery("miles_backend")

# All CELERY_* settings come from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
