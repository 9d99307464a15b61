import logging
import os
from celery import Celery
from celery.signals import task_failure

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "technique_library.settings")

logger = logging.getLogger(__name__)

celery_app = Celery("technique_library")
celery_app.config_from_object("django.conf:settings", namespace="CELERY")
celery_app.autodiscover_tasks()


@task_failure.connect
def log_task_failure(sender=None, task_id=None, exception=None, args=None, **kwargs):
    """Detached tasks have no caller to report to; log every failure here."""
    task_name = getattr(sender, "name", sender)
    logger.error(
        "Task %s[%s] failed with args=%r: %r",
        task_name,
        task_id,
        args,
        exception,
        exc_info=(type(exception), exception, exception.__traceback__) if exception else None,
    )
