import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from .mux import MuxClient
from .pipeline import run_pipeline
from .retry import RetryPolicy
from .store import RecordStore

logger = logging.getLogger(__name__)


def build_video_host() -> MuxClient:
    return MuxClient.from_settings()


@shared_task(bind=True)
def process_upload(self, record_id: str):
    """Run the detached upload pipeline for one freshly created record."""
    host = build_video_host()
    try:
        status = run_pipeline(
            record_id,
            store=RecordStore(),
            host=host,
            policy=RetryPolicy.from_settings(),
        )
    finally:
        host.close()
    return {"record_id": record_id, "status": status}


@shared_task
def expire_stale_uploads() -> int:
    """Mark records stuck in "uploading" past the deadline as "error"."""
    cutoff = timezone.now() - timedelta(seconds=settings.UPLOAD_STALE_AFTER_SECONDS)
    expired = RecordStore().expire_stale(cutoff)
    if expired:
        logger.warning("Expired %d upload(s) stuck since before %s", expired, cutoff.isoformat())
    return expired
