"""
Detached half of the upload flow.

Stages run strictly in order inside one background task:

    send_to_host          create a one-time upload target and stream the file
    wait_for_playback_id  poll upload -> asset -> playback id on a bounded budget
    reconcile             write exactly one terminal status onto the record

Nothing here raises to an HTTP caller; the record's status is the only
outcome anyone else can observe.
"""

import logging
import time
from typing import BinaryIO, Callable, Optional

from .exceptions import PersistenceError, UploadPipelineError, VideoHostError
from .models import Technique
from .mux import MuxClient, UploadTarget
from .retry import RetryPolicy, retry_until
from .store import RecordStore
from .utils import discard_staged_file, staged_path

logger = logging.getLogger(__name__)


def send_to_host(host: MuxClient, source: BinaryIO, content_type: Optional[str]) -> UploadTarget:
    """Upload-target stage. Single-use target, so no retry here."""
    target = host.create_upload_target()
    host.transfer(target.url, source, content_type)
    logger.info("Transferred file to Mux upload %s", target.upload_id)
    return target


def wait_for_playback_id(
    host: MuxClient,
    upload_id: str,
    policy: RetryPolicy,
    *,
    sleeper: Callable[[float], None] = time.sleep,
) -> str:
    """
    Completion-poll stage.

    Each attempt asks for the upload's asset id and, once there is one, for
    the asset's playback ids. A failed query counts as "not ready yet".
    Raises PollTimeoutError when the budget is spent.
    """

    def attempt(n: int) -> Optional[str]:
        try:
            asset_id = host.get_upload_status(upload_id)
            if not asset_id:
                logger.debug("Poll %d: upload %s has no asset yet", n, upload_id)
                return None
            playback_ids = host.get_asset_status(asset_id)
        except VideoHostError as e:
            logger.info("Poll %d for upload %s failed: %s", n, upload_id, e)
            return None

        if not playback_ids:
            logger.debug("Poll %d: asset %s has no playback id yet", n, asset_id)
            return None
        return playback_ids[0]

    return retry_until(attempt, policy, sleeper=sleeper)


def reconcile(store: RecordStore, record_id, playback_id: Optional[str] = None) -> Optional[str]:
    """
    Reconciliation stage: one terminal write per run.

    With a playback id the record becomes a draft; without one, or if that
    write fails, it becomes an error. Returns the status written, or None if
    nothing could be written.
    """
    if playback_id:
        try:
            if store.mark_ready(record_id, playback_id):
                logger.info("Record %s ready with playback id %s", record_id, playback_id)
                return Technique.Status.DRAFT
            return None
        except PersistenceError:
            logger.exception("Saving playback id for %s failed; falling back to error", record_id)

    try:
        if store.mark_failed(record_id):
            logger.info("Record %s marked as error", record_id)
            return Technique.Status.ERROR
    except PersistenceError:
        logger.exception("Record %s could not be marked as error; left uploading", record_id)
    return None


def run_pipeline(
    record_id,
    *,
    store: RecordStore,
    host: MuxClient,
    policy: RetryPolicy,
    sleeper: Callable[[float], None] = time.sleep,
) -> Optional[str]:
    """Drive one staged upload to a terminal status and remove the staged file."""
    record = store.get(record_id)
    if record.status != Technique.Status.UPLOADING:
        logger.warning("Record %s is already %s; nothing to do", record_id, record.status)
        return None

    logger.info("Starting upload pipeline for record %s", record_id)
    playback_id = None
    try:
        with open(staged_path(record.source_path), "rb") as source:
            target = send_to_host(host, source, record.content_type)
        playback_id = wait_for_playback_id(host, target.upload_id, policy, sleeper=sleeper)
    except UploadPipelineError as e:
        logger.warning("Upload pipeline for %s failed: %s", record_id, e)
    except Exception:
        logger.exception("Upload pipeline for %s crashed", record_id)
        reconcile(store, record_id)
        raise
    finally:
        discard_staged_file(record.source_path)

    return reconcile(store, record_id, playback_id)
