import logging
from typing import Callable, Mapping, Optional

from .exceptions import DispatchError, PersistenceError, ValidationError
from .models import Technique
from .store import RecordStore
from .utils import discard_staged_file, guess_content_type, save_uploaded_file

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "position", "userId")


def _clean_thumbnail_time(value) -> float:
    if value is None or value == "":
        return 0
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ValidationError("thumbnailTime must be a number of seconds")
    if seconds < 0:
        raise ValidationError("thumbnailTime must not be negative")
    return seconds


def start_upload(
    file,
    metadata: Mapping,
    *,
    store: Optional[RecordStore] = None,
    dispatch: Optional[Callable[[str], object]] = None,
) -> dict:
    """
    Stage ``file``, create its record in "uploading" and hand the rest of the
    pipeline to the background. Returns as soon as the task is queued.

    Raises ValidationError for missing input, PersistenceError if the file
    cannot be staged or the record created, and DispatchError if the task
    cannot be queued. In every case no record or staged file is left behind.
    """
    if file is None:
        raise ValidationError("No video file uploaded")

    missing = [name for name in REQUIRED_FIELDS if not str(metadata.get(name) or "").strip()]
    if missing:
        raise ValidationError(f"Missing {', '.join(missing)}")

    thumbnail_time = _clean_thumbnail_time(metadata.get("thumbnailTime"))
    store = store or RecordStore()
    if dispatch is None:
        from .tasks import process_upload
        dispatch = process_upload.delay

    try:
        rel_path = save_uploaded_file(file)
    except OSError as e:
        raise PersistenceError(f"Could not stage upload: {e}") from e

    try:
        record_id = store.create(
            title=str(metadata["title"]).strip(),
            position=str(metadata["position"]).strip(),
            user_id=str(metadata["userId"]).strip(),
            description=metadata.get("description") or None,
            thumbnail_time=thumbnail_time,
            source_path=rel_path,
            content_type=guess_content_type(file.name, getattr(file, "content_type", None)),
        )
    except Exception:
        discard_staged_file(rel_path)
        raise
    logger.info("Created record %s for %s (%s)", record_id, file.name, rel_path)

    try:
        dispatch(str(record_id))
    except Exception as e:
        logger.exception("Could not schedule upload pipeline for %s", record_id)
        discard_staged_file(rel_path)
        store.delete(record_id)
        raise DispatchError(f"Could not schedule upload: {e}") from e

    return {"recordId": str(record_id), "status": Technique.Status.UPLOADING.value}
