import logging
from datetime import datetime
from uuid import UUID

from django.db import DatabaseError
from django.utils import timezone

from .exceptions import PersistenceError
from .models import Technique

logger = logging.getLogger(__name__)


class RecordStore:
    """
    Narrow persistence handle for Technique upload records.

    Every write after creation is conditional on the record still being
    "uploading", so terminal states can never be left again. Database
    failures surface as PersistenceError.
    """

    def __init__(self, model=Technique):
        self.model = model

    def create(self, **fields) -> UUID:
        fields.setdefault("status", Technique.Status.UPLOADING)
        try:
            record = self.model.objects.create(**fields)
        except DatabaseError as e:
            raise PersistenceError(f"Could not create upload record: {e}") from e
        return record.pk

    def get(self, record_id) -> Technique:
        try:
            return self.model.objects.get(pk=record_id)
        except DatabaseError as e:
            raise PersistenceError(f"Could not load record {record_id}: {e}") from e

    def update(self, record_id, **fields) -> bool:
        """
        Apply ``fields`` only if the record is still uploading.
        Returns False when no row matched (already terminal, or gone).
        """
        try:
            matched = (
                self.model.objects
                .filter(pk=record_id, status=Technique.Status.UPLOADING)
                .update(updated_at=timezone.now(), **fields)
            )
        except DatabaseError as e:
            raise PersistenceError(f"Could not update record {record_id}: {e}") from e

        if matched == 0:
            logger.warning("Record %s is not uploading; update %s skipped", record_id, sorted(fields))
            return False
        return True

    def mark_ready(self, record_id, playback_id: str) -> bool:
        return self.update(
            record_id,
            playback_id=playback_id,
            status=Technique.Status.DRAFT,
            thumbnail_time=0,
        )

    def mark_failed(self, record_id) -> bool:
        return self.update(record_id, status=Technique.Status.ERROR)

    def delete(self, record_id) -> None:
        try:
            self.model.objects.filter(pk=record_id).delete()
        except DatabaseError as e:
            raise PersistenceError(f"Could not delete record {record_id}: {e}") from e

    def expire_stale(self, before: datetime) -> int:
        """Move every record still uploading since ``before`` to error."""
        try:
            return (
                self.model.objects
                .filter(status=Technique.Status.UPLOADING, created_at__lt=before)
                .update(status=Technique.Status.ERROR, updated_at=timezone.now())
            )
        except DatabaseError as e:
            raise PersistenceError(f"Could not expire stale uploads: {e}") from e
