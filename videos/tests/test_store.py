from datetime import timedelta

import pytest
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from videos.exceptions import PersistenceError
from videos.models import Technique
from videos.store import RecordStore


@pytest.mark.django_db
def test_create_defaults_to_uploading(store):
    record_id = store.create(title="Kimura", position="Side control", user_id="u2")

    record = store.get(record_id)
    assert record.status == Technique.Status.UPLOADING
    assert record.playback_id is None
    assert record.thumbnail_time == 0
    assert record.description is None


@pytest.mark.django_db
def test_mark_ready_sets_playback_and_resets_thumbnail(store, staged_record):
    assert store.mark_ready(staged_record.pk, "pb_123") is True

    staged_record.refresh_from_db()
    assert staged_record.status == Technique.Status.DRAFT
    assert staged_record.playback_id == "pb_123"
    assert staged_record.thumbnail_time == 0
    assert staged_record.title == "Armbar"


@pytest.mark.django_db
def test_delete_removes_the_record(store, staged_record):
    store.delete(staged_record.pk)

    assert Technique.objects.count() == 0
    # deleting again is a no-op
    store.delete(staged_record.pk)


@pytest.mark.django_db
def test_mark_failed_leaves_other_fields_alone(store, staged_record):
    assert store.mark_failed(staged_record.pk) is True

    staged_record.refresh_from_db()
    assert staged_record.status == Technique.Status.ERROR
    assert staged_record.playback_id is None
    assert staged_record.thumbnail_time == 12


@pytest.mark.django_db
@pytest.mark.parametrize("first", ["ready", "failed"])
def test_terminal_records_are_never_updated_again(store, staged_record, first):
    if first == "ready":
        store.mark_ready(staged_record.pk, "pb_123")
    else:
        store.mark_failed(staged_record.pk)
    staged_record.refresh_from_db()
    before = (staged_record.status, staged_record.playback_id)

    assert store.mark_failed(staged_record.pk) is False
    assert store.mark_ready(staged_record.pk, "pb_other") is False

    staged_record.refresh_from_db()
    assert (staged_record.status, staged_record.playback_id) == before


@pytest.mark.django_db
def test_update_of_unknown_record_matches_nothing(store):
    assert store.mark_failed("00000000-0000-0000-0000-000000000000") is False


@pytest.mark.django_db
def test_playback_id_requires_draft_status():
    with pytest.raises(IntegrityError), transaction.atomic():
        Technique.objects.create(title="t", position="p", user_id="u", status="draft")
    with pytest.raises(IntegrityError), transaction.atomic():
        Technique.objects.create(title="t", position="p", user_id="u", status="error", playback_id="pb_1")


@pytest.mark.django_db
def test_expire_stale_only_touches_old_uploading_records(store):
    old = store.create(title="old", position="p", user_id="u")
    fresh = store.create(title="fresh", position="p", user_id="u")
    done = store.create(title="done", position="p", user_id="u")
    store.mark_ready(done, "pb_1")
    long_ago = timezone.now() - timedelta(hours=3)
    Technique.objects.filter(pk__in=[old, done]).update(created_at=long_ago)

    expired = store.expire_stale(timezone.now() - timedelta(hours=1))

    assert expired == 1
    assert store.get(old).status == Technique.Status.ERROR
    assert store.get(fresh).status == Technique.Status.UPLOADING
    assert store.get(done).status == Technique.Status.DRAFT


class _BrokenManager:
    def create(self, **fields):
        raise DatabaseError("connection refused")

    def filter(self, **lookups):
        raise DatabaseError("connection refused")


class _BrokenModel:
    objects = _BrokenManager()


def test_database_errors_become_persistence_errors():
    store = RecordStore(model=_BrokenModel)

    with pytest.raises(PersistenceError):
        store.create(title="t", position="p", user_id="u")
    with pytest.raises(PersistenceError):
        store.mark_failed("some-id")
