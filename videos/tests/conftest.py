from pathlib import Path

import pytest

from videos.models import Technique
from videos.store import RecordStore


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    """Stage uploads in a throwaway directory."""
    settings.MEDIA_ROOT = tmp_path
    settings.UPLOAD_POLL_DELAY_SECONDS = 0
    return tmp_path


@pytest.fixture
def store():
    return RecordStore()


@pytest.fixture
def staged_record(store, media_root):
    """An "uploading" record whose staged file exists on disk."""
    uploads = Path(media_root) / "uploads"
    uploads.mkdir(parents=True, exist_ok=True)
    (uploads / "abc_armbar.mp4").write_bytes(b"\x00" * 2048)

    record_id = store.create(
        title="Armbar",
        position="Guard",
        user_id="u1",
        thumbnail_time=12,
        source_path="uploads/abc_armbar.mp4",
        content_type="video/mp4",
    )
    return Technique.objects.get(pk=record_id)
