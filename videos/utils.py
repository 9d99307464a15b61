import logging
import os, mimetypes
from pathlib import Path
from uuid import uuid4
from django.conf import settings

logger = logging.getLogger(__name__)


def save_uploaded_file(djangofile) -> str:
    """Save to MEDIA_ROOT/uploads/<uuid>_<name> and return relative path."""
    uploads_dir = Path(settings.MEDIA_ROOT) / "uploads"
    uploads_dir.mkdir(parents=True, exist_ok=True)
    safe_name = f"{uuid4().hex}_{os.path.basename(djangofile.name or 'video')}"
    dest = uploads_dir / safe_name
    try:
        with open(dest, "wb") as f:
            for chunk in djangofile.chunks():
                f.write(chunk)
    except OSError:
        dest.unlink(missing_ok=True)
        raise
    # return path relative to MEDIA_ROOT
    return str(dest.relative_to(settings.MEDIA_ROOT))


def staged_path(rel_path: str) -> Path:
    return Path(settings.MEDIA_ROOT) / rel_path


def discard_staged_file(rel_path: str) -> None:
    """Remove a staged upload; a missing file is not an error."""
    if not rel_path:
        return
    try:
        staged_path(rel_path).unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not remove staged file %s", rel_path, exc_info=True)


def guess_content_type(filename: str, declared: str | None = None) -> str:
    """Prefer the client-declared type; otherwise guess from the extension."""
    if declared and declared != "application/octet-stream":
        return declared
    mime, _ = mimetypes.guess_type(filename or "")
    return mime or declared or "application/octet-stream"
