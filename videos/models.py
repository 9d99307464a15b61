import uuid
from django.db import models
from django.db.models import Q


class Technique(models.Model):
    """
    One uploaded technique video and the lifecycle of its upload.

    Only three transitions exist: uploading -> draft, uploading -> error.
    """

    class Status(models.TextChoices):
        UPLOADING = "uploading"
        DRAFT = "draft"
        ERROR = "error"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.UPLOADING)

    title = models.CharField(max_length=255)
    position = models.CharField(max_length=255)
    user_id = models.CharField(max_length=255, db_index=True)
    description = models.TextField(null=True, blank=True)
    thumbnail_time = models.FloatField(default=0)

    playback_id = models.CharField(max_length=255, null=True, blank=True)

    # Staged copy of the upload, relative to MEDIA_ROOT
    source_path = models.CharField(max_length=512, blank=True, default="")
    content_type = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status="draft", playback_id__isnull=False)
                    | (~Q(status="draft") & Q(playback_id__isnull=True))
                ),
                name="technique_playback_id_iff_draft",
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"
