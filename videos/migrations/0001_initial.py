import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Technique",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(
                        choices=[("uploading", "Uploading"), ("draft", "Draft"), ("error", "Error")],
                        default="uploading",
                        max_length=16,
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("position", models.CharField(max_length=255)),
                ("user_id", models.CharField(db_index=True, max_length=255)),
                ("description", models.TextField(blank=True, null=True)),
                ("thumbnail_time", models.FloatField(default=0)),
                ("playback_id", models.CharField(blank=True, max_length=255, null=True)),
                ("source_path", models.CharField(blank=True, default="", max_length=512)),
                ("content_type", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("playback_id__isnull", False), ("status", "draft")),
                            models.Q(models.Q(("status", "draft"), _negated=True), ("playback_id__isnull", True)),
                            _connector="OR",
                        ),
                        name="technique_playback_id_iff_draft",
                    ),
                ],
            },
        ),
    ]
