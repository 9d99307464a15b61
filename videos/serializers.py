from rest_framework import serializers
from .models import Technique


class TechniqueSerializer(serializers.ModelSerializer):
    # JSON names mirror the record's public field names
    userId = serializers.CharField(source="user_id", read_only=True)
    thumbnailTime = serializers.FloatField(source="thumbnail_time", read_only=True)
    playbackId = serializers.CharField(source="playback_id", read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Technique
        fields = [
            "id",
            "status",
            "title",
            "position",
            "userId",
            "description",
            "thumbnailTime",
            "playbackId",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class UploadCreateSerializer(serializers.Serializer):
    """
    Multipart form for a new upload. Presence of the required fields is
    checked by intake so the error message matches every caller.
    """
    video = serializers.FileField(required=False, allow_empty_file=False)
    title = serializers.CharField(required=False, allow_blank=True)
    position = serializers.CharField(required=False, allow_blank=True)
    userId = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    thumbnailTime = serializers.FloatField(required=False, min_value=0)
