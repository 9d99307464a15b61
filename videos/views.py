import logging

from rest_framework import status, views
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .exceptions import DispatchError, PersistenceError, ValidationError
from .intake import start_upload
from .models import Technique
from .serializers import TechniqueSerializer, UploadCreateSerializer

logger = logging.getLogger(__name__)


class UploadTechniqueView(views.APIView):
    """
    Accepts a video plus metadata, creates the record in "uploading" and
    queues the Mux upload. Clients poll the detail view for the outcome.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        ser = UploadCreateSerializer(data=request.data)
        if not ser.is_valid():
            return Response({"error": "Invalid upload", "details": ser.errors}, status=400)

        data = dict(ser.validated_data)
        video = data.pop("video", None)
        try:
            result = start_upload(video, data)
        except ValidationError as e:
            return Response({"error": str(e)}, status=400)
        except PersistenceError as e:
            logger.error("Upload intake failed: %s", e)
            return Response({"error": "Failed to create video record"}, status=500)
        except DispatchError as e:
            logger.error("Upload intake failed: %s", e)
            return Response({"error": "Failed to start upload"}, status=500)

        result["message"] = "Upload started successfully"
        return Response(result, status=status.HTTP_202_ACCEPTED)


class TechniqueDetailView(views.APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, technique_id):
        try:
            technique = Technique.objects.get(pk=technique_id)
        except Technique.DoesNotExist:
            return Response({"detail": "Not found"}, status=404)
        return Response(TechniqueSerializer(technique).data)


class TechniqueListView(views.APIView):
    """A user's techniques, newest first; includes uploads still in flight."""
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        user_id = request.query_params.get("userId")
        if not user_id:
            return Response({"error": "userId is required"}, status=400)

        qs = Technique.objects.filter(user_id=user_id)
        wanted = request.query_params.get("status")
        if wanted:
            if wanted not in Technique.Status.values:
                return Response({"error": f"Unknown status: {wanted}"}, status=400)
            qs = qs.filter(status=wanted)
        return Response(TechniqueSerializer(qs, many=True).data)
