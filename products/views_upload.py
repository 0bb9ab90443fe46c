import logging

from rest_framework import permissions, status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from . import uploads
from .exceptions import StagingError, UploadNotFoundError
from .serializers import UploadJobDetailSerializer, UploadJobSerializer
from .tasks import import_csv_task

logger = logging.getLogger(__name__)


class UploadCSVView(APIView):
    parser_classes = [MultiPartParser, FormParser]
    permission_classes = [permissions.AllowAny]

    def get(self, request, *args, **kwargs):
        serializer = UploadJobSerializer(uploads.list_uploads(), many=True)
        return Response(serializer.data)

    def post(self, request, *args, **kwargs):
        try:
            job = uploads.stage_upload(request.FILES.get("file"))
        except StagingError as exc:
            logger.warning("Rejected upload from %s: %s", request.META.get("REMOTE_ADDR"), exc)
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        import_csv_task.delay(job.pk, job.file_path)

        return Response(
            {"upload_id": job.pk, "status": job.status},
            status=status.HTTP_202_ACCEPTED,
        )


class UploadStatusView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, upload_id: int, *args, **kwargs):
        try:
            job = uploads.get_upload(upload_id)
        except UploadNotFoundError:
            return Response(
                {"upload_id": upload_id, "detail": "Upload not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(UploadJobDetailSerializer(job).data)
