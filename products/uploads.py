"""Upload job persistence: staging, status transitions and the status query."""
import logging
import uuid
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.files import File
from django.db import DatabaseError
from django.utils import timezone

from .exceptions import InvalidStatusTransition, StagingError, UploadNotFoundError
from .models import UploadJob

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".csv", ".txt"}

Status = UploadJob.Status

# target status -> statuses it may be entered from
ALLOWED_TRANSITIONS: Dict[str, Iterable[str]] = {
    Status.PROCESSING: (Status.PENDING, Status.PROCESSING),
    Status.COMPLETED: (Status.PROCESSING,),
    Status.FAILED: (Status.PENDING, Status.PROCESSING, Status.FAILED),
}


def get_uploads_dir() -> Path:
    media_root = Path(getattr(settings, "MEDIA_ROOT", settings.BASE_DIR / "media"))
    uploads_dir = media_root / getattr(settings, "PRODUCT_IMPORT_UPLOAD_SUBDIR", "uploads")
    uploads_dir.mkdir(parents=True, exist_ok=True)
    return uploads_dir


def _validate_upload(original_name: str, size: Optional[int]) -> str:
    if not original_name:
        raise StagingError("Uploaded file has no name.")
    if not size or size <= 0:
        raise StagingError("Uploaded file is empty.")

    max_size = getattr(settings, "PRODUCT_IMPORT_MAX_UPLOAD_SIZE", 200 * 1024 * 1024)
    if size > max_size:
        raise StagingError("Uploaded file exceeds the maximum allowed size.")

    extension = Path(original_name).suffix.lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise StagingError("Only .csv or .txt files are supported.")
    return extension


def _store(uploaded_file, original_name: str) -> UploadJob:
    extension = _validate_upload(original_name, uploaded_file.size)

    try:
        final_path = get_uploads_dir() / f"{uuid.uuid4().hex}{extension}"
        with final_path.open("wb+") as destination:
            for chunk in uploaded_file.chunks():
                destination.write(chunk)
    except OSError as exc:
        logger.error("Failed to store uploaded file '%s': %s", original_name, exc)
        raise StagingError("Failed to store the uploaded file.") from exc

    try:
        job = UploadJob.objects.create(
            file_name=original_name,
            file_path=str(final_path),
            status=Status.PENDING,
        )
    except DatabaseError as exc:
        final_path.unlink(missing_ok=True)
        logger.error("Failed to create UploadJob for '%s': %s", original_name, exc)
        raise StagingError("Failed to register the uploaded file.") from exc

    logger.info("Staged upload id=%s file_name=%s path=%s", job.pk, original_name, final_path)
    return job


def stage_upload(uploaded_file) -> UploadJob:
    """Store an uploaded file and create its ``pending`` UploadJob."""
    if uploaded_file is None:
        raise StagingError("No file uploaded.")
    return _store(uploaded_file, Path(uploaded_file.name or "").name)


def stage_local_file(file_path) -> UploadJob:
    """Copy a file from the local filesystem into the uploads directory."""
    source = Path(file_path)
    if not source.is_file():
        raise StagingError(f"File not found: {source}")
    try:
        with source.open("rb") as handle:
            return _store(File(handle, name=source.name), source.name)
    except PermissionError as exc:
        raise StagingError(f"File is not readable: {source}") from exc


def get_upload(upload_id) -> UploadJob:
    job = UploadJob.objects.filter(pk=upload_id).first()
    if job is None:
        raise UploadNotFoundError(upload_id)
    return job


def transition(upload_id, status: str, **fields) -> UploadJob:
    """Move a job to ``status`` if the state machine allows it.

    The update is conditional on the current status, so two writers can never
    move a job backwards.
    """
    sources = ALLOWED_TRANSITIONS.get(status)
    if sources is None:
        raise InvalidStatusTransition(f"Unknown target status '{status}'.")

    updated = UploadJob.objects.filter(pk=upload_id, status__in=list(sources)).update(
        status=status, updated_at=timezone.now(), **fields
    )
    job = get_upload(upload_id)
    if not updated:
        raise InvalidStatusTransition(
            f"Cannot move upload {upload_id} from '{job.status}' to '{status}'."
        )

    publish_status(job)
    return job


def list_uploads() -> List[Dict[str, object]]:
    """Every upload, newest first, as the polling UI consumes it."""
    return list(
        UploadJob.objects.order_by("-created_at", "-id").values(
            "id", "file_name", "status", "created_at"
        )
    )


def publish_status(job: UploadJob) -> Dict[str, object]:
    payload: Dict[str, object] = {
        "upload_id": job.pk,
        "status": job.status,
        "processed": job.processed_rows,
        "skipped": job.skipped_rows,
        "error": job.error_message or None,
    }
    try:
        channel_layer = get_channel_layer()
        if channel_layer is not None:
            async_to_sync(channel_layer.group_send)(
                f"upload_{job.pk}",
                {"type": "upload.status", "payload": payload},
            )
    except Exception:
        logger.exception("Failed to publish status via Channels for upload %s", job.pk)
    return payload
