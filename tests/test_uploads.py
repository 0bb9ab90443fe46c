from pathlib import Path

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.files.uploadedfile import SimpleUploadedFile

from products import uploads
from products.exceptions import InvalidStatusTransition, StagingError, UploadNotFoundError
from products.models import UploadJob
from tests.factories import UploadJobFactory

Status = UploadJob.Status


@pytest.mark.django_db
def test_status_moves_forward_through_the_lifecycle():
    job = UploadJobFactory()

    uploads.transition(job.pk, Status.PROCESSING)
    finished = uploads.transition(job.pk, Status.COMPLETED, processed_rows=2, skipped_rows=1)

    assert finished.status == Status.COMPLETED
    assert finished.processed_rows == 2
    assert finished.skipped_rows == 1


@pytest.mark.django_db
@pytest.mark.parametrize(
    "current, target",
    [
        (Status.COMPLETED, Status.PROCESSING),
        (Status.COMPLETED, Status.FAILED),
        (Status.FAILED, Status.PROCESSING),
        (Status.FAILED, Status.COMPLETED),
        (Status.PENDING, Status.COMPLETED),
    ],
)
def test_status_never_reverts(current, target):
    job = UploadJobFactory(status=current)

    with pytest.raises(InvalidStatusTransition):
        uploads.transition(job.pk, target)

    job.refresh_from_db()
    assert job.status == current


@pytest.mark.django_db
def test_pending_is_not_a_transition_target():
    job = UploadJobFactory(status=Status.PROCESSING)

    with pytest.raises(InvalidStatusTransition):
        uploads.transition(job.pk, Status.PENDING)


@pytest.mark.django_db
def test_failed_can_be_reasserted():
    job = UploadJobFactory(status=Status.FAILED)

    assert uploads.transition(job.pk, Status.FAILED).status == Status.FAILED


@pytest.mark.django_db
def test_processing_can_be_reentered_on_retry():
    job = UploadJobFactory(status=Status.PROCESSING)

    assert uploads.transition(job.pk, Status.PROCESSING).status == Status.PROCESSING


@pytest.mark.django_db
def test_unknown_upload():
    with pytest.raises(UploadNotFoundError):
        uploads.get_upload(12345)
    with pytest.raises(UploadNotFoundError):
        uploads.transition(12345, Status.PROCESSING)


@pytest.mark.django_db
def test_list_uploads_is_newest_first():
    first = UploadJobFactory()
    second = UploadJobFactory(status=Status.COMPLETED)
    third = UploadJobFactory(status=Status.FAILED)

    listed = uploads.list_uploads()

    assert [item["id"] for item in listed] == [third.pk, second.pk, first.pk]
    assert set(listed[0]) == {"id", "file_name", "status", "created_at"}
    assert listed[0]["status"] == Status.FAILED


@pytest.mark.django_db
def test_stage_upload_stores_file_and_creates_pending_job(_temp_media):
    content = b"UNIQUE_KEY,PRODUCT_TITLE\nSKU1,Shirt\n"

    job = uploads.stage_upload(SimpleUploadedFile("catalog.csv", content, content_type="text/csv"))

    assert job.status == Status.PENDING
    assert job.file_name == "catalog.csv"
    staged = Path(job.file_path)
    assert staged.parent == Path(_temp_media) / "uploads"
    assert staged.read_bytes() == content


@pytest.mark.django_db
@pytest.mark.parametrize(
    "uploaded",
    [
        None,
        SimpleUploadedFile("empty.csv", b""),
        SimpleUploadedFile("catalog.xlsx", b"PK\x03\x04"),
        SimpleUploadedFile("too_big.csv", b"UNIQUE_KEY\n" + b"SKU\n" * 10),
    ],
)
def test_stage_upload_rejects_bad_files(settings, uploaded):
    settings.PRODUCT_IMPORT_MAX_UPLOAD_SIZE = 32

    with pytest.raises(StagingError):
        uploads.stage_upload(uploaded)

    assert UploadJob.objects.count() == 0


@pytest.mark.django_db
def test_stage_local_file_copies_the_source(tmp_path):
    source = tmp_path / "catalog.csv"
    source.write_text("UNIQUE_KEY\nSKU1\n", encoding="utf-8")

    job = uploads.stage_local_file(source)

    assert source.exists()
    assert Path(job.file_path) != source
    assert Path(job.file_path).read_text(encoding="utf-8") == "UNIQUE_KEY\nSKU1\n"
    assert job.file_name == "catalog.csv"


@pytest.mark.django_db
def test_stage_local_file_missing(tmp_path):
    with pytest.raises(StagingError):
        uploads.stage_local_file(tmp_path / "missing.csv")


@pytest.mark.django_db
def test_transitions_are_broadcast_to_the_upload_group():
    job = UploadJobFactory()
    channel_layer = get_channel_layer()
    channel_name = async_to_sync(channel_layer.new_channel)()
    async_to_sync(channel_layer.group_add)(f"upload_{job.pk}", channel_name)

    uploads.transition(job.pk, Status.PROCESSING)
    message = async_to_sync(channel_layer.receive)(channel_name)

    assert message["type"] == "upload.status"
    assert message["payload"]["upload_id"] == job.pk
    assert message["payload"]["status"] == Status.PROCESSING
