import uuid
from pathlib import Path

import pytest
from rest_framework.test import APIClient

from tests.factories import UploadJobFactory

FULL_HEADER = (
    "UNIQUE_KEY,PRODUCT_TITLE,PRODUCT_DESCRIPTION,STYLE#,"
    "SANMAR_MAINFRAME_COLOR,SIZE,COLOR_NAME,PIECE_PRICE"
)


@pytest.fixture(autouse=True)
def _temp_media(settings, tmp_path):
    """Point MEDIA_ROOT at a temporary directory for every test."""
    settings.MEDIA_ROOT = tmp_path / "media"
    return settings.MEDIA_ROOT


@pytest.fixture
def client():
    """Return a DRF API client."""
    return APIClient()


@pytest.fixture
def staged_file(_temp_media):
    """Write CSV content (str or bytes) where the uploader would stage it."""

    def _write(content) -> Path:
        uploads_dir = Path(_temp_media) / "uploads"
        uploads_dir.mkdir(parents=True, exist_ok=True)
        path = uploads_dir / f"{uuid.uuid4().hex}.csv"
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def stage_csv(staged_file):
    """Stage CSV content and create the pending UploadJob that points at it."""

    def _stage(content, file_name="products.csv"):
        path = staged_file(content)
        return UploadJobFactory(file_name=file_name, file_path=str(path))

    return _stage
