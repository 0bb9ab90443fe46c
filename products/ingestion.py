"""Background import of a staged product CSV file.

One ``CSVIngestion`` drives one run over one UploadJob: it streams the staged
file, resolves the header, normalizes and upserts each data row in order, and
moves the job through ``pending -> processing -> completed | failed``. Bad
rows are counted as skipped and never stop the run. The staged file is
removed on every exit path once the run has started.
"""
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Type

from django.conf import settings

from . import uploads
from .exceptions import (
    InvalidStatusTransition,
    RowError,
    RunError,
    UploadNotFoundError,
    WriteError,
)
from .models import UploadJob
from .upsert import upsert_product
from .utils.csv_stream import DEFAULT_FIELD_SIZE_LIMIT, CSVStreamReader
from .utils.normalizer import ProductRecord, is_blank_row, normalize_row, resolve_header

default_logger = logging.getLogger(__name__)

MAX_ERROR_MESSAGE_LENGTH = 2000


class RowStatus(str, Enum):
    OK = "ok"
    SKIP = "skip"
    FATAL = "fatal"


@dataclass(frozen=True)
class RowResult:
    status: RowStatus
    record: Optional[ProductRecord] = None
    created: bool = False
    reason: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, record: ProductRecord, created: bool) -> "RowResult":
        return cls(RowStatus.OK, record=record, created=created)

    @classmethod
    def skip(cls, reason: str) -> "RowResult":
        return cls(RowStatus.SKIP, reason=reason)

    @classmethod
    def fatal(cls, error: BaseException) -> "RowResult":
        return cls(RowStatus.FATAL, reason=str(error), error=error)


@dataclass
class IngestionResult:
    upload_id: int
    status: Optional[str]
    processed: int = 0
    skipped: int = 0
    created: int = 0
    updated: int = 0
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


class CSVIngestion:
    def __init__(
        self,
        upload_id: int,
        file_path,
        *,
        logger: Optional[logging.Logger] = None,
        reader_class: Type[CSVStreamReader] = CSVStreamReader,
    ) -> None:
        self.upload_id = upload_id
        self.file_path = Path(file_path)
        self.logger = logger or default_logger
        self.reader_class = reader_class
        self.header: Optional[List[str]] = None

    def _reader(self) -> CSVStreamReader:
        return self.reader_class(
            self.file_path,
            encoding=getattr(settings, "PRODUCT_IMPORT_ENCODING", "utf-8"),
            delimiter=getattr(settings, "PRODUCT_IMPORT_DELIMITER", ","),
            field_size_limit=getattr(
                settings, "PRODUCT_IMPORT_CSV_FIELD_SIZE_LIMIT", DEFAULT_FIELD_SIZE_LIMIT
            ),
        )

    def run(self) -> IngestionResult:
        try:
            job = uploads.get_upload(self.upload_id)
        except UploadNotFoundError as exc:
            self.logger.error("%s Aborting import of %s.", exc, self.file_path)
            return IngestionResult(self.upload_id, status=None, error="Upload job not found.")

        if job.is_terminal:
            self.logger.warning(
                "Upload %s ('%s') is already %s; not importing it again.",
                job.pk,
                job.file_name,
                job.status,
            )
            return IngestionResult(
                job.pk,
                status=job.status,
                processed=job.processed_rows,
                skipped=job.skipped_rows,
                error=job.error_message or None,
            )

        job = uploads.transition(job.pk, UploadJob.Status.PROCESSING)
        self.logger.info(
            "Started import of '%s' (upload %s) from %s.", job.file_name, job.pk, self.file_path
        )

        result = IngestionResult(job.pk, status=UploadJob.Status.PROCESSING)
        try:
            self._consume(job, result)
            uploads.transition(
                job.pk,
                UploadJob.Status.COMPLETED,
                processed_rows=result.processed,
                skipped_rows=result.skipped,
                error_message="",
            )
            result.status = UploadJob.Status.COMPLETED
            self.logger.info(
                "Import of '%s' (upload %s) completed. Processed rows: %s, skipped rows: %s "
                "(created %s, updated %s).",
                job.file_name,
                job.pk,
                result.processed,
                result.skipped,
                result.created,
                result.updated,
            )
        except Exception as exc:
            self.logger.exception("Import of '%s' (upload %s) failed.", job.file_name, job.pk)
            result.status = UploadJob.Status.FAILED
            result.error = str(exc) or exc.__class__.__name__
            uploads.transition(
                job.pk,
                UploadJob.Status.FAILED,
                processed_rows=result.processed,
                skipped_rows=result.skipped,
                error_message=result.error[:MAX_ERROR_MESSAGE_LENGTH],
            )
        finally:
            self._remove_staged_file()
        return result

    def _consume(self, job: UploadJob, result: IngestionResult) -> None:
        self.header = None
        for line_number, row in self._reader().iter_numbered():
            if self.header is None:
                if is_blank_row(row):
                    result.skipped += 1
                    self.logger.warning(
                        "Skipping blank line %s before the header of '%s' (upload %s).",
                        line_number,
                        job.file_name,
                        job.pk,
                    )
                    continue
                self.header = resolve_header(row)
                continue

            outcome = self.process_row(line_number, row)
            if outcome.status is RowStatus.OK:
                result.processed += 1
                if outcome.created:
                    result.created += 1
                else:
                    result.updated += 1
            elif outcome.status is RowStatus.SKIP:
                result.skipped += 1
                self.logger.warning(
                    "Skipping line %s of '%s' (upload %s): %s",
                    line_number,
                    job.file_name,
                    job.pk,
                    outcome.reason,
                )
            else:
                raise outcome.error

        if self.header is None:
            raise RunError("CSV file must include a header row.")

    def process_row(self, line_number: int, row: Sequence[object]) -> RowResult:
        """Normalize and upsert one data row, reporting the outcome as a tag."""
        try:
            record = normalize_row(row, self.header)
        except RowError as exc:
            return RowResult.skip(str(exc))
        except Exception as exc:
            return RowResult.fatal(exc)

        try:
            created = upsert_product(record)
        except WriteError as exc:
            self.logger.error("Line %s: %s", line_number, exc)
            return RowResult.skip(str(exc))
        except Exception as exc:
            return RowResult.fatal(exc)

        return RowResult.ok(record, created)

    def handle_failure(self, exc: BaseException) -> None:
        """Terminal failure handler for the host scheduler.

        Called at most once after the host gave up retrying. Marks the job
        failed unless it already completed, and removes the staged file if a
        crashed run left it behind.
        """
        try:
            job = uploads.get_upload(self.upload_id)
        except UploadNotFoundError:
            self.logger.error(
                "Import failed for unknown upload %s: %s", self.upload_id, exc
            )
            return

        try:
            if job.status == UploadJob.Status.FAILED:
                self.logger.error(
                    "Import failed for upload %s ('%s'), already marked failed: %s",
                    job.pk,
                    job.file_name,
                    exc,
                )
                return
            uploads.transition(
                job.pk,
                UploadJob.Status.FAILED,
                error_message=(str(exc) or exc.__class__.__name__)[:MAX_ERROR_MESSAGE_LENGTH],
            )
        except InvalidStatusTransition:
            self.logger.warning(
                "Upload %s ('%s') is %s; not marking it failed.", job.pk, job.file_name, job.status
            )
        else:
            self.logger.error(
                "Import failed for upload %s ('%s'): %s", job.pk, job.file_name, exc
            )
        finally:
            self._remove_staged_file()

    def _remove_staged_file(self) -> None:
        try:
            if self.file_path.is_file():
                self.file_path.unlink()
                self.logger.info("Deleted staged file %s", self.file_path)
        except OSError:
            self.logger.exception("Failed to delete staged file %s", self.file_path)
