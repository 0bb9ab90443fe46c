import logging
from typing import Dict

from celery import Task, shared_task
from django.conf import settings
from django.db import InterfaceError, OperationalError

from .ingestion import CSVIngestion

logger = logging.getLogger(__name__)


class ImportCSVTask(Task):
    """Hands the terminal failure of an import to ``CSVIngestion.handle_failure``."""

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        upload_id = kwargs.get("upload_id", args[0] if args else None)
        file_path = kwargs.get("file_path", args[1] if len(args) > 1 else "")
        logger.error("import_csv_task %s gave up on upload %s: %s", task_id, upload_id, exc)
        if upload_id is None:
            return
        CSVIngestion(upload_id, file_path).handle_failure(exc)


@shared_task(
    bind=True,
    base=ImportCSVTask,
    name="products.import_csv_task",
    autoretry_for=(OperationalError, InterfaceError),
    retry_backoff=True,
    max_retries=getattr(settings, "PRODUCT_IMPORT_TASK_MAX_RETRIES", 3),
)
def import_csv_task(self, upload_id: int, file_path: str) -> Dict[str, object]:
    """Import a staged CSV file of products for one UploadJob."""
    logger.info(
        "Starting import_csv_task task_id=%s upload_id=%s file_path=%s",
        self.request.id,
        upload_id,
        file_path,
    )
    result = CSVIngestion(upload_id, file_path).run()
    return result.as_dict()
