from django.core.management.base import BaseCommand, CommandError

from products.exceptions import StagingError
from products.ingestion import CSVIngestion
from products.models import UploadJob
from products.tasks import import_csv_task
from products.uploads import stage_local_file


class Command(BaseCommand):
    help = "Import products from a CSV file (the file is copied, the original is kept)"

    def add_arguments(self, parser):
        parser.add_argument("file_path", type=str, help="Path to the CSV file")
        parser.add_argument(
            "--async",
            action="store_true",
            dest="run_async",
            help="Queue the import on a Celery worker instead of running it here",
        )

    def handle(self, *args, **options):
        file_path = options["file_path"]

        try:
            job = stage_local_file(file_path)
        except StagingError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(self.style.SUCCESS(f"Staged {file_path} as upload {job.pk}"))

        if options["run_async"]:
            import_csv_task.delay(job.pk, job.file_path)
            self.stdout.write(f"Queued import of upload {job.pk}")
            return

        result = CSVIngestion(job.pk, job.file_path).run()

        self.stdout.write(f"  Status: {result.status}")
        self.stdout.write(f"  Processed: {result.processed}")
        self.stdout.write(f"    Created: {result.created}")
        self.stdout.write(f"    Updated: {result.updated}")
        self.stdout.write(f"  Skipped: {result.skipped}")

        if result.status != UploadJob.Status.COMPLETED:
            raise CommandError(f"Import failed: {result.error}")
        self.stdout.write(self.style.SUCCESS("Import completed"))
