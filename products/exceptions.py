class IngestionError(Exception):
    """Base class for product import errors."""


class StagingError(IngestionError):
    """The uploaded file could not be validated or stored."""


class UploadNotFoundError(IngestionError):
    def __init__(self, upload_id) -> None:
        super().__init__(f"UploadJob with id={upload_id} not found.")
        self.upload_id = upload_id


class InvalidStatusTransition(IngestionError):
    pass


class RowError(IngestionError):
    """A single row is unusable; the import skips it and carries on."""


class WriteError(RowError):
    """The product store rejected a single row."""


class RunError(IngestionError):
    """A failure that ends the whole import run."""


class CSVReadError(RunError, IOError):
    """The staged CSV file could not be opened or read."""


class StoreUnavailableError(RunError):
    """The product store could not be reached; no further row can be written."""
