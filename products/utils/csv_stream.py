import csv
from pathlib import Path
from typing import Iterator, List, Tuple

from ..exceptions import CSVReadError


Row = List[str]
RowWithLineNumber = Tuple[int, Row]

DEFAULT_FIELD_SIZE_LIMIT = 200 * 1024 * 1024


class CSVStreamReader:
    """Lazily iterate over the rows of a delimited text file.

    Bytes that are not valid in ``encoding`` are decoded with
    ``surrogateescape`` so nothing is lost here; the row normalizer strips them.
    """

    def __init__(
        self,
        file_path: Path,
        encoding: str = "utf-8",
        delimiter: str = ",",
        field_size_limit: int = DEFAULT_FIELD_SIZE_LIMIT,
    ) -> None:
        self.file_path = Path(file_path)
        self.encoding = encoding
        self.delimiter = delimiter
        self.field_size_limit = field_size_limit

    def _text_encoding(self) -> str:
        # utf-8-sig drops a leading byte-order mark and otherwise reads plain UTF-8
        if self.encoding.lower().replace("_", "-") in {"utf-8", "utf8"}:
            return "utf-8-sig"
        return self.encoding

    def iter_numbered(self) -> Iterator[RowWithLineNumber]:
        """Yield ``(line_number, row)`` pairs, skipping physically empty lines."""
        # The csv module keeps one process-wide limit (131072 by default); only raise it
        if self.field_size_limit > csv.field_size_limit():
            csv.field_size_limit(self.field_size_limit)
        try:
            with self.file_path.open(
                newline="", encoding=self._text_encoding(), errors="surrogateescape"
            ) as csvfile:
                reader = csv.reader(csvfile, delimiter=self.delimiter)
                for row in reader:
                    if not row:
                        continue
                    yield reader.line_num, row
        except OSError as exc:
            raise CSVReadError(f"Unable to read CSV file {self.file_path}: {exc}") from exc
        except LookupError as exc:
            raise CSVReadError(f"Unknown encoding {self.encoding!r}") from exc
        except csv.Error as exc:
            raise CSVReadError(f"Malformed CSV in {self.file_path}: {exc}") from exc

    def __iter__(self) -> Iterator[Row]:
        for _, row in self.iter_numbered():
            yield row
