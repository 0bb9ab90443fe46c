import logging
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, List, Optional, Sequence

from ..exceptions import RowError, RunError

logger = logging.getLogger(__name__)

UNIQUE_KEY_COLUMN = "UNIQUE_KEY"
PRICE_COLUMN = "PIECE_PRICE"

# Canonical (uppercased) CSV column -> Product attribute.
COLUMN_MAP: Dict[str, str] = {
    UNIQUE_KEY_COLUMN: "unique_key",
    "PRODUCT_TITLE": "product_title",
    "PRODUCT_DESCRIPTION": "product_description",
    "STYLE#": "style_number",
    "SANMAR_MAINFRAME_COLOR": "sanmar_mainframe_color",
    "SIZE": "size",
    "COLOR_NAME": "color_name",
    PRICE_COLUMN: "piece_price",
}

MAX_UNIQUE_KEY_LENGTH = 255
PRICE_QUANTUM = Decimal("0.01")
# Product.piece_price is DECIMAL(10, 2)
MAX_PRICE = Decimal("99999999.99")


@dataclass(frozen=True)
class ProductRecord:
    unique_key: str
    product_title: Optional[str] = None
    product_description: Optional[str] = None
    style_number: Optional[str] = None
    sanmar_mainframe_color: Optional[str] = None
    size: Optional[str] = None
    color_name: Optional[str] = None
    piece_price: Optional[Decimal] = None

    def defaults(self) -> Dict[str, object]:
        """Every attribute except the key, for a full-replace upsert."""
        values = asdict(self)
        values.pop("unique_key")
        return values


def clean_value(value: object, encoding: str = "utf-8") -> str:
    """Coerce ``value`` to text, drop invalid byte sequences and trim it."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        text = value.decode(encoding, errors="ignore")
    else:
        text = str(value)
    # Surrogates left by surrogateescape decoding (or anything else unencodable)
    # become invalid UTF-8 here and are dropped on the way back.
    text = text.encode("utf-8", errors="surrogatepass").decode("utf-8", errors="ignore")
    return text.strip()


def is_blank_row(row: Sequence[object]) -> bool:
    return not any(clean_value(field) for field in row)


def resolve_header(row: Sequence[object]) -> List[str]:
    header = [clean_value(field).upper() for field in row]
    if not any(header):
        raise RunError("CSV header row is empty.")
    if UNIQUE_KEY_COLUMN not in header:
        logger.warning(
            "CSV header has no %s column; every data row will be skipped. Columns: %s",
            UNIQUE_KEY_COLUMN,
            ",".join(header),
        )
    return header


def parse_price(raw: Optional[str]) -> Optional[Decimal]:
    if not raw:
        return None
    try:
        price = Decimal(raw)
    except InvalidOperation:
        logger.debug("Ignoring unparsable price %r", raw)
        return None
    if not price.is_finite():
        logger.debug("Ignoring non-finite price %r", raw)
        return None
    try:
        price = price.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        price = None
    if price is None or abs(price) > MAX_PRICE:
        logger.debug("Ignoring out-of-range price %r", raw)
        return None
    return price


def normalize_row(row: Sequence[object], header: Sequence[str]) -> ProductRecord:
    """Turn one raw data row into a ``ProductRecord``.

    Raises ``RowError`` when the row has to be skipped: it is empty, its field
    count does not match the header, or it has no usable unique key.
    """
    cleaned = [clean_value(field) for field in row]
    if not any(cleaned):
        raise RowError("Row is empty.")
    if len(cleaned) != len(header):
        raise RowError(
            f"Column count mismatch: expected {len(header)}, got {len(cleaned)}."
        )

    data: Dict[str, str] = dict(zip(header, cleaned))
    values: Dict[str, Optional[str]] = {
        attribute: data.get(column) for column, attribute in COLUMN_MAP.items()
    }

    unique_key = values.pop("unique_key")
    if not unique_key:
        raise RowError(f"Missing or empty {UNIQUE_KEY_COLUMN}.")
    if len(unique_key) > MAX_UNIQUE_KEY_LENGTH:
        raise RowError(
            f"{UNIQUE_KEY_COLUMN} longer than {MAX_UNIQUE_KEY_LENGTH} characters."
        )

    piece_price = parse_price(values.pop("piece_price"))
    return ProductRecord(unique_key=unique_key, piece_price=piece_price, **values)
