from decimal import InvalidOperation

from django.db import DatabaseError, InterfaceError, OperationalError

from .exceptions import StoreUnavailableError, WriteError
from .models import Product
from .utils.normalizer import ProductRecord


def upsert_product(record: ProductRecord) -> bool:
    """Create or fully replace the product identified by ``record.unique_key``.

    Every attribute other than the key is overwritten, so columns missing from
    the row clear whatever was stored before. Returns ``True`` when a new
    product was created.

    A lost connection raises ``StoreUnavailableError``; any other rejection of
    the row (integrity, data, range) raises the row-scoped ``WriteError``.
    """
    if not record.unique_key:
        raise ValueError("ProductRecord.unique_key is required for an upsert.")

    try:
        _, created = Product.objects.update_or_create(
            unique_key=record.unique_key,
            defaults=record.defaults(),
        )
    except (OperationalError, InterfaceError) as exc:
        raise StoreUnavailableError(f"Product store unavailable: {exc}") from exc
    except (DatabaseError, InvalidOperation) as exc:
        raise WriteError(
            f"Failed to upsert product with UNIQUE_KEY '{record.unique_key}': {exc}"
        ) from exc
    return created
