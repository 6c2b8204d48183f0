"""
import_engine.stock_json - Stock-only import from JSON records.

Narrower than the CSV path: SKUs are resolved the same way but never
created; unknown or empty SKUs are skipped with a warning.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from db.store import CatalogStore
from import_engine import writers
from import_engine.errors import StockWriteError
from import_engine.importer import DEFAULT_BATCH_SIZE
from import_engine.report import StockImportResult
from import_engine.resolver import chunked, lookup_skus
from import_engine.satellites import QTY_LIMIT, StockRow

logger = logging.getLogger(__name__)

_FLOAT_FIELDS = ("qty", "min_qty", "min_sale_qty", "max_sale_qty")
_FLAG_FIELDS = ("is_in_stock", "manage_stock")


@dataclass(frozen=True)
class StockItemInput:
    sku: str
    qty: float | None = None
    is_in_stock: int | None = None
    manage_stock: int | None = None
    min_qty: float | None = None
    min_sale_qty: float | None = None
    max_sale_qty: float | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "StockItemInput":
        """
        Build from a JSON object; raises ValueError on a wrongly typed field.
        """
        if not isinstance(data, dict):
            raise ValueError("stock item must be an object")
        sku = data.get("sku") or ""
        if not isinstance(sku, str):
            raise ValueError("sku must be a string")
        kwargs = {"sku": sku.strip()}
        for name in _FLOAT_FIELDS:
            value = data.get(name)
            if value is not None:
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"{name} must be a number")
                if abs(value) >= QTY_LIMIT or not math.isfinite(value):
                    raise ValueError(f"{name} out of range")
                kwargs[name] = float(value)
        for name in _FLAG_FIELDS:
            value = data.get(name)
            if value is not None:
                if isinstance(value, bool):
                    value = int(value)
                if not isinstance(value, int) or not 0 <= value <= 0xFFFF:
                    raise ValueError(f"{name} must be an unsigned integer")
                kwargs[name] = value
        return cls(**kwargs)


def import_stock_json(
    store: CatalogStore,
    items: list[StockItemInput],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> StockImportResult:
    """Resolve SKUs and upsert their stock rows; no products are created."""
    if batch_size <= 0:
        batch_size = DEFAULT_BATCH_SIZE

    skus = [it.sku for it in items if it.sku]
    sku_to_id = lookup_skus(store, skus, batch_size) if skus else {}

    rows: list[StockRow] = []
    skipped = 0
    warnings: list[str] = []
    for it in items:
        if not it.sku:
            skipped += 1
            warnings.append("empty sku, skipping")
            continue
        link_id = sku_to_id.get(it.sku)
        if link_id is None:
            skipped += 1
            warnings.append(f"sku={it.sku}: product not found")
            continue

        row = StockRow(link_id=link_id)
        for name in _FLOAT_FIELDS + _FLAG_FIELDS:
            value = getattr(it, name)
            if value is not None:
                setattr(row, name, value)
        rows.append(row)

    try:
        for chunk in chunked(rows, batch_size):
            with store.engine.begin() as conn:
                writers.write_stock(conn, chunk)
    except SQLAlchemyError as exc:
        raise StockWriteError(f"stock upsert: {exc}") from exc

    logger.info(f"Stock import: {len(rows)} imported, {skipped} skipped")
    return StockImportResult(imported=len(rows), skipped=skipped,
                             warnings=tuple(warnings))
