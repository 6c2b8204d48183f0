"""
import_engine.eav - Convert attribute cells into typed EAV value rows.

Single-responsibility: walk the parsed rows, convert every non-empty
attribute cell to its backend type, and buffer it per type.  A cell
that fails conversion costs one warning and only that value.  Storage
is never touched here.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from db.catalog import BACKEND_TYPES
from import_engine.classifier import ColumnLayout
from import_engine.csv_parser import cell

DATETIME_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d")
_DATETIME_SHAPE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}( [0-9]{2}:[0-9]{2}:[0-9]{2})?")

# Storable ranges of the int and decimal value columns
INT_MIN, INT_MAX = -2**31, 2**31 - 1
DECIMAL_LIMIT = 1e14


@dataclass(frozen=True)
class EavValueRow:
    link_id: int
    attribute_id: int
    store_id: int
    value: Any


@dataclass
class EavBuffer:
    buckets: dict[str, list[EavValueRow]] = field(
        default_factory=lambda: {bt: [] for bt in BACKEND_TYPES}
    )
    warnings: list[str] = field(default_factory=list)
    # (backend_type, link_id, attribute_id) → position in its bucket
    _slots: dict[tuple, int] = field(default_factory=dict, repr=False)

    def add(self, backend_type: str, row: EavValueRow) -> None:
        """Buffer *row*; a later value for the same key replaces the earlier one."""
        key = (backend_type, row.link_id, row.attribute_id)
        bucket = self.buckets[backend_type]
        pos = self._slots.get(key)
        if pos is None:
            self._slots[key] = len(bucket)
            bucket.append(row)
        else:
            bucket[pos] = row

    def counts(self) -> dict[str, int]:
        return {bt: len(rows) for bt, rows in self.buckets.items()}


def parse_int(raw: str) -> int:
    if not raw.isascii() or "_" in raw:
        raise ValueError(f"invalid int: {raw!r}")
    value = int(raw)
    if not INT_MIN <= value <= INT_MAX:
        raise ValueError(f"out of range: {raw!r}")
    return value


def parse_decimal(raw: str, limit: float = DECIMAL_LIMIT) -> float:
    if not raw.isascii() or "_" in raw:
        raise ValueError(f"invalid decimal: {raw!r}")
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {raw!r}")
    if abs(value) >= limit:
        raise ValueError(f"out of range: {raw!r}")
    return value


def parse_datetime(raw: str) -> datetime:
    if not _DATETIME_SHAPE.fullmatch(raw):
        raise ValueError(f"no matching datetime format: {raw!r}")
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    raise ValueError(f"no matching datetime format: {raw!r}")


CONVERTERS = {
    "varchar":  str,
    "text":     str,
    "int":      parse_int,
    "decimal":  parse_decimal,
    "datetime": parse_datetime,
}


def collect_eav(
    rows: list[list[str]],
    layout: ColumnLayout,
    sku_to_id: dict[str, int],
    store_id: int,
) -> EavBuffer:
    buf = EavBuffer()
    if not layout.attributes:
        return buf

    columns = sorted(layout.attributes.values(), key=lambda c: c.index)
    sku_idx = layout.sku_index

    for row in rows:
        sku = cell(row, sku_idx)
        if not sku:
            continue
        link_id = sku_to_id.get(sku)
        if link_id is None:
            continue

        for col in columns:
            raw = cell(row, col.index)
            if not raw:
                continue        # not provided, not "clear"
            try:
                value = CONVERTERS[col.backend_type](raw)
            except ValueError:
                buf.warnings.append(
                    f'sku={sku} attr={col.code}: invalid {col.backend_type} "{raw}"'
                )
                continue
            buf.add(col.backend_type,
                    EavValueRow(link_id, col.attribute_id, store_id, value))
    return buf
