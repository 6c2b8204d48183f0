"""
import_engine.satellites - Stock, media gallery and price index collectors.

Each collector scans the same parsed rows, reads only its own reserved
columns, and returns immediately when none of them is in the header.
Like the EAV collector they only buffer; flushing happens elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial

import config
from import_engine.classifier import ColumnLayout
from import_engine.csv_parser import cell
from import_engine.eav import parse_decimal
from import_engine.field_map import GALLERY_SEPARATOR

DEFAULT_STOCK_ID = 1

# Stock quantities are stored as Numeric(12, 4)
QTY_LIMIT = 1e8


# ── Row types ──────────────────────────────────────────────────────────

@dataclass
class StockRow:
    link_id: int
    stock_id: int = DEFAULT_STOCK_ID
    qty: float = 0.0
    is_in_stock: int = 1
    manage_stock: int = 1
    min_qty: float = 0.0
    min_sale_qty: float = 0.0
    max_sale_qty: float = 0.0

    def as_params(self) -> dict:
        return {
            "product_id": self.link_id,
            "stock_id": self.stock_id,
            "qty": self.qty,
            "is_in_stock": self.is_in_stock,
            "manage_stock": self.manage_stock,
            "min_qty": self.min_qty,
            "min_sale_qty": self.min_sale_qty,
            "max_sale_qty": self.max_sale_qty,
        }


@dataclass(frozen=True)
class GalleryRow:
    link_id: int
    attribute_id: int
    value: str
    media_type: str = "image"
    disabled: int = 0


@dataclass
class PriceRow:
    link_id: int
    customer_group_id: int
    website_id: int
    price: float = 0.0
    final_price: float = 0.0
    min_price: float = 0.0
    max_price: float = 0.0
    tier_price: float = 0.0

    def as_params(self) -> dict:
        return {
            "entity_id": self.link_id,
            "customer_group_id": self.customer_group_id,
            "website_id": self.website_id,
            "price": self.price,
            "final_price": self.final_price,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "tier_price": self.tier_price,
        }


@dataclass
class SatelliteBuffer:
    rows: list = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# ── Parsing helpers ────────────────────────────────────────────────────

def parse_flag(raw: str) -> int:
    """Unsigned 16-bit integer (0/1 in practice)."""
    if not raw.isascii() or "_" in raw:
        raise ValueError(f"invalid flag: {raw!r}")
    value = int(raw)
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"out of range: {raw!r}")
    return value


parse_qty = partial(parse_decimal, limit=QTY_LIMIT)


def _sku_rows(rows, layout: ColumnLayout, sku_to_id: dict[str, int]):
    """Yield (sku, link_id, row) for rows whose SKU resolved."""
    sku_idx = layout.sku_index
    for row in rows:
        sku = cell(row, sku_idx)
        if not sku:
            continue
        link_id = sku_to_id.get(sku)
        if link_id is not None:
            yield sku, link_id, row


class _RowReader:
    """Per-row typed reads that record a warning on bad input."""

    def __init__(self, sku: str, row: list[str], layout: ColumnLayout, warnings: list[str]):
        self.sku = sku
        self.row = row
        self.layout = layout
        self.warnings = warnings

    def read(self, column: str, parse):
        """Return (provided, value); value is None when parsing failed."""
        raw = cell(self.row, self.layout.position(column))
        if not raw:
            return False, None
        try:
            return True, parse(raw)
        except ValueError:
            self.warnings.append(f'sku={self.sku}: invalid {column} "{raw}"')
            return True, None


# ── Stock ──────────────────────────────────────────────────────────────

_STOCK_OPTIONAL = (
    ("manage_stock", parse_flag),
    ("min_qty", parse_qty),
    ("min_sale_qty", parse_qty),
    ("max_sale_qty", parse_qty),
)


def collect_stock(rows, layout: ColumnLayout, sku_to_id: dict[str, int]) -> SatelliteBuffer:
    """
    Emit one StockRow per resolved SKU that supplies qty or is_in_stock.
    A bad qty/is_in_stock drops that row's stock entry; a bad optional
    field keeps its default.
    """
    buf = SatelliteBuffer()
    if not layout.stock_columns:
        return buf

    slots: dict[int, int] = {}
    for sku, link_id, row in _sku_rows(rows, layout, sku_to_id):
        reader = _RowReader(sku, row, layout, buf.warnings)
        item = StockRow(link_id=link_id)

        given_qty, qty = reader.read("qty", parse_qty)
        if given_qty and qty is None:
            continue
        given_flag, in_stock = reader.read("is_in_stock", parse_flag)
        if given_flag and in_stock is None:
            continue
        if not (given_qty or given_flag):
            continue
        if qty is not None:
            item.qty = qty
        if in_stock is not None:
            item.is_in_stock = in_stock

        for column, parse in _STOCK_OPTIONAL:
            _, value = reader.read(column, parse)
            if value is not None:
                setattr(item, column, value)

        _keep_last(buf.rows, slots, link_id, item)
    return buf


# ── Media gallery ──────────────────────────────────────────────────────

def collect_gallery(
    rows,
    layout: ColumnLayout,
    sku_to_id: dict[str, int],
    attribute_id: int | None = None,
) -> SatelliteBuffer:
    """Split pipe-delimited image lists; one entry per (sku, path)."""
    buf = SatelliteBuffer()
    columns = layout.gallery_columns
    if not columns:
        return buf

    if attribute_id is None:
        attribute_id = config.GALLERY_ATTRIBUTE_ID

    seen: set[tuple[str, str]] = set()
    for sku, link_id, row in _sku_rows(rows, layout, sku_to_id):
        for column in columns:
            raw = cell(row, layout.position(column))
            if not raw:
                continue
            for path in raw.split(GALLERY_SEPARATOR):
                path = path.strip()
                if not path or (sku, path) in seen:
                    continue
                seen.add((sku, path))
                buf.rows.append(GalleryRow(link_id, attribute_id, path))
    return buf


# ── Price index ────────────────────────────────────────────────────────

def collect_price(
    rows,
    layout: ColumnLayout,
    sku_to_id: dict[str, int],
    customer_group_id: int | None = None,
    website_id: int | None = None,
) -> SatelliteBuffer:
    """
    price_index seeds price/final/min/max; the other columns override.
    A row is emitted when price_index or final_price supplies a value.
    """
    buf = SatelliteBuffer()
    if not layout.price_columns:
        return buf

    if customer_group_id is None:
        customer_group_id = config.PRICE_CUSTOMER_GROUP_ID
    if website_id is None:
        website_id = config.PRICE_WEBSITE_ID

    slots: dict[int, int] = {}
    for sku, link_id, row in _sku_rows(rows, layout, sku_to_id):
        reader = _RowReader(sku, row, layout, buf.warnings)
        item = PriceRow(link_id, customer_group_id, website_id)
        populated = False

        given, base = reader.read("price_index", parse_decimal)
        if given and base is None:
            continue
        if base is not None:
            item.price = item.final_price = item.min_price = item.max_price = base
            populated = True

        _, final = reader.read("final_price", parse_decimal)
        if final is not None:
            item.final_price = final
            populated = True

        for column in ("min_price", "max_price", "tier_price"):
            _, value = reader.read(column, parse_decimal)
            if value is not None:
                setattr(item, column, value)

        if populated:
            _keep_last(buf.rows, slots, link_id, item)
    return buf


def _keep_last(rows: list, slots: dict, key, item) -> None:
    """Append *item*, or replace the earlier row buffered under *key*."""
    pos = slots.get(key)
    if pos is None:
        slots[key] = len(rows)
        rows.append(item)
    else:
        rows[pos] = item
