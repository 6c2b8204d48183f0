"""
import_engine.classifier - Sort CSV headers into the buckets that consume them.

Given the header row and the attribute catalog, build a ColumnLayout:
identity columns, dynamic attribute columns keyed by backend type, and
the reserved columns of each satellite collector.  Headers nobody
claims produce a warning, never an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from db.catalog import BACKEND_TYPES
from import_engine.attributes import AttributeDefinition
from import_engine.errors import MissingColumnError
from import_engine.field_map import (
    GALLERY_COLUMNS, IDENTITY_COLUMNS, PRICE_COLUMNS, RESERVED_COLUMNS,
    SKU_COLUMN, STOCK_COLUMNS,
)


@dataclass(frozen=True)
class AttributeColumn:
    code: str
    attribute_id: int
    backend_type: str
    index: int


@dataclass
class ColumnLayout:
    headers: list[str]
    index: dict[str, int]                                  # header → position
    attributes: dict[str, AttributeColumn] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def sku_index(self) -> int:
        return self.index[SKU_COLUMN]

    def position(self, column: str) -> int | None:
        return self.index.get(column)

    def present(self, columns) -> list[str]:
        """The subset of *columns* present in the header, in given order."""
        return [c for c in columns if c in self.index]

    @property
    def stock_columns(self) -> list[str]:
        return self.present(STOCK_COLUMNS)

    @property
    def gallery_columns(self) -> list[str]:
        return self.present(GALLERY_COLUMNS)

    @property
    def price_columns(self) -> list[str]:
        return self.present(PRICE_COLUMNS)


def classify(
    headers: list[str],
    attributes: dict[str, AttributeDefinition],
) -> ColumnLayout:
    """Build the ColumnLayout; raise MissingColumnError without a sku header."""
    if SKU_COLUMN not in headers:
        raise MissingColumnError("CSV must contain a 'sku' column")

    index: dict[str, int] = {}
    for i, h in enumerate(headers):
        index.setdefault(h, i)        # first occurrence wins on duplicates

    layout = ColumnLayout(headers=headers, index=index)

    for h, i in index.items():
        if h in IDENTITY_COLUMNS:
            continue
        attr = attributes.get(h)
        if attr is not None and attr.backend_type in BACKEND_TYPES:
            layout.attributes[h] = AttributeColumn(
                code=h, attribute_id=attr.attribute_id,
                backend_type=attr.backend_type, index=i,
            )
        elif h not in RESERVED_COLUMNS:
            layout.warnings.append(f'column "{h}": unknown, skipping')

    return layout
