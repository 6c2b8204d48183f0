"""
db.catalog - Product entity and EAV value tables for one linkage scheme.

The link column of these tables differs between schemes, so they are
built as Core tables on a per-scheme MetaData rather than declared once.
Only one set is ever bound to a given database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy import (
    Column, DateTime, Integer, MetaData, Numeric, SmallInteger, String,
    Table, Text, UniqueConstraint,
)

from db.linkage import LinkageScheme

BACKEND_TYPES = ("varchar", "int", "decimal", "text", "datetime")

# Staging versions: the default version spans the whole timeline
VERSION_MIN = 1
VERSION_MAX = 2147483647

_VALUE_TYPES = {
    "varchar":  lambda: String(255),
    "int":      lambda: Integer(),
    "decimal":  lambda: Numeric(20, 6, asdecimal=False),
    "text":     lambda: Text(),
    "datetime": lambda: DateTime(),
}


def _now():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CatalogTables:
    linkage: LinkageScheme
    metadata: MetaData
    product: Table
    values: dict            # backend_type → Table
    gallery_link: Table
    sequence: Table | None  # row_id scheme only

    @property
    def link_column(self) -> str:
        return self.linkage.link_column

    def value_table(self, backend_type: str) -> Table:
        return self.values[backend_type]


@lru_cache(maxsize=None)
def catalog_tables(linkage: LinkageScheme) -> CatalogTables:
    """Return (and memoise) the table set for *linkage*."""
    if linkage is LinkageScheme.UNKNOWN:
        raise ValueError("cannot build catalog tables for an unknown linkage scheme")

    md = MetaData()
    link = linkage.link_column

    if linkage is LinkageScheme.ROW_ID:
        product = Table(
            "catalog_product_entity", md,
            Column("row_id", Integer, primary_key=True, autoincrement=True),
            Column("entity_id", Integer, nullable=False, index=True),
            Column("created_in", Integer, nullable=False, default=VERSION_MIN),
            Column("updated_in", Integer, nullable=False, default=VERSION_MAX),
            Column("attribute_set_id", SmallInteger, nullable=False, default=4),
            Column("type_id", String(32), nullable=False, default="simple"),
            Column("sku", String(64), nullable=False, index=True),
            Column("created_at", DateTime, default=_now),
            Column("updated_at", DateTime, default=_now, onupdate=_now),
        )
        sequence = Table(
            "sequence_product", md,
            Column("sequence_value", Integer, primary_key=True, autoincrement=True),
        )
    else:
        product = Table(
            "catalog_product_entity", md,
            Column("entity_id", Integer, primary_key=True, autoincrement=True),
            Column("attribute_set_id", SmallInteger, nullable=False, default=4),
            Column("type_id", String(32), nullable=False, default="simple"),
            Column("sku", String(64), nullable=False, index=True),
            Column("created_at", DateTime, default=_now),
            Column("updated_at", DateTime, default=_now, onupdate=_now),
        )
        sequence = None

    values = {}
    for backend_type in BACKEND_TYPES:
        name = f"catalog_product_entity_{backend_type}"
        values[backend_type] = Table(
            name, md,
            Column("value_id", Integer, primary_key=True, autoincrement=True),
            Column("attribute_id", SmallInteger, nullable=False),
            Column("store_id", SmallInteger, nullable=False, default=0),
            Column(link, Integer, nullable=False),
            Column("value", _VALUE_TYPES[backend_type](), nullable=True),
            UniqueConstraint(link, "attribute_id", "store_id", name=f"uq_{name}"),
        )

    gallery_link = Table(
        "catalog_product_entity_media_gallery_value_to_entity", md,
        Column("value_id", Integer, nullable=False),
        Column(link, Integer, nullable=False),
        UniqueConstraint("value_id", link, name="uq_media_gallery_value_to_entity"),
    )

    return CatalogTables(
        linkage=linkage, metadata=md, product=product, values=values,
        gallery_link=gallery_link, sequence=sequence,
    )
