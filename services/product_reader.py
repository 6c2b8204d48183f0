"""
services.product_reader - Read one product back out of the EAV tables.

The inverse of the import path for a single SKU: resolves the link id
the same way the importer does, then gathers attribute values from
every backend table (store-scoped values override the default store),
stock rows, price index rows and gallery paths.
"""

from __future__ import annotations

from sqlalchemy import select

from db.catalog import BACKEND_TYPES
from db.models import EavAttribute, MediaGallery, PriceIndex, StockItem
from db.store import CatalogStore
from import_engine.resolver import require_tables
from services.flat_value import FlatValue, flatten


def get_product(store: CatalogStore, sku: str, store_id: int = 0) -> dict | None:
    """
    Return the product with *sku* as a dict, or None if it does not exist.

    Keys: sku, link_id, entity_id, type_id, attribute_set_id,
    attributes {code: FlatValue}, stock [..], prices [..], media [..].
    """
    tables = require_tables(store)
    product = tables.product
    link_col = product.c[tables.link_column]

    with store.engine.connect() as conn:
        head = conn.execute(
            select(product)
            .where(product.c.sku == sku)
            .order_by(link_col.desc())
            .limit(1)
        ).mappings().first()
        if head is None:
            return None
        link_id = int(head[tables.link_column])

        attributes = _read_attributes(conn, tables, link_id, store_id)

        stock = [
            StockItem(**dict(r)).to_dict()
            for r in conn.execute(
                select(StockItem.__table__)
                .where(StockItem.product_id == link_id)
                .order_by(StockItem.stock_id)
            ).mappings()
        ]
        prices = [
            PriceIndex(**dict(r)).to_dict()
            for r in conn.execute(
                select(PriceIndex.__table__)
                .where(PriceIndex.entity_id == link_id)
                .order_by(PriceIndex.website_id, PriceIndex.customer_group_id)
            ).mappings()
        ]

        gallery = MediaGallery.__table__
        link_table = tables.gallery_link
        media = [
            {"value_id": value_id, "value": value, "media_type": media_type}
            for value_id, value, media_type in conn.execute(
                select(gallery.c.value_id, gallery.c.value, gallery.c.media_type)
                .select_from(gallery)
                .join(link_table, link_table.c.value_id == gallery.c.value_id)
                .where(link_table.c[tables.link_column] == link_id)
                .order_by(gallery.c.value_id)
            )
        ]

    return {
        "sku": head["sku"],
        "link_id": link_id,
        "entity_id": int(head["entity_id"]),
        "type_id": head["type_id"],
        "attribute_set_id": head["attribute_set_id"],
        "attributes": attributes,
        "stock": stock,
        "prices": prices,
        "media": media,
    }


def _read_attributes(conn, tables, link_id: int, store_id: int) -> dict[str, FlatValue]:
    link = tables.link_column
    scopes = {0, store_id}
    raw: dict[str, object] = {}
    for backend_type in BACKEND_TYPES:
        table = tables.value_table(backend_type)
        stmt = (
            select(EavAttribute.attribute_code, table.c.value)
            .select_from(table)
            .join(EavAttribute.__table__,
                  EavAttribute.attribute_id == table.c.attribute_id)
            .where(table.c[link] == link_id, table.c.store_id.in_(scopes))
            # Default store first so the scoped value overwrites it
            .order_by(table.c.store_id)
        )
        for code, value in conn.execute(stmt):
            raw[code] = value
    return flatten(raw)


def product_to_json(data: dict) -> dict:
    """JSON-ready copy of a get_product() result."""
    out = dict(data)
    out["attributes"] = {code: v.to_json() for code, v in data["attributes"].items()}
    return out
