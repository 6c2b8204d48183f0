"""
import_engine.resolver - SKU → link id resolution and entity creation.

The map built here is the single source of truth for every collector;
nothing downstream derives identifiers on its own.

Under the entity_id scheme a new product is one inserted row whose
autoincrement key is the link id.  Under the row_id scheme the entity
id comes from sequence_product and the link id is the row's own
autoincrement ``row_id``; both are allocated a block per chunk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, insert, select
from sqlalchemy.exc import SQLAlchemyError

from db.catalog import VERSION_MAX, VERSION_MIN, CatalogTables
from db.linkage import LinkageScheme
from db.store import CatalogStore
from import_engine.classifier import ColumnLayout
from import_engine.csv_parser import cell
from import_engine.errors import EntityCreationError, SchemaDetectionError

logger = logging.getLogger(__name__)

DEFAULT_TYPE_ID = "simple"


@dataclass(frozen=True)
class NewEntity:
    sku: str
    type_id: str
    attribute_set_id: int


def chunked(items: list, size: int):
    for i in range(0, len(items), size):
        yield items[i:i + size]


def require_tables(store: CatalogStore) -> CatalogTables:
    """Table set for the store's scheme; an undetectable scheme is fatal."""
    if store.linkage is LinkageScheme.UNKNOWN:
        raise SchemaDetectionError(
            "cannot determine EAV linkage scheme (neither entity_id nor row_id "
            "found on catalog_product_entity_varchar)"
        )
    return store.tables


def lookup_skus(store: CatalogStore, skus: list[str], batch_size: int) -> dict[str, int]:
    """Batch-query existing SKUs; return sku → link id."""
    tables = require_tables(store)
    product = tables.product
    link_col = product.c[tables.link_column]

    unique = list(dict.fromkeys(skus))
    found: dict[str, int] = {}
    with store.engine.connect() as conn:
        for chunk in chunked(unique, batch_size):
            stmt = (
                select(link_col, product.c.sku)
                .where(product.c.sku.in_(chunk))
                .order_by(link_col)
            )
            # Highest row wins: under row_id that is the newest version
            for link_id, sku in conn.execute(stmt):
                found[sku] = int(link_id)
    return found


def plan_new_entities(
    rows: list[list[str]],
    layout: ColumnLayout,
    sku_to_id: dict[str, int],
    default_attribute_set: int,
) -> tuple[list[NewEntity], int]:
    """
    Return (entities to create, skipped row count).

    Rows with an empty SKU are skipped.  A new SKU appearing on several
    rows is created once, shaped by its first row.
    """
    type_idx = layout.position("type_id")
    set_idx = layout.position("attribute_set_id")
    sku_idx = layout.sku_index

    planned: dict[str, NewEntity] = {}
    skipped = 0
    for row in rows:
        sku = cell(row, sku_idx)
        if not sku:
            skipped += 1
            continue
        if sku in sku_to_id or sku in planned:
            continue

        type_id = cell(row, type_idx) or DEFAULT_TYPE_ID
        attribute_set_id = default_attribute_set
        raw_set = cell(row, set_idx)
        if raw_set.isascii() and raw_set.isdigit() and 0 < int(raw_set) <= 0xFFFF:
            attribute_set_id = int(raw_set)

        planned[sku] = NewEntity(sku, type_id, attribute_set_id)
    return list(planned.values()), skipped


def create_entities(
    store: CatalogStore,
    entities: list[NewEntity],
    sku_to_id: dict[str, int],
    batch_size: int,
) -> None:
    """Insert *entities* chunk by chunk and record their link ids in place."""
    tables = require_tables(store)
    for n, chunk in enumerate(chunked(entities, batch_size), start=1):
        try:
            with store.engine.begin() as conn:
                if tables.linkage is LinkageScheme.ROW_ID:
                    ids = _create_row_versioned(conn, tables, chunk)
                else:
                    ids = _create_direct(conn, tables, chunk)
        except SQLAlchemyError as exc:
            raise EntityCreationError(f"create products (chunk {n}): {exc}") from exc
        sku_to_id.update(ids)
        logger.debug(f"Created {len(chunk)} products (chunk {n})")


def _create_direct(conn, tables: CatalogTables, chunk: list[NewEntity]) -> dict[str, int]:
    product = tables.product
    conn.execute(insert(product), [
        {"sku": e.sku, "type_id": e.type_id, "attribute_set_id": e.attribute_set_id}
        for e in chunk
    ])

    wanted = [e.sku for e in chunk]
    stmt = (
        select(product.c.entity_id, product.c.sku)
        .where(product.c.sku.in_(wanted))
        .order_by(product.c.entity_id)
    )
    ids = {sku: int(entity_id) for entity_id, sku in conn.execute(stmt)}
    missing = [s for s in wanted if s not in ids]
    if missing:
        raise EntityCreationError(f"created products not found on read-back: {missing[:5]}")
    return ids


def _create_row_versioned(conn, tables: CatalogTables, chunk: list[NewEntity]) -> dict[str, int]:
    product, sequence = tables.product, tables.sequence
    n = len(chunk)

    # Reserve a contiguous block of entity ids past anything in use
    last_seq = conn.execute(select(func.max(sequence.c.sequence_value))).scalar()
    last_entity = conn.execute(select(func.max(product.c.entity_id))).scalar()
    first_entity_id = max(last_seq or 0, last_entity or 0) + 1
    conn.execute(insert(sequence), [
        {"sequence_value": first_entity_id + offset} for offset in range(n)
    ])

    conn.execute(insert(product), [
        {
            "entity_id": first_entity_id + offset,
            "created_in": VERSION_MIN,
            "updated_in": VERSION_MAX,
            "sku": e.sku,
            "type_id": e.type_id,
            "attribute_set_id": e.attribute_set_id,
        }
        for offset, e in enumerate(chunk)
    ])

    block = product.c.entity_id.between(first_entity_id, first_entity_id + n - 1)
    first_row_id, last_row_id, count = conn.execute(
        select(func.min(product.c.row_id), func.max(product.c.row_id),
               func.count()).where(block)
    ).one()
    if count != n or last_row_id - first_row_id != n - 1:
        raise EntityCreationError(
            f"row_id block for entities {first_entity_id}..{first_entity_id + n - 1} "
            f"is not contiguous ({count} rows, {first_row_id}..{last_row_id})"
        )

    return {e.sku: int(first_row_id) + offset for offset, e in enumerate(chunk)}
