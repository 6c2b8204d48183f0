"""
import_engine.importer - Top-level orchestrator.

Coordinates csv_parser → classifier → resolver → collectors → flush
and produces a frozen ImportResult.  Fatal problems raise ImportFailed
subclasses; row-level problems end up in ImportResult.warnings.

There is no rollback: entity rows committed before a failed flush stay
committed, and re-running the same file converges because every write
is an upsert.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from functools import partial
from typing import IO

import config
from db.catalog import BACKEND_TYPES
from db.store import CatalogStore
from import_engine import writers
from import_engine.attributes import load_attributes
from import_engine.classifier import classify
from import_engine.csv_parser import cell, read_records
from import_engine.eav import collect_eav
from import_engine.field_map import GALLERY_ATTRIBUTE_CODE
from import_engine.flush import FlushTask, run_flush
from import_engine.report import ImportResult
from import_engine.resolver import (
    create_entities, lookup_skus, plan_new_entities, require_tables,
)
from import_engine.satellites import collect_gallery, collect_price, collect_stock

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500
DEFAULT_ATTRIBUTE_SET = 4


@dataclass(frozen=True)
class ImportOptions:
    store_id: int = 0
    batch_size: int = DEFAULT_BATCH_SIZE
    attribute_set: int = DEFAULT_ATTRIBUTE_SET
    raw_sql: bool = False

    @classmethod
    def from_config(cls, **overrides) -> "ImportOptions":
        opts = cls(
            store_id=config.IMPORT_STORE_ID,
            batch_size=config.IMPORT_BATCH_SIZE,
            attribute_set=config.IMPORT_ATTRIBUTE_SET,
            raw_sql=config.IMPORT_RAW_SQL,
        )
        return replace(opts, **{k: v for k, v in overrides.items() if v is not None})

    def normalized(self) -> "ImportOptions":
        """Force defaults for a non-positive batch size or a zero attribute set."""
        return replace(
            self,
            batch_size=self.batch_size if self.batch_size > 0 else DEFAULT_BATCH_SIZE,
            attribute_set=self.attribute_set or DEFAULT_ATTRIBUTE_SET,
        )


def run_import(
    store: CatalogStore,
    source: str | bytes | IO,
    options: ImportOptions | None = None,
) -> ImportResult:
    """
    Import a product CSV into the catalog behind *store*.

    Parameters
    ----------
    store : CatalogStore whose engine reaches the catalog tables
    source : raw CSV (bytes or str) or a file object
    options : ImportOptions; defaults apply when omitted

    Returns
    -------
    ImportResult with counts, warnings and timings
    """
    started = time.perf_counter()
    opts = (options or ImportOptions()).normalized()

    headers, rows = read_records(source)
    attributes = load_attributes(store)
    layout = classify(headers, attributes)

    tables = require_tables(store)

    logger.info(f"Importing {len(rows)} rows ({len(layout.attributes)} attribute "
                f"columns, {tables.linkage.value} linkage, "
                f"{'raw SQL' if opts.raw_sql else 'native'} upserts on {store.dialect})")

    skus = [sku for sku in (cell(r, layout.sku_index) for r in rows) if sku]
    sku_to_id = lookup_skus(store, skus, opts.batch_size)

    process_started = time.perf_counter()

    new_entities, skipped = plan_new_entities(rows, layout, sku_to_id, opts.attribute_set)
    create_entities(store, new_entities, sku_to_id, opts.batch_size)

    gallery_attr = attributes.get(GALLERY_ATTRIBUTE_CODE)
    eav = collect_eav(rows, layout, sku_to_id, opts.store_id)
    stock = collect_stock(rows, layout, sku_to_id)
    gallery = collect_gallery(rows, layout, sku_to_id,
                              gallery_attr.attribute_id if gallery_attr else None)
    price = collect_price(rows, layout, sku_to_id)

    warnings = layout.warnings + eav.warnings + stock.warnings + price.warnings

    tasks = [
        FlushTask(bt, eav.buckets[bt],
                  partial(writers.write_eav, tables=tables, backend_type=bt,
                          raw_sql=opts.raw_sql))
        for bt in BACKEND_TYPES
    ]
    tasks += [
        FlushTask("stock", stock.rows,
                  partial(writers.write_stock, raw_sql=opts.raw_sql)),
        FlushTask("gallery", gallery.rows,
                  partial(writers.write_gallery, tables=tables)),
        FlushTask("price_index", price.rows,
                  partial(writers.write_price, raw_sql=opts.raw_sql)),
    ]

    db_started = time.perf_counter()
    run_flush(store, tasks, opts.batch_size)
    db_time = time.perf_counter() - db_started

    counts = eav.counts()
    counts["stock"] = len(stock.rows)
    counts["gallery"] = len(gallery.rows)
    counts["price_index"] = len(price.rows)

    created = len(new_entities)
    result = ImportResult(
        total_rows=len(rows),
        created=created,
        updated=len(rows) - skipped - created,
        skipped=skipped,
        warnings=tuple(warnings),
        eav_counts=counts,
        process_time=time.perf_counter() - process_started,
        db_time=db_time,
        total_time=time.perf_counter() - started,
    )
    logger.info(f"Import done: {result.created} created, {result.updated} updated, "
                f"{result.skipped} skipped, {len(result.warnings)} warnings "
                f"in {result.total_time:.3f}s")
    return result
