"""
import_engine - CSV → EAV product import pipeline.

Public API:
    run_import(store, csv, options) → ImportResult
    import_stock_json(store, items, batch_size) → StockImportResult
"""

from import_engine.importer import run_import, ImportOptions             # noqa: F401
from import_engine.stock_json import import_stock_json, StockItemInput   # noqa: F401
from import_engine.report import ImportResult, StockImportResult, format_report  # noqa: F401
from import_engine.errors import (                                       # noqa: F401
    ImportFailed, MissingColumnError, MetadataError,
    SchemaDetectionError, EntityCreationError, FlushError, StockWriteError,
)
