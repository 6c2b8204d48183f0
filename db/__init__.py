"""
db - Database layer.

Public API:
    init_db()       → create engine (+ tables) and the default CatalogStore
    get_store()     → the default CatalogStore
    CatalogStore    → engine + cached linkage scheme
    LinkageScheme   → ENTITY_ID / ROW_ID / UNKNOWN
"""

from db.engine import init_db, get_store, make_engine, create_schema   # noqa: F401
from db.linkage import LinkageScheme, detect_linkage                   # noqa: F401
from db.store import CatalogStore                                      # noqa: F401
from db.catalog import CatalogTables, catalog_tables, BACKEND_TYPES    # noqa: F401
from db.models import (                                                # noqa: F401
    Base, EavAttribute, StockItem, MediaGallery, PriceIndex,
    PRODUCT_ENTITY_TYPE_ID,
)
