"""
db.linkage - Which column ties EAV rows back to the product entity.

Two product editions ship incompatible layouts: the standard one keys
EAV value tables by ``entity_id``; the staging-capable one keys them by
a row-versioned ``row_id``.  detect_linkage() inspects one reference
table to tell them apart.
"""

from __future__ import annotations

import enum
import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoInspectionAvailable, NoSuchTableError

logger = logging.getLogger(__name__)

REFERENCE_TABLE = "catalog_product_entity_varchar"


class LinkageScheme(enum.Enum):
    ENTITY_ID = "entity_id"
    ROW_ID = "row_id"
    UNKNOWN = "unknown"

    @property
    def link_column(self) -> str:
        """Column name used by EAV tables under this scheme."""
        return "row_id" if self is LinkageScheme.ROW_ID else "entity_id"

    @classmethod
    def parse(cls, value: str) -> "LinkageScheme":
        try:
            scheme = cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"unknown linkage scheme {value!r} "
                             f"(expected entity_id or row_id)") from None
        if scheme is cls.UNKNOWN:
            raise ValueError("linkage scheme cannot be pinned to 'unknown'")
        return scheme


def detect_linkage(engine: Engine) -> LinkageScheme:
    """
    Inspect the reference EAV table and return the active scheme.

    Engines without inspection support get ENTITY_ID.  A missing table or one
    carrying neither link column is UNKNOWN.
    """
    try:
        inspector = inspect(engine)
        columns = {col["name"] for col in inspector.get_columns(REFERENCE_TABLE)}
    except (NoInspectionAvailable, NotImplementedError):
        logger.warning(f"No schema introspection on {engine.dialect.name}; "
                       f"assuming entity_id linkage")
        return LinkageScheme.ENTITY_ID
    except NoSuchTableError:
        logger.error(f"Reference table {REFERENCE_TABLE} not found")
        return LinkageScheme.UNKNOWN

    if "entity_id" in columns:
        return LinkageScheme.ENTITY_ID
    if "row_id" in columns:
        return LinkageScheme.ROW_ID
    return LinkageScheme.UNKNOWN
