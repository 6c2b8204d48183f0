"""
import_engine.attributes - Attribute catalog loaded once per run.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from db.models import EavAttribute, PRODUCT_ENTITY_TYPE_ID
from db.store import CatalogStore
from import_engine.errors import MetadataError


@dataclass(frozen=True)
class AttributeDefinition:
    attribute_id: int
    code: str
    backend_type: str       # static | varchar | int | decimal | text | datetime


def load_attributes(store: CatalogStore) -> dict[str, AttributeDefinition]:
    """Return code → AttributeDefinition for product attributes."""
    stmt = (
        select(EavAttribute.attribute_id, EavAttribute.attribute_code,
               EavAttribute.backend_type)
        .where(EavAttribute.entity_type_id == PRODUCT_ENTITY_TYPE_ID)
    )
    try:
        with store.engine.connect() as conn:
            rows = conn.execute(stmt).all()
    except SQLAlchemyError as exc:
        raise MetadataError(f"load attributes: {exc}") from exc

    return {
        code: AttributeDefinition(int(attr_id), code, (backend or "static").lower())
        for attr_id, code, backend in rows
    }
