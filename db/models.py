"""
db.models - SQLAlchemy ORM declarations for scheme-independent tables.

Tables
------
eav_attribute                         - attribute catalog; the import engine
                                        reads code → (id, backend_type) from it.
cataloginventory_stock_item           - one stock row per (product, stock).
catalog_product_entity_media_gallery  - media paths; linked to products via
                                        the scheme-dependent value_to_entity
                                        table in db.catalog.
catalog_product_index_price           - flattened price index.

The product entity table and the per-backend-type EAV value tables
depend on the linkage scheme and are built in db.catalog instead.
"""

from __future__ import annotations

from sqlalchemy import (
    Column, String, Integer, SmallInteger, Float, Numeric,
    UniqueConstraint, PrimaryKeyConstraint,
)
from sqlalchemy.orm import DeclarativeBase


PRODUCT_ENTITY_TYPE_ID = 4


class Base(DeclarativeBase):
    pass


class EavAttribute(Base):
    __tablename__ = "eav_attribute"

    attribute_id   = Column(SmallInteger, primary_key=True, autoincrement=True)
    entity_type_id = Column(SmallInteger, nullable=False, index=True)
    attribute_code = Column(String(255), nullable=False)
    backend_type   = Column(String(8), nullable=False, default="static")

    __table_args__ = (
        UniqueConstraint("entity_type_id", "attribute_code",
                         name="uq_eav_attribute_code"),
    )


class StockItem(Base):
    __tablename__ = "cataloginventory_stock_item"

    item_id      = Column(Integer, primary_key=True, autoincrement=True)
    product_id   = Column(Integer, nullable=False)
    stock_id     = Column(SmallInteger, nullable=False, default=1)
    qty          = Column(Numeric(12, 4, asdecimal=False), default=0)
    is_in_stock  = Column(SmallInteger, nullable=False, default=1)
    manage_stock = Column(SmallInteger, nullable=False, default=1)
    min_qty      = Column(Numeric(12, 4, asdecimal=False), default=0)
    min_sale_qty = Column(Numeric(12, 4, asdecimal=False), default=0)
    max_sale_qty = Column(Numeric(12, 4, asdecimal=False), default=0)

    __table_args__ = (
        UniqueConstraint("product_id", "stock_id", name="uq_stock_item_product"),
    )

    def to_dict(self) -> dict:
        return {
            "stock_id": self.stock_id,
            "qty": self.qty,
            "is_in_stock": self.is_in_stock,
            "manage_stock": self.manage_stock,
            "min_qty": self.min_qty,
            "min_sale_qty": self.min_sale_qty,
            "max_sale_qty": self.max_sale_qty,
        }


class MediaGallery(Base):
    __tablename__ = "catalog_product_entity_media_gallery"

    value_id     = Column(Integer, primary_key=True, autoincrement=True)
    attribute_id = Column(SmallInteger, nullable=False)
    value        = Column(String(255), nullable=False)
    media_type   = Column(String(32), nullable=False, default="image")
    disabled     = Column(SmallInteger, nullable=False, default=0)


class PriceIndex(Base):
    __tablename__ = "catalog_product_index_price"

    entity_id         = Column(Integer, nullable=False)
    customer_group_id = Column(Integer, nullable=False)
    website_id        = Column(SmallInteger, nullable=False)
    price             = Column(Float, default=0)
    final_price       = Column(Float, default=0)
    min_price         = Column(Float, default=0)
    max_price         = Column(Float, default=0)
    tier_price        = Column(Float, default=0)

    __table_args__ = (
        PrimaryKeyConstraint("entity_id", "customer_group_id", "website_id"),
    )

    def to_dict(self) -> dict:
        return {
            "customer_group_id": self.customer_group_id,
            "website_id": self.website_id,
            "price": self.price,
            "final_price": self.final_price,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "tier_price": self.tier_price,
        }
