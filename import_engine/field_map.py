"""
import_engine.field_map - Reserved CSV column names.

Identity columns are handled by the entity resolver and never stored
as EAV.  Each satellite collector owns its own reserved set; a header
found in none of these and matching no attribute code is unknown.
"""

SKU_COLUMN = "sku"

# Columns that identify/shape the base entity row
IDENTITY_COLUMNS = ("sku", "type_id", "attribute_set_id")

STOCK_COLUMNS = (
    "qty", "is_in_stock", "manage_stock",
    "min_qty", "min_sale_qty", "max_sale_qty",
)

# Order matters: earlier columns win the (sku, path) dedup
GALLERY_COLUMNS = ("image", "small_image", "thumbnail", "media_gallery")

PRICE_COLUMNS = (
    "price_index", "final_price", "min_price", "max_price", "tier_price",
)

RESERVED_COLUMNS = frozenset(
    IDENTITY_COLUMNS + STOCK_COLUMNS + GALLERY_COLUMNS + PRICE_COLUMNS
)

GALLERY_SEPARATOR = "|"
GALLERY_ATTRIBUTE_CODE = "media_gallery"
