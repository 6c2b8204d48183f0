"""
Catalog importer - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.  A .env file next to this
module is loaded first, so local overrides never need exporting.
"""

from __future__ import annotations
import os
from pathlib import Path

import dotenv


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent
dotenv.load_dotenv(BASE_DIR / ".env")

# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("CATALOG_DB", f"sqlite:///{BASE_DIR / 'catalog.sqlite'}")

# Pin the EAV linkage scheme ("entity_id" / "row_id"); empty = detect
LINKAGE = os.environ.get("CATALOG_LINKAGE", "").strip().lower()

# ── Server ─────────────────────────────────────────────────────────────
HOST      = os.environ.get("CATALOG_HOST", "0.0.0.0")
PORT      = int(os.environ.get("CATALOG_PORT", "5000"))
DEBUG     = os.environ.get("CATALOG_DEBUG", "0") == "1"
LOG_LEVEL = os.environ.get("CATALOG_LOG_LEVEL", "INFO").upper()

# ── Import defaults ────────────────────────────────────────────────────
IMPORT_BATCH_SIZE    = int(os.environ.get("IMPORT_BATCH_SIZE", "500"))
IMPORT_STORE_ID      = int(os.environ.get("IMPORT_STORE_ID", "0"))
IMPORT_ATTRIBUTE_SET = int(os.environ.get("IMPORT_ATTRIBUTE_SET", "4"))
IMPORT_RAW_SQL       = os.environ.get("IMPORT_RAW_SQL", "0") == "1"
FLUSH_WORKERS        = int(os.environ.get("IMPORT_FLUSH_WORKERS", "8"))

# ── Satellite constants ────────────────────────────────────────────────
PRICE_WEBSITE_ID        = int(os.environ.get("PRICE_WEBSITE_ID", "1"))
PRICE_CUSTOMER_GROUP_ID = int(os.environ.get("PRICE_CUSTOMER_GROUP_ID", "0"))
GALLERY_ATTRIBUTE_ID    = int(os.environ.get("GALLERY_ATTRIBUTE_ID", "87"))
