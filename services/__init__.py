"""
services - Read-side helpers sitting between API/CLI and DB.
"""

from services.flat_value import FlatValue, FlatKind, FlatValueError   # noqa: F401
from services.product_reader import get_product, product_to_json      # noqa: F401
