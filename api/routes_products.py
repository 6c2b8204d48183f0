"""
api.routes_products - /api/v1/products read endpoint.
"""

from flask import jsonify, request

from api import api_bp
from db import get_store
from services.product_reader import get_product, product_to_json


@api_bp.route("/products/<path:sku>")
def api_get_product(sku: str):
    """GET /api/v1/products/{SKU}?store_id=0"""
    store_id = request.args.get("store_id", 0, type=int)
    product = get_product(get_store(), sku, store_id)
    if product is None:
        return jsonify({"error": "not found"}), 404
    return jsonify(product_to_json(product))
