"""
api.routes_import - Bulk import endpoints.

/products/import accepts CSV via multipart file upload or raw request
body; /stock/import accepts a JSON list of stock items.
"""

import time

from flask import abort, jsonify, request

from api import api_bp
from db import get_store
from import_engine import ImportOptions, StockItemInput, import_stock_json, run_import


def _int_arg(name: str) -> int | None:
    raw = request.args.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        abort(400, description=f"{name} must be an integer")


def _flag_arg(name: str) -> bool | None:
    raw = request.args.get(name, "").strip().lower()
    if not raw:
        return None
    return raw in ("1", "true", "yes")


@api_bp.route("/products/import", methods=["POST"])
def api_import_products():
    """
    POST /api/v1/products/import?store_id=&batch_size=&attribute_set=&raw_sql=0|1

    Multipart: field name 'csv_file'
    Or: raw CSV as request body (Content-Type: text/csv).
    """
    options = ImportOptions.from_config(
        store_id=_int_arg("store_id"),
        batch_size=_int_arg("batch_size"),
        attribute_set=_int_arg("attribute_set"),
        raw_sql=_flag_arg("raw_sql"),
    )

    if request.content_type and "multipart" in request.content_type:
        f = request.files.get("csv_file")
        if not f:
            return jsonify({"error": "no csv_file in upload"}), 400
        content = f.read()
    else:
        content = request.get_data()

    if not content:
        return jsonify({"error": "empty body"}), 400

    result = run_import(get_store(), content, options)
    return jsonify(result.to_dict())


@api_bp.route("/stock/import", methods=["POST"])
def api_import_stock():
    """
    POST /api/v1/stock/import

    Body: {"items": [{"sku": ..., "qty": ..., "is_in_stock": ...}], "batch_size": n}
    """
    started = time.perf_counter()

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"error": "request body must be a JSON object"}), 400
    raw_items = body.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        return jsonify({"error": "items array is required and must not be empty"}), 400

    batch_size = body.get("batch_size") or 0
    if isinstance(batch_size, bool) or not isinstance(batch_size, int):
        return jsonify({"error": "batch_size must be an integer"}), 400

    try:
        items = [StockItemInput.from_dict(item) for item in raw_items]
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    result = import_stock_json(get_store(), items, batch_size)
    duration = int((time.perf_counter() - started) * 1000)

    payload = result.to_dict()
    payload["request_duration_ms"] = duration
    resp = jsonify(payload)
    resp.headers["X-Request-Duration-ms"] = str(duration)
    return resp
