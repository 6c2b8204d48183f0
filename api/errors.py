"""
api.errors - JSON error handlers for the API blueprint.

Import failures caused by the request (no sku column, unreadable CSV)
are 400s; failures of the catalog storage are 500s.
"""

import logging

from flask import jsonify

from api import api_bp
from import_engine.errors import (
    EntityCreationError, FlushError, ImportFailed, MetadataError,
    SchemaDetectionError, StockWriteError,
)

logger = logging.getLogger(__name__)

_STORAGE_FAILURES = (
    MetadataError, SchemaDetectionError, EntityCreationError, FlushError,
    StockWriteError,
)


@api_bp.errorhandler(ImportFailed)
def api_import_failed(e: ImportFailed):
    if isinstance(e, _STORAGE_FAILURES):
        logger.error(f"Import failed: {e}")
        return jsonify({"error": str(e)}), 500
    return jsonify({"error": str(e)}), 400


@api_bp.errorhandler(404)
def api_not_found(_e):
    return jsonify({"error": "not found"}), 404


@api_bp.errorhandler(400)
def api_bad_request(e):
    return jsonify({"error": getattr(e, "description", None) or "bad request"}), 400


@api_bp.errorhandler(500)
def api_server_error(_e):
    return jsonify({"error": "internal server error"}), 500
