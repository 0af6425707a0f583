"""
api.errors - JSON error handlers for the API blueprint.

Import failures that abort a whole run (unreadable CSV, unknown template
or parent) surface here as 400s; per-row problems never do, they are
part of the report.
"""

import logging

from flask import jsonify

from api import api_bp
from import_engine import ImportConfigError, SourceError

logger = logging.getLogger(__name__)


@api_bp.errorhandler(SourceError)
@api_bp.errorhandler(ImportConfigError)
def api_import_aborted(e):
    logger.warning("Import aborted: %s", e)
    return jsonify({"error": str(e)}), 400


@api_bp.errorhandler(400)
def api_bad_request(e):
    return jsonify({"error": getattr(e, "description", None) or "bad request"}), 400


@api_bp.errorhandler(404)
def api_not_found(_e):
    return jsonify({"error": "not found"}), 404


@api_bp.errorhandler(413)
def api_too_large(_e):
    return jsonify({"error": "CSV upload exceeds the size limit"}), 413


@api_bp.errorhandler(500)
def api_server_error(_e):
    return jsonify({"error": "internal server error"}), 500
