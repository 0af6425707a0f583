"""
api.routes_import - /api/v1/import endpoint.

Accepts CSV via multipart file upload or raw request body.
"""

import json

from flask import request, jsonify

from api import api_bp
from import_engine import run_import, RunConfig, DuplicatePolicy

_TRUE = {"1", "true", "yes", "on"}


@api_bp.route("/import", methods=["POST"])
def api_import_csv():
    """
    POST /api/v1/import?template=&parent=/&duplicates=skip|create-unique|modify
                       &create_references=0|1&max_rows=0&delimiter=comma|tab
                       &quotechar="&columns={"Header": "field", "2": null}

    Multipart: field name 'csv_file' (parameters may also be form fields)
    Or: raw CSV as request body (Content-Type: text/csv).
    """
    params = request.values

    try:
        run_config = RunConfig(
            template=params.get("template", "").strip(),
            parent=params.get("parent", "/").strip() or "/",
            delimiter=params.get("delimiter", ","),
            quotechar=params.get("quotechar", '"'),
            max_rows=int(params.get("max_rows", "0") or 0),
            duplicates=DuplicatePolicy(params.get("duplicates", DuplicatePolicy.SKIP.value)),
            create_references=params.get("create_references", "0").lower() in _TRUE,
        )
        overrides = _parse_columns(params.get("columns", ""))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    if request.content_type and "multipart" in request.content_type:
        f = request.files.get("csv_file")
        if not f:
            return jsonify({"error": "no csv_file in upload"}), 400
        content = f.read()
    else:
        content = request.get_data()

    if not content:
        return jsonify({"error": "empty body"}), 400

    report = run_import(content, run_config, overrides)
    return jsonify(report.to_dict())


def _parse_columns(raw: str) -> dict:
    """Parse the columns parameter: a JSON object of column (index or header) → field."""
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"columns is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("columns must be a JSON object")
    return data
