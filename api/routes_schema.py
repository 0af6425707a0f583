"""
api.routes_schema - /api/v1/schema/* endpoints.

Expose templates and their importable fields so a client can offer
column → field choices without parsing the schema file itself.
"""

from flask import jsonify

from api import api_bp
from import_engine.field_map import importable_fields
from schema import has_template, template_names


@api_bp.route("/schema/templates")
def schema_templates():
    """List all template names."""
    return jsonify(template_names())


@api_bp.route("/schema/template/<name>")
def schema_template(name: str):
    """Importable fields of one template, in schema order."""
    if not has_template(name):
        return jsonify({"error": "no such template"}), 404
    return jsonify({
        "template": name,
        "fields": [f.to_dict() for f in importable_fields(name)],
    })
