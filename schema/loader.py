"""
schema.loader - Parse the page schema JSON at startup and expose lookup helpers.

The schema file has two sections:

    {
      "fields":    {"<name>": {"type": "<FieldType>", ...config}, ...},
      "templates": {"<template>": ["<field name>", ...], ...}
    }

This module owns the in-memory copies of field descriptors and template
field lists.  Everything is read-only after load().
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from schema.fields import FieldDescriptor, FieldType

# ── Module-level state (populated by load()) ──────────────────────────
_fields: dict[str, FieldDescriptor] = {}
_templates: dict[str, list[str]] = {}


class SchemaError(ValueError):
    """Raised when the schema file is malformed."""


def load(schema_path: str | Path) -> dict:
    """
    Read the schema JSON and rebuild the lookup maps.

    Returns a stats dict for logging.
    """
    with open(schema_path, encoding="utf-8") as fh:
        raw = json.load(fh)
    return load_dict(raw)


def load_dict(raw: dict) -> dict:
    """Same as load() but from an already-parsed dict."""
    fields: dict[str, FieldDescriptor] = {}
    for name, definition in (raw.get("fields") or {}).items():
        fields[name] = _parse_field(name, definition)

    templates: dict[str, list[str]] = {}
    for tpl, names in (raw.get("templates") or {}).items():
        unknown = [n for n in names if n not in fields]
        if unknown:
            raise SchemaError(f"template {tpl!r} uses undefined fields: {', '.join(unknown)}")
        templates[tpl] = list(names)

    _fields.clear()
    _fields.update(fields)
    _templates.clear()
    _templates.update(templates)

    return {"fields": len(_fields), "templates": len(_templates)}


def _parse_field(name: str, definition: dict) -> FieldDescriptor:
    try:
        ftype = FieldType(definition.get("type", ""))
    except ValueError:
        raise SchemaError(f"field {name!r} has unknown type {definition.get('type')!r}") from None

    max_files = int(definition.get("max_files", 0) or 0)
    if max_files < 0:
        raise SchemaError(f"field {name!r}: max_files must be >= 0")

    return FieldDescriptor(
        name=name,
        type=ftype,
        label=definition.get("label", ""),
        max_files=max_files,
        parent=definition.get("parent") or None,
        template=definition.get("template") or None,
        multiple=bool(definition.get("multiple", True)),
        options=tuple(definition.get("options", ())),
    )


# ── Public helpers ────────────────────────────────────────────────────

def get_field(name: str) -> Optional[FieldDescriptor]:
    return _fields.get(name)


def get_template_fields(template: str) -> Optional[list[FieldDescriptor]]:
    """Return the ordered field descriptors for a template, or None if unknown."""
    names = _templates.get(template)
    if names is None:
        return None
    return [_fields[n] for n in names]


def has_template(template: str) -> bool:
    return template in _templates


def template_names() -> list[str]:
    return sorted(_templates.keys())
