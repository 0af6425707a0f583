"""
schema - Page field catalogue and template resolution.

Public API:
    loader.load(schema_path)
    loader.get_field / get_template_fields / has_template / template_names
    fields.FieldType / FieldDescriptor
    naming.page_name
    sanitizers.sanitize
"""

from schema.loader import (                         # noqa: F401
    load,
    load_dict,
    get_field,
    get_template_fields,
    has_template,
    template_names,
    SchemaError,
)
from schema.fields import FieldType, FieldDescriptor, IMPORTABLE_TYPES   # noqa: F401
from schema.naming import page_name                                     # noqa: F401
from schema.sanitizers import sanitize                                  # noqa: F401
