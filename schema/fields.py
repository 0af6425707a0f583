"""
schema.fields - Field type catalogue and field descriptors.

Every destination attribute of a page is described by a FieldDescriptor.
The set of field types is closed: adding a type means adding a FieldType
member here and (if importable) one handler in import_engine.coercer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FieldType(str, Enum):
    CHECKBOX = "checkbox"
    DATETIME = "datetime"
    EMAIL    = "email"
    FILE     = "file"
    FLOAT    = "float"
    INTEGER  = "integer"
    OPTIONS  = "options"
    PAGE     = "page"
    TITLE    = "title"
    TEXT     = "text"
    TEXTAREA = "textarea"
    TOGGLE   = "toggle"
    URL      = "url"
    # Known to the schema but never offered as import destinations
    PASSWORD = "password"
    REPEATER = "repeater"
    FIELDSET = "fieldset"


# Field types a CSV column may be bound to
IMPORTABLE_TYPES = frozenset({
    FieldType.CHECKBOX, FieldType.DATETIME, FieldType.EMAIL,
    FieldType.FILE, FieldType.FLOAT, FieldType.INTEGER,
    FieldType.OPTIONS, FieldType.PAGE, FieldType.TITLE,
    FieldType.TEXT, FieldType.TEXTAREA, FieldType.TOGGLE,
    FieldType.URL,
})


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    type: FieldType
    label: str = ""

    # file: 0 = unlimited
    max_files: int = 0

    # page reference: where referenced pages live and which template they use
    parent: Optional[str] = None
    template: Optional[str] = None
    multiple: bool = True

    # options: allowed option titles (empty = anything goes)
    options: tuple[str, ...] = ()

    @property
    def importable(self) -> bool:
        return self.type in IMPORTABLE_TYPES

    @property
    def deferred(self) -> bool:
        """True for fields that can only be written once the page has an id."""
        return self.type is FieldType.FILE

    def to_dict(self) -> dict:
        d = {"name": self.name, "type": self.type.value, "label": self.label or self.name}
        if self.type is FieldType.FILE:
            d["max_files"] = self.max_files
        if self.type is FieldType.PAGE:
            d.update(parent=self.parent, template=self.template, multiple=self.multiple)
        if self.type is FieldType.OPTIONS:
            d["options"] = list(self.options)
        return d
