"""
import_engine.coercer - Turn a raw CSV cell into a value for one field.

Dispatch is on FieldType through _HANDLERS; every importable type has
exactly one handler.  A handler returns either

  Immediate(value)   applied before the page's first save, or
  Deferred(value)    applied after the page has an id (files).

An empty cell clears the field: "" for plain types, [] for files and
references.  A value of None means "leave the field unset", which only
happens when a non-empty reference cell matches no page.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from schema import page_name
from schema.fields import FieldDescriptor, FieldType
from import_engine.references import ReferenceResolver, split_tokens


@dataclass(frozen=True)
class Immediate:
    value: Any
    name: Optional[str] = None       # page name derived from a title


@dataclass(frozen=True)
class Deferred:
    value: Any


Coerced = Union[Immediate, Deferred]

_FILE_SPLIT = re.compile(r"[\r\n\t|]+")

_HANDLERS: dict[FieldType, Callable[[FieldDescriptor, str, ReferenceResolver], Coerced]] = {}


def _handles(*types: FieldType):
    def register(fn):
        for t in types:
            _HANDLERS[t] = fn
        return fn
    return register


def coerce(field: FieldDescriptor, raw: str, resolver: ReferenceResolver) -> Coerced:
    handler = _HANDLERS.get(field.type)
    if handler is None:
        raise ValueError(f"field {field.name!r} of type {field.type.value!r} is not importable")
    return handler(field, raw, resolver)


@_handles(FieldType.FILE)
def _file(field, raw, resolver):
    tokens = [t for t in _FILE_SPLIT.split(raw.strip()) if t]
    if field.max_files == 1 and tokens:
        return Deferred(tokens[0])
    return Deferred(tokens)


@_handles(FieldType.PAGE)
def _page_ref(field, raw, resolver):
    if not split_tokens(raw):
        return Immediate([])
    ids = resolver.resolve(field, raw)
    if not ids:
        return Immediate(None)
    return Immediate(ids if field.multiple else ids[0])


@_handles(FieldType.TITLE)
def _title(field, raw, resolver):
    return Immediate(raw, name=page_name(raw) or None)


@_handles(
    FieldType.CHECKBOX, FieldType.DATETIME, FieldType.EMAIL,
    FieldType.FLOAT, FieldType.INTEGER, FieldType.OPTIONS,
    FieldType.TEXT, FieldType.TEXTAREA, FieldType.TOGGLE,
    FieldType.URL,
)
def _passthrough(field, raw, resolver):
    # parsed and validated by the page store on save
    return Immediate(raw)

