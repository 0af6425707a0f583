"""
schema.sanitizers - Per-type parsing and validation of field values.

The page store calls sanitize() for every value it is asked to save.
Raw CSV strings go in, storable Python values come out; anything that
cannot be interpreted for the field's type raises ValueError.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Callable
from urllib.parse import urlparse

from schema.fields import FieldDescriptor, FieldType

_TRUE  = frozenset({"1", "true", "yes", "y", "on", "x", "checked"})
_FALSE = frozenset({"", "0", "false", "no", "n", "off"})

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_OPTION_SPLIT = re.compile(r"[\r\n|]+")

# Tried in order after ISO-8601
DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%d.%m.%Y",
    "%d.%m.%Y %H:%M",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
)

_SANITIZERS: dict[FieldType, Callable[[FieldDescriptor, Any], Any]] = {}


def _sanitizer(*types: FieldType):
    def register(fn):
        for t in types:
            _SANITIZERS[t] = fn
        return fn
    return register


def sanitize(field: FieldDescriptor, value: Any) -> Any:
    """Return the storable form of value for field, or raise ValueError."""
    fn = _SANITIZERS.get(field.type)
    if fn is None:
        raise ValueError(f"field type {field.type.value!r} cannot be set directly")
    return fn(field, value)


@_sanitizer(FieldType.CHECKBOX, FieldType.TOGGLE)
def _bool(field, value):
    if isinstance(value, bool):
        return int(value)
    s = str(value).strip().lower()
    if s in _TRUE:
        return 1
    if s in _FALSE:
        return 0
    raise ValueError(f"{field.name}: {value!r} is not a yes/no value")


@_sanitizer(FieldType.INTEGER)
def _integer(field, value):
    s = str(value).strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        raise ValueError(f"{field.name}: {value!r} is not an integer") from None


@_sanitizer(FieldType.FLOAT)
def _float(field, value):
    s = str(value).strip()
    if not s:
        return None
    try:
        return float(s)
    except ValueError:
        raise ValueError(f"{field.name}: {value!r} is not a number") from None


@_sanitizer(FieldType.EMAIL)
def _email(field, value):
    s = str(value).strip()
    if s and not _EMAIL.match(s):
        raise ValueError(f"{field.name}: {value!r} is not an email address")
    return s


@_sanitizer(FieldType.URL)
def _url(field, value):
    s = str(value).strip()
    if not s or s.startswith("/"):
        return s
    parsed = urlparse(s)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"{field.name}: {value!r} is not an http(s) URL")
    return s


@_sanitizer(FieldType.DATETIME)
def _datetime(field, value):
    s = str(value).strip()
    if not s:
        return None
    if s.isdigit():
        return datetime.fromtimestamp(int(s), tz=timezone.utc).isoformat()
    try:
        return datetime.fromisoformat(s).isoformat()
    except ValueError:
        pass
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(s, fmt).isoformat()
        except ValueError:
            continue
    raise ValueError(f"{field.name}: {value!r} is not a recognised date/time")


@_sanitizer(FieldType.OPTIONS)
def _options(field, value):
    if isinstance(value, (list, tuple)):
        picked = [str(v).strip() for v in value]
    else:
        picked = [t.strip() for t in _OPTION_SPLIT.split(str(value))]
    picked = [p for p in picked if p]
    if field.options:
        unknown = [p for p in picked if p not in field.options]
        if unknown:
            raise ValueError(f"{field.name}: unknown option(s) {', '.join(unknown)}")
    return picked


@_sanitizer(FieldType.TITLE, FieldType.TEXT)
def _text(field, value):
    # single-line types
    return " ".join(str(value).split())


@_sanitizer(FieldType.TEXTAREA)
def _textarea(field, value):
    return str(value)


@_sanitizer(FieldType.PAGE)
def _page_ref(field, value):
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        ids = [int(v) for v in value]
    else:
        ids = [int(value)]
    if not field.multiple:
        return ids[0] if ids else None
    return ids
