"""
schema.naming - Page name (URL segment) construction.

A page name is derived from its title:
    "Café Crème 2024!"  →  "cafe-creme-2024"

Lossy and ASCII-only.  Uniqueness is NOT enforced here; see
services.name_service.unique_name for that.
"""

from __future__ import annotations

import re
import unicodedata

MAX_NAME_LENGTH = 128

_INVALID = re.compile(r"[^a-z0-9._-]+")
_DASHES = re.compile(r"-{2,}")


def page_name(text: str) -> str:
    """Slugify text into a page name.  Returns "" when nothing usable remains."""
    if not text:
        return ""
    # NFKD splits accents off their base letters so the ASCII encode keeps the letter
    ascii_text = (
        unicodedata.normalize("NFKD", text)
        .encode("ascii", "ignore")
        .decode("ascii")
        .lower()
    )
    name = _INVALID.sub("-", ascii_text)
    name = _DASHES.sub("-", name).strip("-._")
    if len(name) > MAX_NAME_LENGTH:
        name = name[:MAX_NAME_LENGTH].rstrip("-._")
    return name


def is_valid_name(name: str) -> bool:
    return bool(name) and page_name(name) == name
