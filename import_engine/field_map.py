"""
import_engine.field_map - CSV column ↔ page field binding.

Built once per run from the header row.  A column is auto-bound to the
importable field whose name equals the header text; explicit overrides
(keyed by column index or header text) replace the auto choice.  Each
field takes at most one column: explicit bindings beat auto matches, and
otherwise the leftmost column wins.  Losing columns are left unbound and
reported as warnings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional, Sequence, Union

from schema import get_template_fields
from schema.fields import FieldDescriptor

ColumnKey = Union[int, str]


def importable_fields(template: str) -> list[FieldDescriptor]:
    """Fields of template that a CSV column may be bound to (schema order)."""
    return [f for f in (get_template_fields(template) or []) if f.importable]


@dataclass
class ColumnBinding:
    header: list[str]
    columns: list[Optional[str]]                  # index → field name or None
    warnings: list[str] = field(default_factory=list)

    def field_for(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.columns):
            return self.columns[index]
        return None

    def bound(self) -> list[tuple[int, str]]:
        return [(i, name) for i, name in enumerate(self.columns) if name]

    def bound_cells(self, cells: Sequence[str]) -> Iterator[tuple[str, str]]:
        """Yield (field name, raw value) for each bound column present in cells."""
        for index, name in self.bound():
            if index < len(cells):
                yield name, cells[index]

    def to_dict(self) -> dict:
        return {
            "columns": [
                {"index": i, "header": h, "field": self.columns[i]}
                for i, h in enumerate(self.header)
            ],
            "warnings": list(self.warnings),
        }


def bind(
    header: Sequence[str],
    fields: Sequence[FieldDescriptor],
    overrides: Optional[Mapping[ColumnKey, Optional[str]]] = None,
) -> ColumnBinding:
    """Bind header columns to importable fields."""
    offered = {f.name for f in fields if f.importable}
    header = [h.strip() for h in header]
    warnings: list[str] = []

    explicit = _resolve_overrides(header, overrides or {}, warnings)

    # First pass: each column's wish, and whether it came from an override
    wanted: list[tuple[Optional[str], bool]] = []
    for idx, text in enumerate(header):
        if idx in explicit:
            choice = explicit[idx]
            if choice and choice not in offered:
                warnings.append(
                    f"Column {idx + 1} ({text!r}): {choice!r} is not an importable field; ignored")
                choice = None
            wanted.append((choice, True))
        else:
            wanted.append((text if text in offered else None, False))

    # Second pass: explicit claims first, then auto matches, leftmost wins
    columns: list[Optional[str]] = [None] * len(header)
    claimed: dict[str, int] = {}
    for want_explicit in (True, False):
        for idx, (choice, is_explicit) in enumerate(wanted):
            if not choice or is_explicit is not want_explicit:
                continue
            if choice in claimed:
                warnings.append(
                    f"Column {idx + 1} ({header[idx]!r}): field {choice!r} already "
                    f"bound to column {claimed[choice] + 1}; ignored")
                continue
            claimed[choice] = idx
            columns[idx] = choice

    return ColumnBinding(header=list(header), columns=columns, warnings=warnings)


def _resolve_overrides(
    header: Sequence[str],
    overrides: Mapping[ColumnKey, Optional[str]],
    warnings: list[str],
) -> dict[int, Optional[str]]:
    """Turn {index-or-header: field} into {index: field-or-None}."""
    resolved: dict[int, Optional[str]] = {}
    for key, target in overrides.items():
        if isinstance(key, int) or (isinstance(key, str) and key.isdigit() and key not in header):
            idx = int(key)
            if not 0 <= idx < len(header):
                warnings.append(f"Override for column index {idx} is out of range; ignored")
                continue
            resolved[idx] = target or None
        elif key in header:
            resolved[header.index(key)] = target or None
        else:
            warnings.append(f"Override for unknown column {key!r}; ignored")
    return resolved
