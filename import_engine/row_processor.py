"""
import_engine.row_processor - Turn one CSV row into a draft, then a page.

Single-responsibility: given the bound cells of a row, build a
DraftRecord (or raise RowError), and write a draft either as a new page
or merged onto an existing one.  Deferred (file) values are carried on
the draft but never written here; the importer applies them once the
page has an id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from sqlalchemy.orm import Session

from db.models import Page
from import_engine.coercer import Deferred, coerce
from import_engine.field_map import ColumnBinding
from import_engine.references import ReferenceResolver
from schema.fields import FieldDescriptor, FieldType
from services.pages_service import PagesService, SaveResult


class RowError(Exception):
    """Raised when a row cannot be imported."""
    pass


@dataclass
class DraftRecord:
    template: str
    name: Optional[str] = None
    values: dict[str, Any] = field(default_factory=dict)       # applied on first save
    deferred: dict[str, Any] = field(default_factory=dict)     # applied once the page has an id


class RowProcessor:

    def __init__(
        self,
        session: Session,
        template: str,
        binding: ColumnBinding,
        fields: Sequence[FieldDescriptor],
        resolver: ReferenceResolver,
    ):
        self.session = session
        self.template = template
        self.binding = binding
        self.fields = {f.name: f for f in fields}
        self.resolver = resolver

    def build_draft(self, cells: Sequence[str]) -> DraftRecord:
        """Coerce every bound cell.  Raises RowError if no page name results."""
        draft = DraftRecord(template=self.template)
        for name, raw in self.binding.bound_cells(cells):
            result = coerce(self.fields[name], raw, self.resolver)
            if isinstance(result, Deferred):
                if result.value is not None:
                    draft.deferred[name] = result.value
                continue
            if result.name and draft.name is None:
                draft.name = result.name
            if result.value is not None:
                draft.values[name] = result.value

        if not draft.name:
            raise RowError("No page name: the title is empty or has no usable characters")
        return draft

    def create(self, parent: Page, draft: DraftRecord, name: str) -> SaveResult:
        page = PagesService.new_page(parent, draft.template, name)
        return PagesService.save(self.session, page, draft.values)

    def merge(self, existing: Page, draft: DraftRecord) -> SaveResult:
        """Overwrite existing's fields with the draft's immediate values."""
        if existing.template != draft.template:
            raise RowError(
                f"Existing page {existing.path} uses template {existing.template!r}, "
                f"not {draft.template!r}")

        # Same references in a different representation are not a change
        untracked = [
            name for name, value in draft.values.items()
            if self.fields[name].type is FieldType.PAGE
            and _stringify(existing.get_value(name)) == _stringify(value)
        ]
        return PagesService.save(self.session, existing, draft.values, untracked)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "|".join(str(v) for v in value)
    return str(value)
