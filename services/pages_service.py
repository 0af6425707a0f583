"""
services.pages_service - Lookup and write operations on Page records.

All session management is the caller's responsibility (open before,
commit/rollback/close after).  This keeps the service testable and lets
the importer decide where each unit of work ends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from db.models import Page, PageFile
from schema import get_template_fields, sanitize
from schema.fields import FieldType


class PageValidationError(ValueError):
    """Raised when the store refuses a value (unknown field, bad format, …)."""


@dataclass
class SaveResult:
    page: Page
    changes: list[str] = field(default_factory=list)
    written: bool = False
    created: bool = False


@dataclass(frozen=True)
class StoredFile:
    filename: str
    source: str
    sha256: str = ""


class PagesService:

    # ── Lookup ─────────────────────────────────────────────────────────

    @staticmethod
    def get_root(session: Session) -> Optional[Page]:
        return session.query(Page).filter(Page.parent_id.is_(None)).first()

    @staticmethod
    def get_by_id(session: Session, page_id: int) -> Optional[Page]:
        return session.get(Page, page_id)

    @staticmethod
    def get_by_path(session: Session, path: str) -> Optional[Page]:
        """Resolve '/a/b/' (leading/trailing slashes optional) to a page."""
        page = PagesService.get_root(session)
        for segment in (s for s in path.strip().split("/") if s):
            if page is None:
                return None
            page = PagesService.get_child(session, page, segment)
        return page

    @staticmethod
    def get_child(session: Session, parent: Page, name: str) -> Optional[Page]:
        """Child of parent called name, whatever its status (hidden/trash included)."""
        return (
            session.query(Page)
            .filter(Page.parent_id == parent.id, Page.name == name)
            .first()
        )

    @staticmethod
    def find(
        session: Session,
        *,
        parent: Optional[Page] = None,
        template: Optional[str] = None,
        page_id: Optional[int] = None,
        name: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Optional[Page]:
        """First page matching every given criterion, lowest id first."""
        q = session.query(Page)
        if parent is not None:
            q = q.filter(Page.parent_id == parent.id)
        if template:
            q = q.filter(Page.template == template)
        if page_id is not None:
            q = q.filter(Page.id == page_id)
        if name is not None:
            q = q.filter(Page.name == name)
        if title is not None:
            q = q.filter(Page.title == title)
        return q.order_by(Page.id).first()

    # ── Write ──────────────────────────────────────────────────────────

    @staticmethod
    def new_page(parent: Page, template: str, name: str, title: str = "") -> Page:
        """Build an unsaved page; save() persists it."""
        # parent_id only; the page stays out of the session until save()
        return Page(parent_id=parent.id, template=template,
                    name=name, title=title, status=Page.STATUS_ON)

    @staticmethod
    def save(
        session: Session,
        page: Page,
        values: Optional[Mapping[str, Any]] = None,
        untracked: Iterable[str] = (),
    ) -> SaveResult:
        """
        Apply values to page and flush.

        Every value is sanitized for its field type first; a value the
        field cannot hold raises PageValidationError before anything is
        written.  Fields listed in untracked are stored but never reported
        as changes.  New pages are always written; existing pages only when
        at least one tracked value changed.
        """
        fields = get_template_fields(page.template)
        if fields is None:
            raise PageValidationError(f"unknown template {page.template!r}")
        by_name = {f.name: f for f in fields}
        untracked = set(untracked)

        cleaned: dict[str, Any] = {}
        for name, value in (values or {}).items():
            desc = by_name.get(name)
            if desc is None:
                raise PageValidationError(
                    f"template {page.template!r} has no field {name!r}")
            if desc.type is FieldType.FILE:
                raise PageValidationError(f"{name}: file fields are set with set_files()")
            try:
                cleaned[name] = (desc, sanitize(desc, value))
            except ValueError as exc:
                raise PageValidationError(str(exc)) from exc

        is_new = page.id is None
        result = SaveResult(page=page, created=is_new)

        for name, (desc, value) in cleaned.items():
            if desc.type is FieldType.TITLE:
                changed = (page.title or "") != value
                if changed:
                    page.title = value
            else:
                changed = page.set_value(name, value)
            if changed and name not in untracked:
                result.changes.append(name)

        if is_new:
            session.add(page)
        result.written = is_new or bool(result.changes)
        if result.written:
            if not is_new:
                page.modified_at = datetime.now(timezone.utc)
            session.flush()
        return result

    @staticmethod
    def set_files(
        session: Session,
        page: Page,
        field_name: str,
        stored: list[StoredFile],
    ) -> bool:
        """
        Replace the files of field_name with stored (in order).
        Returns True if the field's file list changed.
        """
        current = page.files_for(field_name)
        if [(f.filename, f.source) for f in current] == [(s.filename, s.source) for s in stored]:
            return False
        for f in current:
            page.files.remove(f)
        for idx, s in enumerate(stored):
            page.files.append(PageFile(
                field_name=field_name, filename=s.filename,
                source=s.source, sha256=s.sha256, sort=idx,
            ))
        page.modified_at = datetime.now(timezone.utc)
        session.flush()
        return True
