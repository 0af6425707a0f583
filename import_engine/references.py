"""
import_engine.references - Resolve page-reference cells to page ids.

A cell may name several pages, separated by newlines or pipes.  Each token
is matched inside the field's parent scope: by id (all-digit tokens), then
by name, then by title.  Unmatched tokens are either created (when the run
allows it and the field declares both a parent and a template) or dropped.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import Page
from schema import page_name
from schema.fields import FieldDescriptor
from services.name_service import unique_name
from services.pages_service import PagesService, PageValidationError

logger = logging.getLogger(__name__)

_TOKEN_SPLIT = re.compile(r"[\r\n|]+")


def split_tokens(raw: str) -> list[str]:
    return [t.strip() for t in _TOKEN_SPLIT.split(raw or "") if t.strip()]


class ReferenceResolver:
    """
    One per run.  Pages created on the fly are committed immediately so
    that a later failure of the importing row cannot roll them back.
    """

    def __init__(self, session: Session, create_references: bool = False):
        self.session = session
        self.create_references = create_references
        self._parents: dict[str, Optional[Page]] = {}
        self._created: list[Page] = []
        self._notes: list[str] = []

    def resolve(self, field: FieldDescriptor, raw: str) -> list[int]:
        """Return ids of the pages named in raw, in cell order, without repeats."""
        parent = self._parent_for(field)
        ids: list[int] = []
        for token in split_tokens(raw):
            page = self._match(field, parent, token)
            if page is None and self._may_create(field, parent):
                page = self._create(field, parent, token)
            if page is None:
                logger.debug("Field %s: no page matches %r", field.name, token)
                continue
            if page.id not in ids:
                ids.append(page.id)
        return ids

    def drain(self) -> tuple[list[Page], list[str]]:
        """Return and forget pages created and problems seen since the last drain."""
        created, notes = self._created, self._notes
        self._created, self._notes = [], []
        return created, notes

    # ── Private helpers ────────────────────────────────────────────────

    def _parent_for(self, field: FieldDescriptor) -> Optional[Page]:
        if not field.parent:
            return None
        if field.parent not in self._parents:
            self._parents[field.parent] = PagesService.get_by_path(self.session, field.parent)
        return self._parents[field.parent]

    def _match(self, field: FieldDescriptor, parent: Optional[Page], token: str) -> Optional[Page]:
        if field.parent and parent is None:
            return None          # configured scope does not exist
        scope = dict(parent=parent, template=field.template)
        if token.isdigit():
            page = PagesService.find(self.session, page_id=int(token), **scope)
            if page is not None:
                return page
        name = page_name(token)
        if name:
            page = PagesService.find(self.session, name=name, **scope)
            if page is not None:
                return page
        return PagesService.find(self.session, title=token, **scope)

    def _may_create(self, field: FieldDescriptor, parent: Optional[Page]) -> bool:
        return self.create_references and parent is not None and bool(field.template)

    def _create(self, field: FieldDescriptor, parent: Page, token: str) -> Optional[Page]:
        name = page_name(token)
        if not name:
            self._notes.append(f"{field.name}: cannot derive a page name from {token!r}")
            return None
        page = PagesService.new_page(parent, field.template,
                                     unique_name(self.session, name, parent), token)
        try:
            PagesService.save(self.session, page)
            self.session.commit()
        except (PageValidationError, SQLAlchemyError) as exc:
            self.session.rollback()
            logger.warning("Could not create %s page %r: %s", field.template, token, exc)
            self._notes.append(f"{field.name}: could not create page {token!r}: {exc}")
            return None
        logger.info("Created referenced page %s", page.path)
        self._created.append(page)
        return page
