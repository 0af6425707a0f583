"""
db.models - SQLAlchemy ORM declarations.

Tables
------
pages        - one row per page.  Pages form a tree through parent_id;
               (parent_id, name) is unique so a name addresses exactly one
               child of a parent, hidden and trashed pages included.
page_fields  - EAV store for template-driven field values.  Values are
               JSON-encoded so lists (page references, options) survive
               the round trip.
page_files   - files stored for file-type fields, in field order.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    Column, String, Integer, DateTime, Text, ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _now():
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Page(Base):
    __tablename__ = "pages"

    # ── Status bit flags ───────────────────────────────────────────────
    STATUS_ON     = 0
    STATUS_HIDDEN = 1
    STATUS_TRASH  = 2

    id        = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(Integer, ForeignKey("pages.id"), nullable=True, index=True)
    name      = Column(String(128), nullable=False)
    template  = Column(String(100), nullable=False)
    title     = Column(String(255), nullable=False, default="")
    status    = Column(Integer, nullable=False, default=STATUS_ON)

    created_at  = Column(DateTime, default=_now)
    modified_at = Column(DateTime, default=_now, onupdate=_now)

    parent   = relationship("Page", remote_side=[id], back_populates="children")
    children = relationship("Page", back_populates="parent")

    fields = relationship(
        "PageField", back_populates="page",
        cascade="all, delete-orphan", lazy="selectin",
    )
    files = relationship(
        "PageFile", back_populates="page",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="PageFile.sort",
    )

    __table_args__ = (
        UniqueConstraint("parent_id", "name", name="uq_page_parent_name"),
    )

    # ── Field access ───────────────────────────────────────────────────
    def get_value(self, field_name: str, default: Any = None) -> Any:
        for f in self.fields:
            if f.field_name == field_name:
                return json.loads(f.field_value)
        return default

    def set_value(self, field_name: str, value: Any) -> bool:
        """Store value for field_name.  Returns True if the stored value changed."""
        for f in self.fields:
            if f.field_name == field_name:
                if json.loads(f.field_value) == value:
                    return False
                f.field_value = _encode(value)
                return True
        self.fields.append(PageField(field_name=field_name, field_value=_encode(value)))
        return True

    def files_for(self, field_name: str) -> list["PageFile"]:
        return [f for f in self.files if f.field_name == field_name]

    # ── Tree helpers ───────────────────────────────────────────────────
    @property
    def path(self) -> str:
        if self.parent is None:
            return "/"
        return f"{self.parent.path}{self.name}/"

    @property
    def is_hidden(self) -> bool:
        return bool(self.status & self.STATUS_HIDDEN)

    @property
    def is_trashed(self) -> bool:
        return bool(self.status & self.STATUS_TRASH)

    # ── Serialisation ──────────────────────────────────────────────────
    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "parent_id": self.parent_id,
            "name": self.name,
            "path": self.path,
            "template": self.template,
            "title": self.title or "",
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else "",
            "modified_at": self.modified_at.isoformat() if self.modified_at else "",
        }
        for f in self.fields:
            d[f.field_name] = json.loads(f.field_value)
        files: dict[str, list[str]] = {}
        for pf in self.files:
            files.setdefault(pf.field_name, []).append(pf.filename)
        d.update(files)
        return d


def _encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


class PageField(Base):
    __tablename__ = "page_fields"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    page_id     = Column(Integer,
                         ForeignKey("pages.id", ondelete="CASCADE"),
                         nullable=False, index=True)
    field_name  = Column(String(200), nullable=False)
    field_value = Column(Text, nullable=False, default="null")

    page = relationship("Page", back_populates="fields")

    __table_args__ = (
        Index("ix_page_field_lookup", "page_id", "field_name"),
    )


class PageFile(Base):
    __tablename__ = "page_files"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    page_id    = Column(Integer,
                        ForeignKey("pages.id", ondelete="CASCADE"),
                        nullable=False, index=True)
    field_name = Column(String(200), nullable=False)
    filename   = Column(String(255), nullable=False)
    source     = Column(Text, nullable=False, default="")   # original path or URL
    sha256     = Column(String(64), default="")
    sort       = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=_now)

    page = relationship("Page", back_populates="files")

    def to_dict(self) -> dict:
        return {
            "field": self.field_name,
            "filename": self.filename,
            "source": self.source,
            "sha256": self.sha256 or "",
        }
