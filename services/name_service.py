"""
services.name_service - Collision-free page names.

Isolated so both the importer's duplicate handling and the reference
auto-creation share the same logic.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from db.models import Page


def unique_name(session: Session, candidate: str, parent: Page) -> str:
    """
    Return candidate if no child of parent uses it, else the first free
    candidate-1, candidate-2, …  Hidden and trashed children count as taken.
    """
    taken = {
        name for (name,) in
        session.query(Page.name)
        .filter(Page.parent_id == parent.id, Page.name.like(f"{candidate}%"))
        .all()
    }
    if candidate not in taken:
        return candidate
    n = 1
    while f"{candidate}-{n}" in taken:
        n += 1
    return f"{candidate}-{n}"
