"""
import_engine.duplicates - What to do when a row's page already exists.

    existing?  policy          → decision
    no         (any)           → CREATE
    yes        skip            → SKIP
    yes        create-unique   → CREATE_UNIQUE  (rename, then create)
    yes        modify          → MODIFY         (merge into existing)
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from db.models import Page
from import_engine.run_config import DuplicatePolicy
from services.name_service import unique_name
from services.pages_service import PagesService


class Decision(str, Enum):
    CREATE        = "create"
    SKIP          = "skip"
    CREATE_UNIQUE = "create-unique"
    MODIFY        = "modify"


_ON_DUPLICATE = {
    DuplicatePolicy.SKIP:          Decision.SKIP,
    DuplicatePolicy.CREATE_UNIQUE: Decision.CREATE_UNIQUE,
    DuplicatePolicy.MODIFY:        Decision.MODIFY,
}


def decide(existing: Optional[Page], policy: DuplicatePolicy) -> Decision:
    if existing is None:
        return Decision.CREATE
    return _ON_DUPLICATE[policy]


def resolve(
    session: Session,
    parent: Page,
    name: str,
    policy: DuplicatePolicy,
) -> tuple[Decision, Optional[Page], str]:
    """
    Look up (parent, name) and decide.

    Returns (decision, existing page or None, name to create under).  For
    CREATE_UNIQUE the returned name is already collision-free.
    """
    existing = PagesService.get_child(session, parent, name)
    decision = decide(existing, policy)
    if decision is Decision.CREATE_UNIQUE:
        name = unique_name(session, name, parent)
    return decision, existing, name
