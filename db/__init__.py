"""
db - Database layer.

Public API:
    init_db()                  → create engine + tables + root page
    get_session()              → new Session
    Page, PageField, PageFile  → ORM models
"""

from db.engine import init_db, get_session, dispose             # noqa: F401
from db.models import Base, Page, PageField, PageFile           # noqa: F401
