"""
Dialect helpers for repository code that must behave the same on
PostgreSQL (production) and SQLite (tests).
"""

from __future__ import annotations

from sqlalchemy.exc import UnboundExecutionError
from sqlalchemy.orm import Session


def get_dialect_name(session: Session, default: str = "sqlite") -> str:
    """Name of the dialect the session is bound to, or ``default`` if unbound."""
    try:
        bind = session.get_bind()
    except UnboundExecutionError:
        return default
    dialect = getattr(bind, "dialect", None)
    return getattr(dialect, "name", None) or default


def supports_row_locks(session: Session) -> bool:
    """SELECT ... FOR UPDATE is only meaningful on PostgreSQL; SQLite locks the whole file."""
    return get_dialect_name(session) == "postgresql"
