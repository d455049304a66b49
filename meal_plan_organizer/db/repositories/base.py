"""
Common plumbing for the SQLite repositories.

A repository wraps a ``sqlite3.Connection`` owned by the caller (normally
from ``get_connection()``); it never commits or closes it. SQL is written
by hand in each repository and results come back as pydantic models.
Dates are stored as ``YYYY-MM-DD`` text and datetimes as ISO-8601 with offset.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

Params = Union[Sequence[Any], Mapping[str, Any]]


class BaseRepository:
    """Thin helpers over ``conn.execute`` shared by every repository."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(self, sql: str, params: Params = ()) -> sqlite3.Cursor:
        logger.debug("SQL %s %r", " ".join(sql.split()), params)
        return self.conn.execute(sql, params)

    def fetchone(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: Params = ()) -> list[sqlite3.Row]:
        return self.execute(sql, params).fetchall()

    def execute_insert(self, sql: str, params: Params = ()) -> int:
        """Run an INSERT and return the new ``rowid``."""
        rowid = self.execute(sql, params).lastrowid
        if rowid is None:
            raise sqlite3.DatabaseError("INSERT did not produce a rowid.")
        return rowid

    def count(self, table: str) -> int:
        """Number of rows in ``table``; the name must come from code, not input."""
        (n,) = self.execute(f"SELECT COUNT(*) FROM {table};").fetchone()
        return int(n)


def placeholders(values: Sequence[Any]) -> str:
    """``"?, ?, ?"`` sized for an ``IN (...)`` clause over ``values``."""
    return ", ".join("?" * len(values))
