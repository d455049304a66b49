"""
Opening SQLite connections.

``get_connection()`` is the one place connections are created. Each
connection has foreign keys switched on, a busy timeout, ``sqlite3.Row``
rows and, for writers, WAL journaling so that readers building
recommendations do not wait on rating inserts. Leaving the ``with`` block
commits; an exception rolls back.

Example::

    with get_connection("data/db/meal_plan_organizer.db") as conn:
        RecipeRatingRepository(conn).insert(rating)

    with get_connection(db_path, read_only=True) as conn:
        recipes = RecipeRepository(conn).list_all()
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


def _open(db_path: str, timeout_s: float, read_only: bool) -> sqlite3.Connection:
    if db_path == MEMORY_DB:
        return sqlite3.connect(db_path, timeout=timeout_s)
    path = Path(db_path)
    if read_only:
        # mode=ro refuses to create a missing file.
        return sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", timeout=timeout_s, uri=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(path, timeout=timeout_s)


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
    read_only: bool = False,
) -> Iterator[sqlite3.Connection]:
    """Yield a configured connection to ``db_path``.

    Args:
        db_path: Database file, or ``":memory:"``. Missing parent
            directories are created for read-write connections.
        wal_mode: Switch the journal to WAL (ignored when ``read_only``).
        busy_timeout_ms: How long to wait on a locked database.
        read_only: Open the existing file with ``mode=ro``.

    Raises:
        sqlite3.OperationalError: The file cannot be opened, or stays locked
            past the timeout.
    """
    conn = _open(db_path, busy_timeout_ms / 1000, read_only)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
        if wal_mode and not read_only:
            conn.execute("PRAGMA journal_mode = WAL;")
        yield conn
        if not read_only:
            conn.commit()
    except Exception:
        logger.debug("Rolling back transaction on %s", db_path)
        conn.rollback()
        raise
    finally:
        conn.close()
