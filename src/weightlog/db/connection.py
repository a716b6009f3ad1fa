"""Database connection management using raw sqlite3."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from weightlog.db.schema import get_schema_sql


class DatabaseConnection:
    """Manages SQLite database connections."""

    def __init__(self, db_path: Path, timeout: float = 5.0):
        """Initialize database connection manager.

        Args:
            db_path: Path to the SQLite database file
            timeout: Seconds to wait on a locked database before failing
        """
        self.db_path = db_path
        self.timeout = timeout
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Create parent directories if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections.

        Commits on success, rolls back and re-raises on error.

        Example:
            with db.get_connection() as conn:
                rows = conn.execute("SELECT * FROM weight_log").fetchall()
        """
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize_schema(self) -> None:
        """Create all tables if they don't exist."""
        with self.get_connection() as conn:
            conn.executescript(get_schema_sql())

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists in the database."""
        query = """
            SELECT name FROM sqlite_master
            WHERE type='table' AND name=?
        """
        with self.get_connection() as conn:
            cursor = conn.execute(query, (table_name,))
            return cursor.fetchone() is not None


# Global database instance (lazy loaded)
_db: Optional[DatabaseConnection] = None


def get_db() -> DatabaseConnection:
    """Get the global database instance.

    Lazily initializes the database connection using settings.
    """
    global _db
    if _db is None:
        from weightlog.config import get_settings

        settings = get_settings()
        _db = DatabaseConnection(settings.database.path)
    return _db


def set_db(db: Optional[DatabaseConnection]) -> None:
    """Set the global database instance.

    Useful for testing with a custom database. Pass None to reset.
    """
    global _db
    _db = db
