"""SQLite storage for users and weight samples."""

from weightlog.db.connection import DatabaseConnection, get_db, set_db

__all__ = ["DatabaseConnection", "get_db", "set_db"]
