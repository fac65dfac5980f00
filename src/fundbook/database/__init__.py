"""Database layer for fundbook."""

from fundbook.database.base import Database
from fundbook.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
