"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from fundbook.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "FUNDBOOK_DB_PATH"


def default_database_path() -> Path:
    """Default database location, ~/.fundbook/fundbook.db."""
    return Path.home() / ".fundbook" / "fundbook.db"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FUNDBOOK_DB_PATH
            environment variable, then defaults to ~/.fundbook/fundbook.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV)

    if database_path is None:
        path = default_database_path()
        path.parent.mkdir(exist_ok=True)
        database_path = str(path)

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")
