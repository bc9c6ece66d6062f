"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from profitshare.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "PROFITSHARE_DB_PATH"
DATABASE_URL_ENV = "PROFITSHARE_DATABASE_URL"


def default_database_path() -> Path:
    """Return ~/.profitshare/profitshare.db, creating the directory."""
    db_dir = Path.home() / ".profitshare"
    db_dir.mkdir(parents=True, exist_ok=True)
    return db_dir / "profitshare.db"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks PROFITSHARE_DB_PATH
            environment variable, then defaults to ~/.profitshare/profitshare.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    path = database_path or os.environ.get(DB_PATH_ENV) or default_database_path()
    return SQLAlchemyDatabase(f"sqlite:///{path}")


def create_database(
    database_url: Optional[str] = None, database_path: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create a database instance from a SQLAlchemy URL.

    A URL (argument, then PROFITSHARE_DATABASE_URL) wins over a SQLite path;
    without either, the SQLite defaults of create_sqlite_database apply.
    """
    database_url = database_url or os.environ.get(DATABASE_URL_ENV)
    if database_url:
        return SQLAlchemyDatabase(database_url)
    return create_sqlite_database(database_path)
