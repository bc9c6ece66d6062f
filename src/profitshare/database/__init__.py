"""Database layer for profitshare."""

from profitshare.database.base import Database
from profitshare.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
