"""
Engine construction for the storefront schema.

SQLite connections get foreign key enforcement switched on; PostgreSQL
enforces foreign keys unconditionally.
"""

import sqlite3

from sqlalchemy import Engine, create_engine, event

import storefront.triggers  # noqa: F401  registers trigger DDL on Base.metadata


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_storefront_engine(db_url: str, **kwargs) -> Engine:
    """Create an engine for `db_url` with the storefront connection hooks active."""
    return create_engine(db_url, **kwargs)
