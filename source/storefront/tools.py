"""Module with utilities."""

import time
from textwrap import dedent

from sqlalchemy import Engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import OperationalError
from sqlalchemy.schema import CreateIndex, CreateTable

from storefront import triggers
from storefront.logger import Logger
from storefront.models import Base

logger = Logger.get_logger(__name__)

DIALECTS = {
    "postgresql": postgresql.dialect,
    "sqlite": sqlite.dialect,
}


def wait_for_postgres(engine: Engine, max_retries: int, delay: int) -> bool:
    """Retry connecting until the database answers or `max_retries` runs out."""
    for attempt in range(1, max_retries + 1):
        try:
            with engine.connect():
                logger.info(f"Connected to {engine.url.get_backend_name()}")
                return True
        except OperationalError as e:
            logger.info(f"Database not ready ({attempt}/{max_retries}): {e.orig}")
            time.sleep(delay)

    logger.error(f"Database unavailable after {max_retries} attempts")
    return False


def setup_database(engine: Engine) -> None:
    """Create database tables and the order history triggers."""
    Base.metadata.create_all(engine)
    logger.info("Database tables and triggers created successfully")


def render_schema_ddl(dialect_name: str) -> str:
    """Render the full schema (tables, indexes, triggers) as SQL for a dialect."""
    if dialect_name not in DIALECTS:
        raise ValueError(
            f"Unsupported dialect '{dialect_name}', expected one of {sorted(DIALECTS)}"
        )
    dialect = DIALECTS[dialect_name]()

    statements = []
    for table in Base.metadata.sorted_tables:
        statements.append(str(CreateTable(table).compile(dialect=dialect)).strip())
        for index in sorted(table.indexes, key=lambda index: index.name):
            statements.append(str(CreateIndex(index).compile(dialect=dialect)).strip())

    for statement in triggers.statements_for(dialect_name):
        statements.append(dedent(statement).strip())

    return ";\n\n".join(statements) + ";\n"
