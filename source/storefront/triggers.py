"""Engine-side triggers for the order_history audit log.

Each inserted order_details row is copied into order_history together with the
owning order's customer_id and order_date. order_history itself rejects UPDATE
and DELETE. The DDL is attached to ``Base.metadata`` so ``create_all`` installs
it once every table exists; all statements are safe to run repeatedly.
"""

from sqlalchemy import DDL, Engine, event

from storefront.logger import Logger
from storefront.models import Base

logger = Logger.get_logger(__name__)

HISTORY_COLUMNS = (
    "order_detail_id, customer_id, order_date, order_id, "
    "product_id, quantity, unit_price"
)

HISTORY_SELECT = (
    "SELECT NEW.order_detail_id, o.customer_id, o.order_date, NEW.order_id, "
    "NEW.product_id, NEW.quantity, NEW.unit_price "
    "FROM orders AS o WHERE o.order_id = NEW.order_id"
)

APPEND_ONLY_MESSAGE = "order_history is append-only"

CREATE_STATEMENTS = {
    "postgresql": [
        f"""
        CREATE OR REPLACE FUNCTION record_order_history() RETURNS TRIGGER AS $$
        BEGIN
            INSERT INTO order_history ({HISTORY_COLUMNS})
            {HISTORY_SELECT};
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
        """,
        "DROP TRIGGER IF EXISTS trg_order_details_history ON order_details",
        """
        CREATE TRIGGER trg_order_details_history
        AFTER INSERT ON order_details
        FOR EACH ROW EXECUTE FUNCTION record_order_history()
        """,
        f"""
        CREATE OR REPLACE FUNCTION reject_order_history_change() RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION '{APPEND_ONLY_MESSAGE}';
        END;
        $$ LANGUAGE plpgsql
        """,
        "DROP TRIGGER IF EXISTS trg_order_history_append_only ON order_history",
        """
        CREATE TRIGGER trg_order_history_append_only
        BEFORE UPDATE OR DELETE ON order_history
        FOR EACH ROW EXECUTE FUNCTION reject_order_history_change()
        """,
    ],
    "sqlite": [
        f"""
        CREATE TRIGGER IF NOT EXISTS trg_order_details_history
        AFTER INSERT ON order_details
        FOR EACH ROW
        BEGIN
            INSERT INTO order_history ({HISTORY_COLUMNS})
            {HISTORY_SELECT};
        END
        """,
        f"""
        CREATE TRIGGER IF NOT EXISTS trg_order_history_no_update
        BEFORE UPDATE ON order_history
        BEGIN
            SELECT RAISE(ABORT, '{APPEND_ONLY_MESSAGE}');
        END
        """,
        f"""
        CREATE TRIGGER IF NOT EXISTS trg_order_history_no_delete
        BEFORE DELETE ON order_history
        BEGIN
            SELECT RAISE(ABORT, '{APPEND_ONLY_MESSAGE}');
        END
        """,
    ],
}

DROP_STATEMENTS = {
    "postgresql": [
        "DROP TRIGGER IF EXISTS trg_order_details_history ON order_details",
        "DROP TRIGGER IF EXISTS trg_order_history_append_only ON order_history",
        "DROP FUNCTION IF EXISTS record_order_history()",
        "DROP FUNCTION IF EXISTS reject_order_history_change()",
    ],
    "sqlite": [
        "DROP TRIGGER IF EXISTS trg_order_details_history",
        "DROP TRIGGER IF EXISTS trg_order_history_no_update",
        "DROP TRIGGER IF EXISTS trg_order_history_no_delete",
    ],
}

# Functions outlive their tables on PostgreSQL
POST_DROP_STATEMENTS = {
    "postgresql": DROP_STATEMENTS["postgresql"][2:],
}


def statements_for(dialect_name: str, statements: dict = CREATE_STATEMENTS) -> list:
    """Return the trigger DDL for a dialect, raising for unsupported engines."""
    try:
        return statements[dialect_name]
    except KeyError:
        raise ValueError(f"No trigger DDL for dialect '{dialect_name}'") from None


def install_triggers(engine: Engine) -> None:
    """(Re)install the audit triggers on an existing database."""
    dialect_name = engine.dialect.name
    with engine.begin() as connection:
        for statement in statements_for(dialect_name, DROP_STATEMENTS):
            connection.execute(DDL(statement))
        for statement in statements_for(dialect_name):
            connection.execute(DDL(statement))
    logger.info(f"Installed order history triggers for {dialect_name}")


def drop_triggers(engine: Engine) -> None:
    """Remove the audit triggers, leaving the tables in place."""
    dialect_name = engine.dialect.name
    with engine.begin() as connection:
        for statement in statements_for(dialect_name, DROP_STATEMENTS):
            connection.execute(DDL(statement))
    logger.info(f"Dropped order history triggers for {dialect_name}")


for _dialect, _statements in CREATE_STATEMENTS.items():
    for _statement in _statements:
        event.listen(
            Base.metadata, "after_create", DDL(_statement).execute_if(dialect=_dialect)
        )

for _dialect, _statements in POST_DROP_STATEMENTS.items():
    for _statement in _statements:
        event.listen(
            Base.metadata, "after_drop", DDL(_statement).execute_if(dialect=_dialect)
        )
