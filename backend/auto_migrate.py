"""
Automatic database migration system.
Compares SQLAlchemy models with the live schema and adds missing columns,
so databases created before fp_total / resource_id existed keep working.
"""
import logging
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from backend.database import engine as default_engine, Base
from backend import models  # noqa: F401  registers all models

logger = logging.getLogger("frisfocus.migrations")


def get_default_value(column) -> str:
    """Get a literal SQL default for a column ('NULL' if none can be expressed)"""
    default = column.default
    if default is None or not hasattr(default, "arg") or callable(default.arg):
        return "NULL"

    value = default.arg
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    return "NULL"


def build_add_column_sql(table_name: str, column, dialect) -> str:
    """Build the ALTER TABLE statement for one missing column"""
    column_type = column.type.compile(dialect=dialect)
    default_value = get_default_value(column)

    alter_sql = f"ALTER TABLE {table_name} ADD COLUMN {column.name} {column_type}"
    if default_value != "NULL":
        alter_sql += f" DEFAULT {default_value}"
        # NOT NULL can only be added together with a default
        if not column.nullable:
            alter_sql += " NOT NULL"
    return alter_sql


def auto_migrate(engine: Engine = default_engine) -> int:
    """
    Add every model column missing from existing tables.

    Tables that do not exist yet are left to Base.metadata.create_all().

    Returns:
        Number of columns added
    """
    logger.info("Starting automatic schema migration...")

    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    migrations_applied = 0

    with engine.begin() as conn:
        for table_name, table in Base.metadata.tables.items():
            if table_name not in existing_tables:
                logger.warning(f"Table '{table_name}' doesn't exist. Run Base.metadata.create_all() first.")
                continue

            existing_columns = {col["name"] for col in inspector.get_columns(table_name)}

            for column in table.columns:
                if column.name in existing_columns:
                    continue

                alter_sql = build_add_column_sql(table_name, column, engine.dialect)
                logger.info(f"Adding column '{column.name}' to table '{table_name}'")
                logger.debug(f"SQL: {alter_sql}")

                try:
                    conn.execute(text(alter_sql))
                    migrations_applied += 1
                except SQLAlchemyError as e:
                    logger.error(f"Failed to add column {table_name}.{column.name}: {e}")
                    raise

    if migrations_applied > 0:
        logger.info(f"Migration completed: {migrations_applied} column(s) added")
    else:
        logger.info("Schema is up to date - no migrations needed")

    return migrations_applied


if __name__ == "__main__":
    # Allow running as standalone script
    logging.basicConfig(level=logging.INFO)
    auto_migrate()
