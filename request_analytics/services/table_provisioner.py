"""Create the fingerprint table when it does not exist yet."""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine

from request_analytics.errors import DRIVER_ERRORS, StoreError, WriteStage, describe_driver_error
from request_analytics.models.schema import FINGERPRINT_COLUMNS, ORDER_BY_COLUMNS

logger = logging.getLogger(__name__)


def build_create_table_statement(table_name: str) -> str:
    """Return the idempotent MergeTree DDL for the fingerprint table."""

    columns = ", ".join(f"{column.name} {column.type.value}" for column in FINGERPRINT_COLUMNS)
    order_by = ", ".join(ORDER_BY_COLUMNS)
    return (
        f"CREATE TABLE IF NOT EXISTS {table_name} ( {columns} ) "
        f"ENGINE = MergeTree() ORDER BY ({order_by})"
    )


def ensure_table(engine: Engine, table_name: str) -> None:
    """Execute the CREATE TABLE IF NOT EXISTS statement for ``table_name``."""

    statement = build_create_table_statement(table_name)
    try:
        with engine.begin() as conn:
            conn.execute(text(statement))
    except DRIVER_ERRORS as exc:
        detail = describe_driver_error(exc)
        logger.error("Error creating table '%s': %s", table_name, detail)
        raise StoreError(WriteStage.PROVISION, detail) from exc

    logger.info("Ensured fingerprint table '%s'.", table_name)


__all__ = ["build_create_table_statement", "ensure_table"]
