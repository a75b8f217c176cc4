"""ClickHouse engine construction and connectivity checks."""

from __future__ import annotations

import logging
import re
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from request_analytics.errors import DRIVER_ERRORS, ConnectError, describe_driver_error

logger = logging.getLogger(__name__)

_TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_PING_QUERY = text("SELECT 1")


def validate_table_name(raw_name: str) -> str:
    """Return the table name when it is a plain identifier, else raise ValueError."""

    name = (raw_name or "").strip()
    if not _TABLE_NAME_PATTERN.fullmatch(name):
        raise ValueError(f"Invalid table name '{raw_name}'.")
    return name


def create_clickhouse_engine(url: str, *, echo: bool = False) -> Engine:
    """Create a pooled SQLAlchemy engine for the clickhouse-sqlalchemy dialect."""

    engine_options: dict[str, Any] = {
        "echo": echo,
        "pool_pre_ping": True,
    }
    return create_engine(url, **engine_options)


def ping_engine(engine: Engine) -> None:
    """Run a round-trip query, raising ConnectError when the store is unusable."""

    try:
        with engine.connect() as conn:
            conn.execute(_PING_QUERY)
    except DRIVER_ERRORS as exc:
        detail = describe_driver_error(exc)
        logger.error("ClickHouse ping failed: %s", detail)
        raise ConnectError(detail) from exc


__all__ = ["create_clickhouse_engine", "ping_engine", "validate_table_name"]
