"""Compare an existing ClickHouse table against the fingerprint layout."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from request_analytics.errors import (
    DRIVER_ERRORS,
    SchemaMismatchError,
    StoreError,
    WriteStage,
    describe_driver_error,
)
from request_analytics.models.schema import SCHEMA_DESCRIPTOR

logger = logging.getLogger(__name__)

_TABLE_COUNT_QUERY = text(
    "SELECT count() FROM system.tables "
    "WHERE database = currentDatabase() AND name = :table_name"
)

_COLUMNS_QUERY = text(
    "SELECT name, type FROM system.columns "
    "WHERE database = currentDatabase() AND table = :table_name"
)


class SchemaStatus(str, Enum):
    """Outcome of inspecting the fingerprint table."""

    ABSENT = "absent"
    MATCHING = "matching"
    MISMATCH = "mismatch"


@dataclass(frozen=True, slots=True)
class SchemaReport:
    """Inspection result; ``mismatch`` is set only for ``SchemaStatus.MISMATCH``."""

    status: SchemaStatus
    mismatch: Optional[SchemaMismatchError] = None

    @property
    def exists(self) -> bool:
        return self.status is not SchemaStatus.ABSENT


def find_mismatch(
    actual_schema: Mapping[str, str],
    expected_schema: Mapping[str, str] = SCHEMA_DESCRIPTOR,
) -> SchemaMismatchError | None:
    """Return the first declared column whose actual type differs, if any.

    Types are compared case-insensitively. Columns present in
    ``actual_schema`` but not declared in ``expected_schema`` are ignored.
    """

    for column, expected_type in expected_schema.items():
        actual_type = actual_schema.get(column)
        if actual_type is None or actual_type.lower() != expected_type.lower():
            return SchemaMismatchError(column, expected_type, actual_type)
    return None


def inspect_table(engine: Engine, table_name: str) -> SchemaReport:
    """Look up ``table_name`` in the system catalog and classify it."""

    try:
        with engine.connect() as conn:
            table_count = conn.execute(
                _TABLE_COUNT_QUERY, {"table_name": table_name}
            ).scalar_one()
            if int(table_count) == 0:
                return SchemaReport(SchemaStatus.ABSENT)

            rows = conn.execute(_COLUMNS_QUERY, {"table_name": table_name}).all()
    except DRIVER_ERRORS as exc:
        detail = describe_driver_error(exc)
        logger.error("Failed to read metadata for table '%s': %s", table_name, detail)
        raise StoreError(WriteStage.METADATA, detail) from exc

    actual_schema = {str(name): str(column_type) for name, column_type in rows}
    mismatch = find_mismatch(actual_schema)
    if mismatch is not None:
        return SchemaReport(SchemaStatus.MISMATCH, mismatch)
    return SchemaReport(SchemaStatus.MATCHING)


def verify_table(engine: Engine, table_name: str) -> SchemaStatus:
    """Return ABSENT or MATCHING; raise SchemaMismatchError for a wrong layout."""

    report = inspect_table(engine, table_name)
    if report.mismatch is not None:
        logger.error("Table '%s' exists with an incompatible layout: %s", table_name, report.mismatch)
        raise report.mismatch
    return report.status


__all__ = [
    "SchemaReport",
    "SchemaStatus",
    "find_mismatch",
    "inspect_table",
    "verify_table",
]
