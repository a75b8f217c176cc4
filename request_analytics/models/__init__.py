"""Fingerprint record and table layout."""

from .fingerprint import Fingerprint
from .schema import (
    COLUMN_NAMES,
    FINGERPRINT_COLUMNS,
    ORDER_BY_COLUMNS,
    SCHEMA_DESCRIPTOR,
    ColumnDefinition,
    ColumnType,
    fingerprint_row,
)

__all__ = [
    "COLUMN_NAMES",
    "ColumnDefinition",
    "ColumnType",
    "FINGERPRINT_COLUMNS",
    "Fingerprint",
    "ORDER_BY_COLUMNS",
    "SCHEMA_DESCRIPTOR",
    "fingerprint_row",
]
