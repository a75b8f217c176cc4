"""ClickHouse table layout for request fingerprints.

``FINGERPRINT_COLUMNS`` is the single ordered source for everything that
touches the table: the declared schema mapping, the CREATE TABLE statement,
the INSERT column list and the row values built from a ``Fingerprint``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from operator import attrgetter
from types import MappingProxyType
from typing import Any, Callable, Mapping

from .fingerprint import Fingerprint


class ColumnType(str, Enum):
    """ClickHouse column types used by the fingerprint table."""

    STRING = "String"
    INT64 = "Int64"
    UINT16 = "UInt16"
    ARRAY_STRING = "Array(String)"


@dataclass(frozen=True, slots=True)
class ColumnDefinition:
    """A table column and the fingerprint accessor that feeds it."""

    name: str
    type: ColumnType
    accessor: Callable[[Fingerprint], Any]


def _column(name: str, column_type: ColumnType) -> ColumnDefinition:
    return ColumnDefinition(name, column_type, attrgetter(name))


FINGERPRINT_COLUMNS: tuple[ColumnDefinition, ...] = (
    _column("user_agent", ColumnType.STRING),
    _column("ip_address", ColumnType.STRING),
    _column("accept_language", ColumnType.STRING),
    _column("accept_encoding", ColumnType.STRING),
    _column("accept_charset", ColumnType.STRING),
    _column("accept", ColumnType.STRING),
    _column("connection", ColumnType.STRING),
    _column("host", ColumnType.STRING),
    _column("x_forwarded_for", ColumnType.STRING),
    _column("referer", ColumnType.STRING),
    _column("cookie", ColumnType.STRING),
    _column("dnt", ColumnType.STRING),
    _column("upgrade_insecure_requests", ColumnType.STRING),
    _column("cache_control", ColumnType.STRING),
    _column("pragma", ColumnType.STRING),
    _column("via", ColumnType.STRING),
    _column("forwarded", ColumnType.STRING),
    _column("x_real_ip", ColumnType.STRING),
    _column("x_forwarded_proto", ColumnType.STRING),
    _column("x_forwarded_host", ColumnType.STRING),
    _column("x_forwarded_port", ColumnType.STRING),
    _column("x_amz_date", ColumnType.STRING),
    _column("x_api_key", ColumnType.STRING),
    _column("x_request_id", ColumnType.STRING),
    _column("authorization", ColumnType.STRING),
    _column("content_type", ColumnType.STRING),
    _column("content_length", ColumnType.INT64),
    _column("method", ColumnType.STRING),
    _column("request_uri", ColumnType.STRING),
    _column("protocol", ColumnType.STRING),
    _column("transfer_encoding", ColumnType.ARRAY_STRING),
    _column("tls_version", ColumnType.UINT16),
    _column("tls_cipher_suite", ColumnType.UINT16),
)

# Ordering key of the MergeTree table.
ORDER_BY_COLUMNS: tuple[str, ...] = ("user_agent", "ip_address")

SCHEMA_DESCRIPTOR: Mapping[str, str] = MappingProxyType(
    {column.name: column.type.value for column in FINGERPRINT_COLUMNS}
)

COLUMN_NAMES: tuple[str, ...] = tuple(column.name for column in FINGERPRINT_COLUMNS)


def fingerprint_row(fingerprint: Fingerprint) -> dict[str, Any]:
    """Return insert parameters keyed by column name, in table order."""

    row: dict[str, Any] = {}
    for column in FINGERPRINT_COLUMNS:
        value = column.accessor(fingerprint)
        if column.type is ColumnType.ARRAY_STRING:
            value = list(value)
        row[column.name] = value
    return row


__all__ = [
    "COLUMN_NAMES",
    "ColumnDefinition",
    "ColumnType",
    "FINGERPRINT_COLUMNS",
    "ORDER_BY_COLUMNS",
    "SCHEMA_DESCRIPTOR",
    "fingerprint_row",
]
