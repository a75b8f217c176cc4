"""Error kinds raised by the request analytics component."""

from __future__ import annotations

from enum import Enum

from clickhouse_sqlalchemy.exceptions import DatabaseException
from sqlalchemy.exc import SQLAlchemyError


class WriteStage(str, Enum):
    """Store operation that produced a ``StoreError``."""

    METADATA = "metadata"
    PROVISION = "provision"
    BEGIN = "begin"
    INSERT = "insert"
    COMMIT = "commit"


# Failures a store call can raise. clickhouse-sqlalchemy reports driver errors
# as DatabaseException, which SQLAlchemy does not wrap; the HTTP driver can also
# surface network errors from requests as OSError.
DRIVER_ERRORS: tuple[type[BaseException], ...] = (SQLAlchemyError, DatabaseException, OSError)


class RequestAnalyticsError(RuntimeError):
    """Base class for request analytics failures."""


class ConnectError(RequestAnalyticsError):
    """Raised when ClickHouse cannot be reached or rejects the handshake."""


class SchemaMismatchError(RequestAnalyticsError):
    """Raised when an existing table does not match the fingerprint layout."""

    def __init__(self, column: str, expected: str, actual: str | None) -> None:
        self.column = column
        self.expected = expected
        self.actual = actual
        got = actual if actual is not None else "missing"
        super().__init__(
            f"schema mismatch for column '{column}': expected '{expected}', got '{got}'"
        )


class StoreError(RequestAnalyticsError):
    """Raised when a ClickHouse statement fails.

    ``stage`` tells apart metadata lookups, table provisioning and the
    begin/insert/commit steps of a fingerprint write.
    """

    def __init__(self, stage: WriteStage, detail: str) -> None:
        self.stage = WriteStage(stage)
        self.detail = detail
        super().__init__(f"{self.stage.value} failed: {detail}")


def describe_driver_error(exc: BaseException) -> str:
    """Return the ClickHouse diagnostic text carried by a driver failure.

    Both SQLAlchemy errors and clickhouse-sqlalchemy's ``DatabaseException``
    keep the driver exception on ``orig``. clickhouse-driver exceptions carry a
    ``message`` and usually a numeric ``code``; they are rendered as
    ``[code]: message``, or just the message when the code is unknown.
    """

    original = getattr(exc, "orig", None) or exc
    code = getattr(original, "code", None)
    message = getattr(original, "message", None)
    if message:
        return f"[{code}]: {message}" if code is not None else str(message)
    return str(original)


__all__ = [
    "ConnectError",
    "DRIVER_ERRORS",
    "RequestAnalyticsError",
    "SchemaMismatchError",
    "StoreError",
    "WriteStage",
    "describe_driver_error",
]
