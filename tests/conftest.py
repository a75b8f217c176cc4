"""Shared fixtures: an in-memory stand-in for a ClickHouse SQLAlchemy engine."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
import sys
from typing import Any, Iterator, Mapping, Optional

import pytest
from clickhouse_driver.errors import Error as ClickHouseDriverError
from clickhouse_driver.errors import ServerException
from clickhouse_sqlalchemy.exceptions import DatabaseException
from sqlalchemy.exc import OperationalError

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from request_analytics.models.schema import SCHEMA_DESCRIPTOR  # noqa: E402


def _driver_exception(message: str, code: Optional[int]) -> ClickHouseDriverError:
    if code is not None:
        return ServerException(message, code)
    return ClickHouseDriverError(message)


def clickhouse_failure(message: str, code: Optional[int] = None) -> DatabaseException:
    """What clickhouse-sqlalchemy raises: the driver error wrapped, not a SQLAlchemy error."""

    return DatabaseException(_driver_exception(message, code))


def dbapi_failure(message: str, code: Optional[int] = None) -> OperationalError:
    """The SQLAlchemy wrapper around a failing DB-API call."""

    return OperationalError("<statement>", {}, _driver_exception(message, code))


class FakeResult:
    def __init__(self, rows: list[tuple[Any, ...]]) -> None:
        self._rows = rows

    def scalar_one(self) -> Any:
        return self._rows[0][0]

    def all(self) -> list[tuple[Any, ...]]:
        return list(self._rows)


class FakeTransaction:
    def __init__(self, connection: "FakeConnection") -> None:
        self._connection = connection
        self._engine = connection.engine

    def commit(self) -> None:
        self._engine.events.append("commit")
        if self._engine.fail_commit is not None:
            raise self._engine.fail_commit
        self._engine.rows.extend(self._connection.pending)
        self._connection.pending = []

    def rollback(self) -> None:
        self._engine.events.append("rollback")
        self._connection.pending = []


class FakeConnection:
    def __init__(self, engine: "FakeEngine") -> None:
        self.engine = engine
        self.pending: list[dict[str, Any]] = []
        self.closed = False

    def begin(self) -> FakeTransaction:
        self.engine.events.append("begin")
        if self.engine.fail_begin is not None:
            raise self.engine.fail_begin
        return FakeTransaction(self)

    def execute(self, statement: Any, params: Optional[Mapping[str, Any]] = None) -> FakeResult:
        sql = str(statement)
        self.engine.executed.append((sql, dict(params or {})))

        if sql == "SELECT 1":
            if self.engine.fail_ping is not None:
                raise self.engine.fail_ping
            return FakeResult([(1,)])

        if "system.tables" in sql or "system.columns" in sql:
            if self.engine.fail_metadata is not None:
                raise self.engine.fail_metadata
            table = self.engine.tables.get(params["table_name"])
            if "system.tables" in sql:
                return FakeResult([(1 if table is not None else 0,)])
            return FakeResult(list((table or {}).items()))

        if sql.startswith("CREATE TABLE"):
            self.engine.events.append("create")
            if self.engine.fail_ddl is not None:
                raise self.engine.fail_ddl
            self.engine.ddl.append(sql)
            return FakeResult([])

        if sql.startswith("INSERT INTO"):
            self.engine.events.append("insert")
            if self.engine.fail_insert is not None:
                raise self.engine.fail_insert
            self.pending.append(dict(params or {}))
            return FakeResult([])

        raise AssertionError(f"Unexpected statement: {sql}")

    def close(self) -> None:
        self.closed = True
        self.engine.events.append("close")

    def __enter__(self) -> "FakeConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class FakeEngine:
    """Records every statement; ``tables`` maps table name -> {column: type}."""

    def __init__(
        self,
        *,
        tables: Optional[dict[str, dict[str, str]]] = None,
        fail_ping: Optional[Exception] = None,
        fail_metadata: Optional[Exception] = None,
        fail_ddl: Optional[Exception] = None,
        fail_begin: Optional[Exception] = None,
        fail_insert: Optional[Exception] = None,
        fail_commit: Optional[Exception] = None,
    ) -> None:
        self.tables = tables if tables is not None else {}
        self.fail_ping = fail_ping
        self.fail_metadata = fail_metadata
        self.fail_ddl = fail_ddl
        self.fail_begin = fail_begin
        self.fail_insert = fail_insert
        self.fail_commit = fail_commit
        self.executed: list[tuple[str, dict[str, Any]]] = []
        self.events: list[str] = []
        self.ddl: list[str] = []
        self.rows: list[dict[str, Any]] = []
        self.connections: list[FakeConnection] = []
        self.disposed = 0

    def connect(self) -> FakeConnection:
        connection = FakeConnection(self)
        self.connections.append(connection)
        return connection

    @contextmanager
    def begin(self) -> Iterator[FakeConnection]:
        with self.connect() as connection:
            transaction = connection.begin()
            yield connection
            transaction.commit()

    def dispose(self) -> None:
        self.disposed += 1

    def statements_containing(self, fragment: str) -> list[str]:
        return [sql for sql, _ in self.executed if fragment in sql]


@pytest.fixture
def matching_schema() -> dict[str, str]:
    """Column metadata exactly as ClickHouse reports a freshly created table."""

    return dict(SCHEMA_DESCRIPTOR)


@pytest.fixture
def make_engine():
    """Factory for configurable fake engines."""

    def _make(**kwargs: Any) -> FakeEngine:
        return FakeEngine(**kwargs)

    return _make


@pytest.fixture(params=[clickhouse_failure, dbapi_failure], ids=["clickhouse-sqlalchemy", "dbapi"])
def driver_error(request):
    """Factory for driver failures, in each shape the engine can raise them."""

    return request.param
