"""Startup sequencing and the component handle shared by the middleware."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.engine import Engine

from request_analytics.config.settings import build_clickhouse_url
from request_analytics.database import (
    create_clickhouse_engine,
    ping_engine,
    validate_table_name,
)
from request_analytics.errors import DRIVER_ERRORS, ConnectError, describe_driver_error
from request_analytics.models.fingerprint import Fingerprint
from request_analytics.services.analytics_writer import AnalyticsWriter
from request_analytics.services.schema_verifier import SchemaStatus, verify_table
from request_analytics.services.table_provisioner import ensure_table

if TYPE_CHECKING:
    from request_analytics.config.settings import Settings

logger = logging.getLogger(__name__)


class RequestAnalytics:
    """Owns the ClickHouse engine and writes fingerprints to one table.

    Build instances with ``connect``, ``from_settings`` or ``from_engine``;
    they only return once the store answered a ping and the table is known
    to be usable. The engine is released by ``close``.
    """

    def __init__(self, engine: Engine, table_name: str) -> None:
        self._engine = engine
        self._table_name = table_name
        self._writer = AnalyticsWriter(engine, table_name)
        self._closed = False

    @classmethod
    def connect(
        cls,
        username: str,
        password: str,
        host: str,
        port: int | str,
        database: str,
        table_name: str,
        *,
        verify_schema: bool,
        create_if_missing: bool,
        driver: str = "native",
        echo: bool = False,
    ) -> "RequestAnalytics":
        """Open a ClickHouse engine from credentials and prepare ``table_name``."""

        table_name = validate_table_name(table_name)
        url = build_clickhouse_url(
            username=username,
            password=password,
            host=host,
            port=port,
            database=database,
            driver=driver,
        )
        try:
            engine = create_clickhouse_engine(url, echo=echo)
        except DRIVER_ERRORS as exc:
            raise ConnectError(describe_driver_error(exc)) from exc

        return cls.from_engine(
            engine,
            table_name,
            verify_schema=verify_schema,
            create_if_missing=create_if_missing,
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RequestAnalytics":
        """Build the component from application settings."""

        clickhouse = settings.clickhouse
        analytics = settings.analytics
        return cls.connect(
            clickhouse.username,
            clickhouse.password.get_secret_value(),
            clickhouse.host,
            clickhouse.port,
            clickhouse.database,
            analytics.table_name,
            verify_schema=analytics.verify_schema,
            create_if_missing=analytics.create_table_if_missing,
            driver=clickhouse.driver,
            echo=settings.debug,
        )

    @classmethod
    def from_engine(
        cls,
        engine: Engine,
        table_name: str,
        *,
        verify_schema: bool,
        create_if_missing: bool,
    ) -> "RequestAnalytics":
        """Ping ``engine`` and reconcile the table before returning a handle.

        A table confirmed to match the expected layout is used as is, even
        when ``create_if_missing`` is set. The engine is disposed when any
        step fails.
        """

        try:
            table_name = validate_table_name(table_name)
            ping_engine(engine)

            if verify_schema:
                status = verify_table(engine, table_name)
                if status is SchemaStatus.MATCHING:
                    logger.info("Table '%s' exists with the expected layout.", table_name)
                    return cls(engine, table_name)
                logger.info("Table '%s' does not exist.", table_name)

            if create_if_missing:
                ensure_table(engine, table_name)
        except Exception:
            engine.dispose()
            raise

        return cls(engine, table_name)

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, fingerprint: Fingerprint) -> None:
        """Insert ``fingerprint`` as one row; raises StoreError on failure."""

        self._writer.write(fingerprint)

    def close(self) -> None:
        """Release pooled ClickHouse connections."""

        if self._closed:
            return
        self._engine.dispose()
        self._closed = True
        logger.info("Closed ClickHouse engine for table '%s'.", self._table_name)

    def __enter__(self) -> "RequestAnalytics":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["RequestAnalytics"]
