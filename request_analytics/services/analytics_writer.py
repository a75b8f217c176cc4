"""Transactional single-row insert of request fingerprints."""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.sql.elements import TextClause

from request_analytics.errors import DRIVER_ERRORS, StoreError, WriteStage, describe_driver_error
from request_analytics.models.fingerprint import Fingerprint
from request_analytics.models.schema import COLUMN_NAMES, fingerprint_row

logger = logging.getLogger(__name__)


def build_insert_statement(table_name: str) -> TextClause:
    """Return a parameterized INSERT covering every fingerprint column."""

    columns = ", ".join(COLUMN_NAMES)
    placeholders = ", ".join(f":{name}" for name in COLUMN_NAMES)
    return text(f"INSERT INTO {table_name} ({columns}) VALUES ({placeholders})")


class AnalyticsWriter:
    """Insert one fingerprint per call inside its own transaction."""

    def __init__(self, engine: Engine, table_name: str) -> None:
        self._engine = engine
        self._table_name = table_name
        self._insert_statement = build_insert_statement(table_name)

    @property
    def table_name(self) -> str:
        return self._table_name

    def write(self, fingerprint: Fingerprint) -> None:
        """Persist ``fingerprint`` as exactly one row.

        Raises ``StoreError`` whose ``stage`` is ``BEGIN``, ``INSERT`` or
        ``COMMIT``. A failed insert is rolled back before raising.
        """

        params = fingerprint_row(fingerprint)

        try:
            conn = self._engine.connect()
        except DRIVER_ERRORS as exc:
            raise self._begin_error(exc) from exc

        with conn:
            try:
                transaction = conn.begin()
            except DRIVER_ERRORS as exc:
                raise self._begin_error(exc) from exc

            try:
                conn.execute(self._insert_statement, params)
            except DRIVER_ERRORS as exc:
                detail = describe_driver_error(exc)
                logger.error("Error inserting fingerprint into '%s': %s", self._table_name, detail)
                self._rollback(transaction)
                raise StoreError(WriteStage.INSERT, detail) from exc

            try:
                transaction.commit()
            except DRIVER_ERRORS as exc:
                detail = describe_driver_error(exc)
                logger.error("Error while committing transaction: %s", detail)
                raise StoreError(WriteStage.COMMIT, detail) from exc

    @staticmethod
    def _begin_error(exc: BaseException) -> StoreError:
        detail = describe_driver_error(exc)
        logger.error("Error while starting transaction: %s", detail)
        return StoreError(WriteStage.BEGIN, detail)

    @staticmethod
    def _rollback(transaction) -> None:
        try:
            transaction.rollback()
        except DRIVER_ERRORS:
            logger.exception("Rollback after failed insert also failed")


__all__ = ["AnalyticsWriter", "build_insert_statement"]
