"""Tests for the transactional fingerprint insert."""

from __future__ import annotations

import pytest

from request_analytics.errors import StoreError, WriteStage
from request_analytics.models.fingerprint import Fingerprint
from request_analytics.models.schema import COLUMN_NAMES
from request_analytics.services.analytics_writer import AnalyticsWriter, build_insert_statement


@pytest.fixture
def fingerprint() -> Fingerprint:
    return Fingerprint(
        user_agent="Mozilla/5.0",
        ip_address="203.0.113.7",
        accept="text/html",
        host="example.com",
        content_length=0,
        method="GET",
        request_uri="/index.html",
        protocol="HTTP/1.1",
        transfer_encoding=(),
    )


def test_insert_statement_binds_every_column_in_order():
    statement = str(build_insert_statement("hits"))

    columns = ", ".join(COLUMN_NAMES)
    placeholders = ", ".join(f":{name}" for name in COLUMN_NAMES)
    assert statement == f"INSERT INTO hits ({columns}) VALUES ({placeholders})"
    assert statement.count(":") == 33


def test_successful_write_commits_one_row(make_engine, fingerprint):
    engine = make_engine()
    writer = AnalyticsWriter(engine, "hits")

    writer.write(fingerprint)

    assert engine.events == ["begin", "insert", "commit", "close"]
    assert len(engine.rows) == 1
    row = engine.rows[0]
    assert tuple(row) == COLUMN_NAMES
    assert row["user_agent"] == "Mozilla/5.0"
    assert row["transfer_encoding"] == []
    assert row["tls_version"] == 0


def test_each_write_is_its_own_transaction(make_engine, fingerprint):
    engine = make_engine()
    writer = AnalyticsWriter(engine, "hits")

    writer.write(fingerprint)
    writer.write(fingerprint)

    assert engine.events.count("begin") == 2
    assert engine.events.count("commit") == 2
    assert len(engine.rows) == 2
    assert all(connection.closed for connection in engine.connections)


def test_insert_failure_rolls_back_without_commit(make_engine, driver_error, fingerprint):
    engine = make_engine(fail_insert=driver_error("Table default.hits doesn't exist", code=60))
    writer = AnalyticsWriter(engine, "hits")

    with pytest.raises(StoreError) as exc_info:
        writer.write(fingerprint)

    assert exc_info.value.stage is WriteStage.INSERT
    assert str(exc_info.value) == "insert failed: [60]: Table default.hits doesn't exist"
    assert "rollback" in engine.events
    assert "commit" not in engine.events
    assert engine.rows == []
    assert engine.connections[0].closed is True


def test_commit_failure_is_distinguished(make_engine, driver_error, fingerprint):
    engine = make_engine(fail_commit=driver_error("Transaction was aborted"))
    writer = AnalyticsWriter(engine, "hits")

    with pytest.raises(StoreError) as exc_info:
        writer.write(fingerprint)

    assert exc_info.value.stage is WriteStage.COMMIT
    assert str(exc_info.value).startswith("commit failed:")
    assert engine.events[:3] == ["begin", "insert", "commit"]
    assert engine.rows == []


def test_begin_failure_skips_insert(make_engine, driver_error, fingerprint):
    engine = make_engine(fail_begin=driver_error("Too many simultaneous queries"))
    writer = AnalyticsWriter(engine, "hits")

    with pytest.raises(StoreError) as exc_info:
        writer.write(fingerprint)

    assert exc_info.value.stage is WriteStage.BEGIN
    assert "insert" not in engine.events
    assert engine.connections[0].closed is True
