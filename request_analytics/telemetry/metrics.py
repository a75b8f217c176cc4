"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

FINGERPRINTS_WRITTEN = Counter(
    "request_fingerprints_written_total",
    "Request fingerprints committed to ClickHouse",
)

FINGERPRINT_FAILURES = Counter(
    "request_fingerprint_failures_total",
    "Request fingerprint writes that failed, by store stage",
    ("stage",),
)

FINGERPRINT_WRITE_LATENCY = Histogram(
    "request_fingerprint_write_duration_seconds",
    "Duration of the transactional fingerprint insert in seconds",
    buckets=(
        0.001,
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
    ),
)


def observe_write(duration_seconds: float, failed_stage: str | None = None) -> None:
    """Record the outcome of one fingerprint write."""

    FINGERPRINT_WRITE_LATENCY.observe(duration_seconds if duration_seconds >= 0 else 0)

    if failed_stage is None:
        FINGERPRINTS_WRITTEN.inc()
    else:
        FINGERPRINT_FAILURES.labels(stage=failed_stage).inc()
