"""Telemetry helpers and metrics."""

from .metrics import (
    FINGERPRINT_FAILURES,
    FINGERPRINT_WRITE_LATENCY,
    FINGERPRINTS_WRITTEN,
    observe_write,
)

__all__ = [
    "FINGERPRINT_FAILURES",
    "FINGERPRINT_WRITE_LATENCY",
    "FINGERPRINTS_WRITTEN",
    "observe_write",
]
