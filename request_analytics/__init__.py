"""Persist per-request HTTP fingerprints to ClickHouse."""

from .analytics import RequestAnalytics
from .errors import (
    ConnectError,
    RequestAnalyticsError,
    SchemaMismatchError,
    StoreError,
    WriteStage,
)
from .middleware import FingerprintMiddleware
from .models import SCHEMA_DESCRIPTOR, Fingerprint

__all__ = [
    "ConnectError",
    "Fingerprint",
    "FingerprintMiddleware",
    "RequestAnalytics",
    "RequestAnalyticsError",
    "SCHEMA_DESCRIPTOR",
    "SchemaMismatchError",
    "StoreError",
    "WriteStage",
]
