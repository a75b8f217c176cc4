"""Schema reconciliation, request extraction and fingerprint persistence."""

from .analytics_writer import AnalyticsWriter, build_insert_statement
from .extractor import extract_fingerprint
from .schema_verifier import (
    SchemaReport,
    SchemaStatus,
    find_mismatch,
    inspect_table,
    verify_table,
)
from .table_provisioner import build_create_table_statement, ensure_table

__all__ = [
    "AnalyticsWriter",
    "SchemaReport",
    "SchemaStatus",
    "build_create_table_statement",
    "build_insert_statement",
    "ensure_table",
    "extract_fingerprint",
    "find_mismatch",
    "inspect_table",
    "verify_table",
]
