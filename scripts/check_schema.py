import sys
import os
sys.path.append(os.getcwd())

from request_analytics.config.settings import settings
from request_analytics.database import create_clickhouse_engine, ping_engine, validate_table_name
from request_analytics.services.schema_verifier import SchemaStatus, inspect_table
from request_analytics.services.table_provisioner import build_create_table_statement


def check_schema(table_name: str) -> int:
    table_name = validate_table_name(table_name)
    print(f"Checking table '{table_name}' on {settings.clickhouse.host}:{settings.clickhouse.port}...\n")

    engine = create_clickhouse_engine(settings.clickhouse.url)
    try:
        ping_engine(engine)
        report = inspect_table(engine, table_name)
    finally:
        engine.dispose()

    if report.status is SchemaStatus.ABSENT:
        print("Table does not exist. It would be created with:\n")
        print(build_create_table_statement(table_name))
        return 0

    if report.status is SchemaStatus.MISMATCH:
        print(f"Incompatible layout: {report.mismatch}")
        return 1

    print("Table exists with the expected layout.")
    return 0


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else settings.analytics.table_name
    sys.exit(check_schema(target))
