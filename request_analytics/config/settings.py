from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClickHouseConfig(BaseSettings):
    """ClickHouse connection configuration"""

    host: str = "localhost"
    port: int = 9000
    username: str = "default"
    password: SecretStr = Field(default=SecretStr(""))
    database: str = "default"
    driver: str = Field(
        default="native",
        description="clickhouse-sqlalchemy driver: 'native' (TCP) or 'http'.",
    )

    @property
    def url(self) -> str:
        """Get SQLAlchemy database URL"""
        return build_clickhouse_url(
            username=self.username,
            password=self.password.get_secret_value(),
            host=self.host,
            port=self.port,
            database=self.database,
            driver=self.driver,
        )

    model_config = SettingsConfigDict(
        env_prefix="CLICKHOUSE_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class AnalyticsConfig(BaseSettings):
    """Request fingerprint table configuration."""

    table_name: str = "request_fingerprints"
    verify_schema: bool = Field(
        default=True,
        description="Check an existing table against the expected columns on startup.",
    )
    create_table_if_missing: bool = True

    model_config = SettingsConfigDict(
        env_prefix="ANALYTICS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Request Analytics"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"

    # ClickHouse
    clickhouse: ClickHouseConfig = Field(default_factory=ClickHouseConfig)

    # Fingerprint table
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


def build_clickhouse_url(
    *,
    username: str,
    password: str,
    host: str,
    port: int | str,
    database: str,
    driver: str = "native",
) -> str:
    """Return a clickhouse-sqlalchemy URL with quoted credentials."""

    return (
        f"clickhouse+{driver}://"
        f"{quote_plus(username)}:{quote_plus(password)}"
        f"@{host}:{port}/{database}"
    )


# Global settings instance
settings = Settings()
