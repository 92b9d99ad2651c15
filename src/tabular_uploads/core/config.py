"""Configuration management.

Uses pydantic-settings for type-safe configuration from environment variables.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tabular_uploads.typing.parsing import NumberSeparators, ParsingSettings


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden via environment variables.
    Prefix: TABULAR_UPLOADS_
    """

    model_config = SettingsConfigDict(
        env_prefix="TABULAR_UPLOADS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Locale
    number_separators: str = Field(
        default=".,",
        description="Decimal separator followed by grouping separator: '.,', ',.', ', ' or '.’'",
    )

    # DuckDB (uploaded table storage)
    duckdb_path: str = Field(
        default=":memory:",
        description="Path to DuckDB database file, or :memory: for in-memory",
    )

    # Metadata registry (SQLAlchemy)
    database_url: str = Field(
        default="sqlite:///./uploads.db",
        description="SQLAlchemy database URL for the uploaded-table registry",
    )

    # Loading
    insert_batch_size: int = Field(
        default=1000,
        description="Number of parsed rows sent to the storage driver per batch",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Log level used by the CLI unless raised with -v",
    )
    log_format: str = Field(default="console")  # 'json' or 'console'

    @field_validator("number_separators")
    @classmethod
    def _known_separators(cls, value: str) -> str:
        NumberSeparators.from_setting(value)
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_parsing_settings(settings: Settings | None = None) -> ParsingSettings:
    """Build the locale settings used by classifiers and parsers.

    Read once per upload operation; the returned value is immutable.
    """
    settings = settings or get_settings()
    return ParsingSettings(
        number_separators=NumberSeparators.from_setting(settings.number_separators)
    )
