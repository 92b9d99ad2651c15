"""Shared pytest fixtures for all tests."""

from collections.abc import Callable
from pathlib import Path

import duckdb
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from tabular_uploads.core.config import Settings
from tabular_uploads.staging.duckdb_driver import DuckDBUploadDriver
from tabular_uploads.storage import init_database
from tabular_uploads.typing.parsing import NumberSeparators, ParsingSettings

CsvFactory = Callable[..., Path]


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any .env file in the working directory."""
    return Settings(_env_file=None, number_separators=".,", insert_batch_size=2)


@pytest.fixture
def parsing_settings() -> ParsingSettings:
    return ParsingSettings(number_separators=NumberSeparators.DOT_COMMA)


@pytest.fixture
def session():
    """Create an in-memory SQLite session for the upload registry.

    Creates a fresh database for each test function.
    """
    engine = create_engine("sqlite:///:memory:", echo=False)
    init_database(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def duckdb_conn():
    """Create an in-memory DuckDB connection for testing."""
    conn = duckdb.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def driver(duckdb_conn) -> DuckDBUploadDriver:
    """DuckDB driver with a small batch size, so batching is exercised."""
    return DuckDBUploadDriver(duckdb_conn, insert_batch_size=2)


@pytest.fixture
def write_csv(tmp_path: Path) -> CsvFactory:
    """Write CSV text to a file under tmp_path and return its path."""

    def _write(text: str, filename: str = "upload.csv", encoding: str = "utf-8") -> Path:
        path = tmp_path / filename
        path.write_text(text, encoding=encoding)
        return path

    return _write
