"""Shared CLI utilities and constants."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, NoReturn

import duckdb
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from tabular_uploads.core.config import Settings, get_settings
from tabular_uploads.core.errors import UploadError
from tabular_uploads.core.logging import configure_logging
from tabular_uploads.staging.duckdb_driver import DuckDBUploadDriver
from tabular_uploads.storage import init_database

# Load .env file from current directory
load_dotenv()

# Shared console instance
console = Console()

# Common type aliases for typer options
CsvFileArg = Annotated[
    Path,
    typer.Argument(
        help="CSV file to read",
        exists=True,
        dir_okay=False,
        file_okay=True,
        resolve_path=True,
    ),
]

DuckDBOption = Annotated[
    str | None,
    typer.Option(
        "--db",
        help="DuckDB database file (default: TABULAR_UPLOADS_DUCKDB_PATH)",
    ),
]

JsonFlag = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Output as JSON for scripting",
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-v=INFO, -vv=DEBUG)",
    ),
]


def setup_logging(verbosity: int = 0, settings: Settings | None = None) -> None:
    """Configure structured logging from settings and the verbosity flag.

    Args:
        verbosity: 0=configured level, 1=INFO, 2+=DEBUG
        settings: Application settings providing the default level and format
    """
    settings = settings or get_settings()
    if verbosity >= 2:
        level = "DEBUG"
    elif verbosity >= 1:
        level = "INFO"
    else:
        level = settings.log_level

    configure_logging(
        log_level=level,
        log_format=settings.log_format,
        show_timestamps=verbosity >= 1,
        color=settings.log_format == "console",
    )


@contextmanager
def open_storage(
    settings: Settings, duckdb_path: str | None = None
) -> Generator[tuple[DuckDBUploadDriver, Session]]:
    """Open the DuckDB driver and a registry session, closing both on exit."""
    conn = duckdb.connect(duckdb_path or settings.duckdb_path)
    engine = create_engine(settings.database_url)
    init_database(engine)
    try:
        with Session(engine) as session:
            yield DuckDBUploadDriver(conn, insert_batch_size=settings.insert_batch_size), session
    finally:
        conn.close()
        engine.dispose()


def fail(error: UploadError) -> NoReturn:
    """Print an upload error and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(error.message)}")
    raise typer.Exit(1)


SeparatorsOption = Annotated[
    str | None,
    typer.Option(
        "--number-separators",
        help="Decimal then grouping separator, e.g. '.,' or ',.' (default: TABULAR_UPLOADS_NUMBER_SEPARATORS)",
    ),
]


def load_settings(number_separators: str | None = None) -> Settings:
    """Application settings, with command line overrides applied."""
    if number_separators is None:
        return get_settings()
    try:
        return Settings(number_separators=number_separators)
    except ValueError:
        console.print(f"[red]Error:[/red] Unknown number separators {escape(repr(number_separators))}")
        raise typer.Exit(1) from None
