"""Create command - load a CSV file into a new table."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.table import Table as RichTable

from tabular_uploads.cli.common import (
    CsvFileArg,
    DuckDBOption,
    JsonFlag,
    SeparatorsOption,
    VerboseOption,
    console,
    fail,
    load_settings,
    open_storage,
    setup_logging,
)
from tabular_uploads.core.errors import UploadError
from tabular_uploads.core.models import CreatedUpload
from tabular_uploads.staging.pipeline import create_csv_upload


def create(
    csv_file: CsvFileArg,
    db: DuckDBOption = None,
    prefix: Annotated[
        str,
        typer.Option(
            "--prefix",
            "-p",
            help="Prefix for the generated table name",
        ),
    ] = "",
    number_separators: SeparatorsOption = None,
    json_output: JsonFlag = False,
    verbose: VerboseOption = 0,
) -> None:
    """Create a new table from a CSV file.

    The table is named after the file plus a timestamp, and is registered
    as an upload so that more files can be appended to it.

    Examples:

        tabular-uploads create orders.csv --db uploads.duckdb

        tabular-uploads create orders.csv --db uploads.duckdb --prefix sales_
    """
    settings = load_settings(number_separators)
    setup_logging(verbosity=verbose, settings=settings)

    with open_storage(settings, db) as (driver, session):
        try:
            created = create_csv_upload(
                csv_file, driver, session=session, table_prefix=prefix, settings=settings
            )
        except UploadError as e:
            fail(e)

    if json_output:
        console.print_json(created.model_dump_json())
    else:
        _print_created(created)


def _print_created(created: CreatedUpload) -> None:
    stats = created.stats
    console.print(
        f"[green]Created[/green] [bold]{created.table_name}[/bold] ({created.display_name})"
    )
    console.print(
        f"  {stats.num_rows:,} rows, {stats.num_columns} columns "
        f"in {stats.upload_seconds:.2f}s ({stats.size_mb:.2f} MB)"
    )

    table = RichTable(show_header=True)
    table.add_column("Column", style="cyan")
    table.add_column("Type", style="green")
    for name, upload_type in created.detected_schema.all_columns.items():
        table.add_row(name, upload_type.value)
    console.print(table)
