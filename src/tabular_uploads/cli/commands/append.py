"""Append command - add the rows of a CSV file to an uploaded table."""

from __future__ import annotations

from typing import Annotated

import typer

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
from tabular_uploads.staging.pipeline import append_csv_upload


def append(
    csv_file: CsvFileArg,
    table_name: Annotated[
        str,
        typer.Argument(help="Name of the uploaded table to append to"),
    ],
    db: DuckDBOption = None,
    number_separators: SeparatorsOption = None,
    json_output: JsonFlag = False,
    verbose: VerboseOption = 0,
) -> None:
    """Append a CSV file to a table created by an earlier upload.

    Columns may appear in any order and new columns are added. Integer
    columns are widened to floats when needed; any other type change fails.

    Examples:

        tabular-uploads append more_orders.csv orders_20240101120000 --db uploads.duckdb
    """
    settings = load_settings(number_separators)
    setup_logging(verbosity=verbose, settings=settings)

    with open_storage(settings, db) as (driver, session):
        try:
            stats = append_csv_upload(
                csv_file, table_name, driver, session=session, settings=settings
            )
        except UploadError as e:
            fail(e)

    if json_output:
        console.print_json(stats.model_dump_json())
    else:
        console.print(
            f"[green]Appended[/green] {stats.num_rows:,} rows to [bold]{stats.table_name}[/bold]"
        )
