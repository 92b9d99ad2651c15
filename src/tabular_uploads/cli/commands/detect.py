"""Detect command - show the schema a CSV file would be uploaded with."""

from __future__ import annotations

from rich.table import Table as RichTable

from tabular_uploads.cli.common import (
    CsvFileArg,
    JsonFlag,
    SeparatorsOption,
    VerboseOption,
    console,
    fail,
    load_settings,
    setup_logging,
)
from tabular_uploads.core.config import get_parsing_settings
from tabular_uploads.core.errors import UploadError
from tabular_uploads.core.models import DetectedSchema
from tabular_uploads.schema.detection import detect_schema, without_auto_pk_columns
from tabular_uploads.staging.reader import open_csv


def detect(
    csv_file: CsvFileArg,
    number_separators: SeparatorsOption = None,
    json_output: JsonFlag = False,
    verbose: VerboseOption = 0,
) -> None:
    """Detect the column types of a CSV file without loading it.

    Examples:

        tabular-uploads detect orders.csv

        tabular-uploads detect orders.csv --number-separators ",."

        tabular-uploads detect orders.csv --json
    """
    settings = load_settings(number_separators)
    setup_logging(verbosity=verbose, settings=settings)
    parsing_settings = get_parsing_settings(settings)

    try:
        with open_csv(csv_file) as (header, rows):
            header, rows = without_auto_pk_columns(header, rows)
            detected = detect_schema(parsing_settings, header, rows)
    except UploadError as e:
        fail(e)

    if json_output:
        _detect_json(detected)
    else:
        _detect_rich(csv_file.name, detected)


def _detect_json(detected: DetectedSchema) -> None:
    """Output the detected schema as JSON."""
    console.print_json(detected.model_dump_json())


def _detect_rich(filename: str, detected: DetectedSchema) -> None:
    """Output the detected schema as a table."""
    table = RichTable(title=f"Detected schema: {filename}")
    table.add_column("Column", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Generated", justify="center")

    for name, upload_type in detected.generated_columns.items():
        table.add_row(name, upload_type.value, "yes")
    for name, upload_type in detected.extant_columns.items():
        table.add_row(name, upload_type.value, "")

    console.print(table)
