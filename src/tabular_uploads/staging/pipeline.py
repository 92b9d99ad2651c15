"""Create and append uploads from CSV files.

Both operations read the file twice: once to detect types, once to parse
rows with the chosen types. Parsed rows are held in memory so that a value
that cannot be parsed fails the operation before anything is written.
"""

from __future__ import annotations

import time
from pathlib import Path

from sqlalchemy.orm import Session

from tabular_uploads.core.config import Settings, get_parsing_settings, get_settings
from tabular_uploads.core.errors import (
    NotAnUploadError,
    TableNotFoundError,
    UploadInsertError,
)
from tabular_uploads.core.logging import get_logger, log_context
from tabular_uploads.core.models import CreatedUpload, UploadStats
from tabular_uploads.schema.detection import (
    AUTO_PK_COLUMN_NAME,
    detect_schema,
    normalize_column_name,
    without_auto_pk_columns,
)
from tabular_uploads.schema.migration import plan_migration, upload_type_from_database_type
from tabular_uploads.schema.rows import parse_rows
from tabular_uploads.staging.base import UploadDriver
from tabular_uploads.staging.naming import display_name, filename_prefix, unique_table_name
from tabular_uploads.staging.reader import file_size_mb, open_csv
from tabular_uploads.storage.uploads import get_upload_by_name, record_append, register_upload

logger = get_logger(__name__)


def create_csv_upload(
    path: Path | str,
    driver: UploadDriver,
    session: Session | None = None,
    table_prefix: str = "",
    settings: Settings | None = None,
) -> CreatedUpload:
    """Create a new table from a CSV file.

    The table is named after the file with a timestamp suffix, and gets a
    generated ``_mb_row_id`` primary key ahead of the file's columns.

    Args:
        path: CSV file to load
        driver: Storage the table is created in
        session: Registry session; the table is registered as an upload when given
        table_prefix: Prepended to the file name before it is made unique
        settings: Application settings (defaults to the environment)

    Returns:
        CreatedUpload with the table name, detected schema and stats

    Raises:
        UploadInsertError: Rows could not be written; the table has been dropped
    """
    settings = settings or get_settings()
    parsing_settings = get_parsing_settings(settings)
    path = Path(path)
    start_time = time.time()

    prefix = filename_prefix(path.name)
    table_name = unique_table_name(
        f"{table_prefix}{prefix}", driver.table_name_length_limit
    ).lower()

    with log_context(operation="create", table=table_name, filename=path.name):
        try:
            with open_csv(path) as (header, rows):
                header, rows = without_auto_pk_columns(header, rows)
                detected = detect_schema(parsing_settings, header, rows)
            column_names = list(detected.extant_columns)
            column_types = list(detected.extant_columns.values())
            logger.info(
                "upload_schema_detected",
                columns={name: t.value for name, t in detected.extant_columns.items()},
            )

            with open_csv(path) as (header, rows):
                _, rows = without_auto_pk_columns(header, rows)
                parsed_rows = list(
                    parse_rows(parsing_settings, column_types, rows, column_names=column_names)
                )

            driver.create_table(table_name, detected.all_columns, primary_key=AUTO_PK_COLUMN_NAME)
            try:
                num_rows = driver.insert_rows(table_name, column_names, parsed_rows)
            except Exception as e:
                driver.drop_table(table_name)
                logger.warning("upload_table_dropped", error=str(e))
                raise UploadInsertError(str(e)) from e

            stats = UploadStats(
                table_name=table_name,
                num_rows=num_rows,
                num_columns=len(detected.extant_columns),
                generated_columns=len(detected.generated_columns),
                size_mb=file_size_mb(path),
                upload_seconds=time.time() - start_time,
            )

            name = display_name(prefix)
            if session is not None:
                register_upload(
                    session,
                    table_name=table_name,
                    display_name=name,
                    source_filename=path.name,
                    row_count=num_rows,
                )
                session.commit()

            logger.info("upload_created", **stats.model_dump(exclude={"table_name"}))
            return CreatedUpload(
                table_name=table_name,
                display_name=name,
                detected_schema=detected,
                stats=stats,
            )

        except Exception as e:
            logger.error("upload_failed", error=str(e), error_type=type(e).__name__)
            raise


def append_csv_upload(
    path: Path | str,
    table_name: str,
    driver: UploadDriver,
    session: Session | None = None,
    settings: Settings | None = None,
) -> UploadStats:
    """Append the rows of a CSV file to an existing uploaded table.

    The file may list the table's columns in any order and may add new
    columns. Columns are widened or added only when every column of the
    file can be supported; otherwise the table is left untouched and the
    first value that does not fit its column fails the append.

    Raises:
        TableNotFoundError: The table does not exist
        NotAnUploadError: The table was not created from an upload
        DuplicateColumnError: The file has duplicate column names
        SchemaMismatchError: Columns of the table are missing from the file
        ParseError: A value does not fit the type of its column
        UploadInsertError: Rows could not be written
    """
    settings = settings or get_settings()
    parsing_settings = get_parsing_settings(settings)
    path = Path(path)
    start_time = time.time()

    with log_context(operation="append", table=table_name, filename=path.name):
        try:
            if not driver.table_exists(table_name):
                raise TableNotFoundError(table_name)
            if session is not None and get_upload_by_name(session, table_name) is None:
                raise NotAnUploadError(table_name)

            existing_types = {
                normalize_column_name(name): upload_type_from_database_type(native_type)
                for name, native_type in driver.column_types(table_name).items()
            }

            with open_csv(path) as (header, rows):
                header, rows = without_auto_pk_columns(header, rows)
                plan = plan_migration(
                    parsing_settings,
                    existing_types,
                    header,
                    rows,
                    create_auto_pk_with_append=driver.create_auto_pk_with_append,
                )
            logger.info(
                "upload_migration_planned",
                modify_schema=plan.modify_schema,
                added={name: t.value for name, t in plan.added.items()},
                updated={name: t.value for name, t in plan.updated.items()},
                declined=plan.declined,
                create_auto_pk=plan.create_auto_pk,
            )

            if plan.modify_schema:
                driver.add_columns(table_name, plan.added)
                driver.alter_columns(table_name, plan.updated)

            # Fails on the first value that needed a declined type change
            with open_csv(path) as (header, rows):
                _, rows = without_auto_pk_columns(header, rows)
                parsed_rows = list(
                    parse_rows(
                        parsing_settings, plan.load_types, rows, column_names=plan.column_names
                    )
                )

            try:
                num_rows = driver.insert_rows(table_name, plan.column_names, parsed_rows)
            except Exception as e:
                raise UploadInsertError(str(e), status_code=422) from e

            if plan.create_auto_pk:
                driver.add_auto_pk_column(table_name, AUTO_PK_COLUMN_NAME)

            stats = UploadStats(
                table_name=table_name,
                num_rows=num_rows,
                num_columns=len(plan.new_types),
                generated_columns=1 if plan.create_auto_pk else 0,
                size_mb=file_size_mb(path),
                upload_seconds=time.time() - start_time,
            )

            if session is not None:
                record_append(session, table_name, num_rows)
                session.commit()

            logger.info("upload_appended", **stats.model_dump(exclude={"table_name"}))
            return stats

        except Exception as e:
            logger.error("upload_failed", error=str(e), error_type=type(e).__name__)
            raise
