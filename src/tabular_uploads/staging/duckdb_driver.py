"""DuckDB storage for uploaded tables."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from itertools import islice
from typing import Any

import duckdb

from tabular_uploads.core.logging import get_logger
from tabular_uploads.schema.detection import AUTO_PK_COLUMN_NAME
from tabular_uploads.staging.base import UploadDriver
from tabular_uploads.typing.lattice import UploadType

logger = get_logger(__name__)

DUCKDB_TYPES: dict[UploadType, str] = {
    UploadType.VARCHAR_255: "VARCHAR(255)",
    UploadType.TEXT: "TEXT",
    UploadType.INT: "BIGINT",
    UploadType.AUTO_INCREMENTING_INT_PK: "BIGINT",
    UploadType.FLOAT: "DOUBLE",
    UploadType.BOOLEAN: "BOOLEAN",
    UploadType.DATE: "DATE",
    UploadType.DATETIME: "TIMESTAMP",
    UploadType.OFFSET_DATETIME: "TIMESTAMPTZ",
}


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class DuckDBUploadDriver(UploadDriver):
    """Writes uploaded tables to a DuckDB connection.

    The generated PK is a plain BIGINT numbered by the driver from the
    current maximum, without a constraint or sequence, so that columns of
    the table can still be added and altered.
    """

    def __init__(
        self,
        conn: duckdb.DuckDBPyConnection,
        insert_batch_size: int = 1000,
        create_auto_pk_with_append: bool = False,
        table_name_length_limit: int = 63,
    ):
        self.conn = conn
        self.insert_batch_size = insert_batch_size
        self.create_auto_pk_with_append = create_auto_pk_with_append
        self._table_name_length_limit = table_name_length_limit

    @property
    def table_name_length_limit(self) -> int:
        return self._table_name_length_limit

    def database_type(self, upload_type: UploadType) -> str:
        try:
            return DUCKDB_TYPES[upload_type]
        except KeyError:
            raise ValueError(f"No DuckDB type for abstract upload type {upload_type.value}") from None

    def _column_definitions(self, column_types: Mapping[str, UploadType]) -> str:
        return ", ".join(
            f"{quote_identifier(name)} {self.database_type(upload_type)}"
            for name, upload_type in column_types.items()
        )

    def create_table(
        self,
        table_name: str,
        column_types: Mapping[str, UploadType],
        primary_key: str | None = None,
    ) -> None:
        if primary_key is not None and primary_key not in column_types:
            raise ValueError(f"Primary key {primary_key} is not a column of {table_name}")
        self.conn.execute(
            f"CREATE TABLE {quote_identifier(table_name)} ({self._column_definitions(column_types)})"
        )
        logger.debug("duckdb_table_created", table=table_name, columns=len(column_types))

    def _next_auto_pk(self, table_name: str) -> int:
        result = self.conn.execute(
            f"SELECT coalesce(max({quote_identifier(AUTO_PK_COLUMN_NAME)}), 0) "
            f"FROM {quote_identifier(table_name)}"
        ).fetchone()
        return (result[0] if result else 0) + 1

    def insert_rows(
        self,
        table_name: str,
        column_names: Sequence[str],
        rows: Iterable[Sequence[Any]],
    ) -> int:
        column_names = list(column_names)
        with_auto_pk = (
            AUTO_PK_COLUMN_NAME not in column_names
            and AUTO_PK_COLUMN_NAME in self.column_types(table_name)
        )
        target_columns = [AUTO_PK_COLUMN_NAME, *column_names] if with_auto_pk else column_names
        placeholders = ", ".join("?" for _ in target_columns)
        sql = (
            f"INSERT INTO {quote_identifier(table_name)} "
            f"({', '.join(quote_identifier(c) for c in target_columns)}) "
            f"VALUES ({placeholders})"
        )

        next_id = self._next_auto_pk(table_name) if with_auto_pk else 0
        inserted = 0
        iterator = iter(rows)
        while batch := list(islice(iterator, self.insert_batch_size)):
            if with_auto_pk:
                batch = [[next_id + i, *row] for i, row in enumerate(batch)]
                next_id += len(batch)
            self.conn.executemany(sql, batch)
            inserted += len(batch)
        logger.debug("duckdb_rows_inserted", table=table_name, rows=inserted)
        return inserted

    def add_columns(self, table_name: str, column_types: Mapping[str, UploadType]) -> None:
        for name, upload_type in column_types.items():
            self.conn.execute(
                f"ALTER TABLE {quote_identifier(table_name)} "
                f"ADD COLUMN {quote_identifier(name)} {self.database_type(upload_type)}"
            )

    def alter_columns(self, table_name: str, column_types: Mapping[str, UploadType]) -> None:
        for name, upload_type in column_types.items():
            self.conn.execute(
                f"ALTER TABLE {quote_identifier(table_name)} "
                f"ALTER COLUMN {quote_identifier(name)} SET DATA TYPE {self.database_type(upload_type)}"
            )

    def drop_table(self, table_name: str) -> None:
        self.conn.execute(f"DROP TABLE IF EXISTS {quote_identifier(table_name)}")

    def table_exists(self, table_name: str) -> bool:
        result = self.conn.execute(
            "SELECT count(*) FROM information_schema.tables WHERE table_name = ?",
            [table_name],
        ).fetchone()
        return bool(result and result[0])

    def column_types(self, table_name: str) -> dict[str, str]:
        rows = self.conn.execute(
            """
            SELECT column_name, data_type
            FROM information_schema.columns
            WHERE table_name = ?
            ORDER BY ordinal_position
            """,
            [table_name],
        ).fetchall()
        return {name: data_type for name, data_type in rows}

    def add_auto_pk_column(self, table_name: str, column_name: str) -> None:
        table = quote_identifier(table_name)
        column = quote_identifier(column_name)
        self.conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} BIGINT")
        self.conn.execute(f"UPDATE {table} SET {column} = rowid + 1")
