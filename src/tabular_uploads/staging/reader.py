"""Reading CSV files as a header plus a lazy sequence of rows.

Files are read through DuckDB's ``read_csv`` with every column as VARCHAR,
so values reach the classifiers exactly as written. The header is read as
an ordinary row to keep blank and duplicate names intact.
"""

from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager
from pathlib import Path

import duckdb

from tabular_uploads.core.errors import MalformedCsvError

FETCH_BATCH_SIZE = 1000


def _read_csv_sql(path: Path) -> str:
    quoted_path = str(path).replace("'", "''")
    return f"""
        SELECT * FROM read_csv(
            '{quoted_path}',
            header = false,
            all_varchar = true,
            null_padding = true,
            delim = ',',
            quote = '"',
            escape = '"',
            skip = 0
        )
    """


def _fetch_rows(
    result: duckdb.DuckDBPyConnection, batch_size: int
) -> Iterator[list[str | None]]:
    while True:
        try:
            batch = result.fetchmany(batch_size)
        except duckdb.Error as e:
            raise MalformedCsvError(str(e)) from e
        if not batch:
            return
        for row in batch:
            yield list(row)


@contextmanager
def open_csv(
    path: Path | str, batch_size: int = FETCH_BATCH_SIZE
) -> Generator[tuple[list[str], Iterator[list[str | None]]]]:
    """Open a CSV file and yield its header and an iterator over the remaining rows.

    The file is decoded as UTF-8 with an optional byte-order mark. Rows are
    fetched in batches on demand and the connection is closed on exit, even
    when iteration is abandoned early. Empty values are None and short rows
    are padded with None. An empty file has an empty header and no rows.

    Raises:
        MalformedCsvError: DuckDB could not read the file as CSV
    """
    path = Path(path)
    if path.stat().st_size == 0:
        yield [], iter(())
        return

    conn = duckdb.connect()
    try:
        try:
            result = conn.execute(_read_csv_sql(path))
            first = result.fetchone()
        except duckdb.Error as e:
            raise MalformedCsvError(str(e)) from e
        header = [name or "" for name in first] if first else []
        yield header, _fetch_rows(result, batch_size)
    finally:
        conn.close()


def file_size_mb(path: Path | str) -> float:
    return Path(path).stat().st_size / 1048576.0
