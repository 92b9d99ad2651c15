"""Errors raised by schema detection, migration planning and loading.

Every error carries a ``status_code`` so that an API layer can surface it
without inspecting the message. Messages are safe to show to end users.
"""

from __future__ import annotations

from typing import Any


class UploadError(Exception):
    """Base class for all upload errors."""

    status_code: int = 422

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MalformedCsvError(UploadError):
    """The file could not be read as CSV."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"The CSV file could not be read: {reason}")


class DuplicateColumnError(UploadError):
    """The file header contains columns that normalize to the same name."""

    def __init__(self, duplicates: list[str]):
        self.duplicates = duplicates
        super().__init__("The CSV file contains duplicate column names.")


class SchemaMismatchError(UploadError):
    """The file columns do not line up with the columns of the target table."""

    def __init__(self, extra: list[str], missing: list[str]):
        self.extra = extra
        self.missing = missing
        super().__init__(extra_and_missing_message(extra, missing))


class ParseError(UploadError):
    """A value could not be parsed as the type chosen for its column."""

    def __init__(
        self,
        value: str,
        upload_type: Any,
        row: int | None = None,
        column: str | None = None,
        reason: str | None = None,
    ):
        self.value = value
        self.upload_type = upload_type
        self.row = row
        self.column = column
        type_name = getattr(upload_type, "value", upload_type)
        message = f"'{value}' is not a recognizable {type_name}"
        if column is not None:
            message += f" in column '{column}'"
        if row is not None:
            message += f" (row {row})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class InternalConsistencyError(UploadError):
    """The type lattice is inconsistent. Indicates a programming error."""

    status_code = 500


class UploadInsertError(UploadError):
    """Rows could not be written to the target table.

    A failed create is a bad request (400). A failed append is unprocessable
    (422).
    """

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class TableNotFoundError(UploadError):
    """The append target does not exist."""

    status_code = 404

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table not found: {table_name}")


class NotAnUploadError(UploadError):
    """Appends are only allowed to tables created from an upload."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__("The table must be an uploaded table.")


def extra_and_missing_message(extra: list[str], missing: list[str]) -> str:
    """Render missing (and, alongside them, extra) columns as a bullet list.

    New columns are listed too because a common cause of missing columns is a
    misspelled header, and seeing both names together makes that obvious.
    """
    sections = []
    for header, columns in (
        ("The CSV file is missing columns that are in the table:", missing),
        ("There are new columns in the CSV file that are not in the table:", extra),
    ):
        if columns:
            sections.append("\n".join([header, *(f"- {column}" for column in columns)]))
    return "\n\n".join(sections)
