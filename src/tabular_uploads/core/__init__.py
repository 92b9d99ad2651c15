"""Core module - errors, shared models, configuration and logging."""

from tabular_uploads.core.errors import (
    DuplicateColumnError,
    InternalConsistencyError,
    MalformedCsvError,
    NotAnUploadError,
    ParseError,
    SchemaMismatchError,
    TableNotFoundError,
    UploadError,
    UploadInsertError,
)

__all__ = [
    "DuplicateColumnError",
    "InternalConsistencyError",
    "MalformedCsvError",
    "NotAnUploadError",
    "ParseError",
    "SchemaMismatchError",
    "TableNotFoundError",
    "UploadError",
    "UploadInsertError",
]
