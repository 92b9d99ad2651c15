"""Loading CSV files into uploaded tables."""

from tabular_uploads.staging.base import UploadDriver
from tabular_uploads.staging.duckdb_driver import DuckDBUploadDriver
from tabular_uploads.staging.naming import MonotonicClock, unique_table_name
from tabular_uploads.staging.pipeline import append_csv_upload, create_csv_upload
from tabular_uploads.staging.reader import open_csv

__all__ = [
    "DuckDBUploadDriver",
    "MonotonicClock",
    "UploadDriver",
    "append_csv_upload",
    "create_csv_upload",
    "open_csv",
    "unique_table_name",
]
