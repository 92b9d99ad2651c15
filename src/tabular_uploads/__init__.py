"""Tabular uploads.

Turns CSV files into typed database tables: detects column types from the
data, creates a table for a new file, and appends further files to it,
widening columns where that is allowed.

Example:
    import duckdb
    from tabular_uploads import DuckDBUploadDriver, append_csv_upload, create_csv_upload

    driver = DuckDBUploadDriver(duckdb.connect("uploads.duckdb"))
    created = create_csv_upload("orders.csv", driver)
    append_csv_upload("more_orders.csv", created.table_name, driver)
"""

__version__ = "0.1.0"

from tabular_uploads.core.errors import UploadError
from tabular_uploads.staging import DuckDBUploadDriver, append_csv_upload, create_csv_upload
from tabular_uploads.typing import UploadType

__all__ = [
    "DuckDBUploadDriver",
    "UploadError",
    "UploadType",
    "append_csv_upload",
    "create_csv_upload",
    "__version__",
]
