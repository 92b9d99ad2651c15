"""Schema detection, row parsing and append migration planning."""

from tabular_uploads.schema.detection import (
    AUTO_PK_COLUMN_NAME,
    detect_schema,
    normalize_column_name,
    uniquify_names,
    without_auto_pk_columns,
)
from tabular_uploads.schema.migration import (
    ALLOWED_TYPE_UPGRADES,
    check_schema,
    plan_migration,
    upload_type_from_database_type,
)
from tabular_uploads.schema.rows import parse_rows

__all__ = [
    "ALLOWED_TYPE_UPGRADES",
    "AUTO_PK_COLUMN_NAME",
    "check_schema",
    "detect_schema",
    "normalize_column_name",
    "parse_rows",
    "plan_migration",
    "uniquify_names",
    "upload_type_from_database_type",
    "without_auto_pk_columns",
]
