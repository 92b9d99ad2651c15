"""Schema diffing and migration planning for appends.

The policy is conservative. A column may only change type through an
allowed implicit upgrade, and the table is only modified when every column
of the file can be supported. Otherwise nothing is changed and rows that
do not fit the existing types fail while parsing.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

from tabular_uploads.core.errors import DuplicateColumnError, SchemaMismatchError
from tabular_uploads.core.models import ColumnSchema, MigrationPlan
from tabular_uploads.schema.detection import AUTO_PK_COLUMN_NAME, normalize_column_name
from tabular_uploads.typing.inference import column_types_from_rows
from tabular_uploads.typing.lattice import UploadType
from tabular_uploads.typing.parsing import ParsingSettings

# Which types a column can be implicitly relaxed to, based on appended values
ALLOWED_TYPE_UPGRADES: dict[UploadType, frozenset[UploadType]] = {
    UploadType.INT: frozenset({UploadType.FLOAT}),
}

# Checked in order; the first matching family wins
_DATABASE_TYPE_FAMILIES: list[tuple[re.Pattern[str], UploadType]] = [
    (re.compile(r"(DOUBLE|FLOAT|REAL|DECIMAL|NUMERIC)"), UploadType.FLOAT),
    (re.compile(r"(HUGEINT|BIGINT|INTEGER|SMALLINT|TINYINT|INT|SERIAL)\b"), UploadType.INT),
    (re.compile(r"(BOOLEAN|BOOL)"), UploadType.BOOLEAN),
    (re.compile(r"(TIMESTAMP WITH TIME ZONE|TIMESTAMPTZ)"), UploadType.OFFSET_DATETIME),
    (re.compile(r"(TIMESTAMP|DATETIME)"), UploadType.DATETIME),
    (re.compile(r"DATE"), UploadType.DATE),
    (re.compile(r"(VARCHAR|TEXT|CHAR|STRING)"), UploadType.TEXT),
]


def upload_type_from_database_type(database_type: str | None) -> UploadType | None:
    """The most specific upload type for a persisted column type.

    Bounded strings map to text, since the bound is not reported back by
    every database.
    """
    if not database_type:
        return None
    normalized = database_type.strip().upper()
    for pattern, upload_type in _DATABASE_TYPE_FAMILIES:
        if pattern.match(normalized):
            return upload_type
    return None


def check_schema(existing_column_names: Iterable[str], header: Sequence[str]) -> None:
    """Check that a CSV header can be appended to a table with the given columns.

    Column order does not need to match. Existing names must already be
    normalized and exclude the generated PK.

    Raises:
        DuplicateColumnError: The header has duplicate normalized names.
        SchemaMismatchError: Table columns are missing from the file.
    """
    normalized_header = [normalize_column_name(name) for name in header]
    duplicates = sorted(name for name, count in Counter(normalized_header).items() if count > 1)
    if duplicates:
        raise DuplicateColumnError(duplicates)

    header_names = set(normalized_header)
    table_names = set(existing_column_names)
    extra = sorted(header_names - table_names)
    missing = sorted(table_names - header_names)
    if missing:
        raise SchemaMismatchError(extra=extra, missing=missing)


def matching_or_upgradable(current_type: UploadType | None, relaxed_type: UploadType) -> bool:
    if current_type is None or current_type == relaxed_type:
        return True
    return relaxed_type in ALLOWED_TYPE_UPGRADES.get(current_type, frozenset())


def field_changes(
    field_names: Sequence[str],
    existing_types: Sequence[UploadType | None],
    new_types: Sequence[UploadType],
) -> tuple[ColumnSchema, ColumnSchema]:
    """Which fields need to be added or updated, along with their new types."""
    added: ColumnSchema = {}
    updated: ColumnSchema = {}
    for name, existing, new in zip(field_names, existing_types, new_types, strict=True):
        if existing is None:
            added[name] = new
        elif existing != new:
            updated[name] = new
    return added, updated


def plan_migration(
    settings: ParsingSettings,
    existing_types: Mapping[str, UploadType | None],
    header: Sequence[str],
    rows: Iterable[Sequence[str]],
    create_auto_pk_with_append: bool = False,
) -> MigrationPlan:
    """Decide how an existing table must change to accept a CSV file.

    Args:
        settings: Locale settings for this append
        existing_types: Column types of the table keyed by normalized name,
            including the generated PK if the table has one
        header: The file's header, already stripped of PK-colliding columns
        rows: The file's rows; consumed once
        create_auto_pk_with_append: Whether the storage can retrofit a PK
            column onto tables created before generated PKs existed

    Returns:
        The migration plan. ``added`` and ``updated`` are filled in whenever
        types change but must only be applied if ``modify_schema`` is set.
    """
    create_auto_pk = create_auto_pk_with_append and AUTO_PK_COLUMN_NAME not in existing_types
    table_columns = {
        name: upload_type
        for name, upload_type in existing_types.items()
        if name != AUTO_PK_COLUMN_NAME
    }
    check_schema(table_columns.keys(), header)

    normalized_header = [normalize_column_name(name) for name in header]
    old_types = [table_columns.get(name) for name in normalized_header]

    # Plan for the worst: re-infer every column seeded with its current type
    detected_types = column_types_from_rows(settings, old_types, rows)
    new_types: list[UploadType] = [
        detected if old is None or matching_or_upgradable(old, detected) else old
        for old, detected in zip(old_types, detected_types, strict=True)
    ]
    # Only modify the schema if the whole file can be supported
    modify_schema = old_types != new_types and detected_types == new_types
    added, updated = field_changes(normalized_header, old_types, new_types)

    return MigrationPlan(
        added=added,
        updated=updated,
        modify_schema=modify_schema,
        create_auto_pk=create_auto_pk,
        column_names=normalized_header,
        old_types=old_types,
        detected_types=detected_types,
        new_types=new_types,
    )
