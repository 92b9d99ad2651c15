"""Schema detection for CSV uploads.

Turns a raw header and the rows below it into an ordered mapping of
normalized column names to column types, plus the generated primary key.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable, Iterator, Sequence

from tabular_uploads.core.models import DetectedSchema
from tabular_uploads.typing.inference import column_types_from_rows
from tabular_uploads.typing.lattice import UploadType
from tabular_uploads.typing.parsing import ParsingSettings

# Lower-case name of the generated primary key; the database may upper-case it
AUTO_PK_COLUMN_NAME = "_mb_row_id"

UNNAMED_COLUMN = "unnamed_column"

_SLUG_CHARS = frozenset("abcdefghijklmnopqrstuvwxyz0123456789_")


def slugify(name: str) -> str:
    """Lower-case ASCII slug where every other character becomes an underscore."""
    ascii_name = (
        unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii").lower()
    )
    return "".join(c if c in _SLUG_CHARS else "_" for c in ascii_name)


def normalize_column_name(raw_name: str | None) -> str:
    if raw_name is None or not raw_name.strip():
        return UNNAMED_COLUMN
    return slugify(raw_name.strip()) or UNNAMED_COLUMN


def uniquify_names(names: Iterable[str]) -> list[str]:
    """Make names unique by suffixing repeats with ``_2``, ``_3``, ...

    The first occurrence keeps its name. Suffixed names skip any name that
    is already taken, including names that appear later in the input.
    """
    names = list(names)
    taken = set(names)
    seen: set[str] = set()
    unique = []
    for name in names:
        if name not in seen:
            seen.add(name)
            unique.append(name)
            continue
        suffix = 2
        while f"{name}_{suffix}" in taken:
            suffix += 1
        candidate = f"{name}_{suffix}"
        taken.add(candidate)
        seen.add(candidate)
        unique.append(candidate)
    return unique


def auto_pk_column_indices(header: Sequence[str]) -> set[int]:
    """Indices of header columns that normalize to the generated PK name."""
    return {
        i for i, name in enumerate(header) if normalize_column_name(name) == AUTO_PK_COLUMN_NAME
    }


def _remove_indices(indices: set[int], row: Sequence[str]) -> list[str]:
    return [value for i, value in enumerate(row) if i not in indices]


def without_auto_pk_columns(
    header: Sequence[str], rows: Iterable[Sequence[str]]
) -> tuple[list[str], Iterator[list[str]]]:
    """Drop columns colliding with the generated PK from the header and every row.

    A file downloaded from an uploaded table carries the PK column; it is
    regenerated rather than re-imported. Rows are filtered lazily.
    """
    indices = auto_pk_column_indices(header)
    if not indices:
        return list(header), (list(row) for row in rows)
    return _remove_indices(indices, header), (_remove_indices(indices, row) for row in rows)


def detect_schema(
    settings: ParsingSettings,
    header: Sequence[str],
    rows: Iterable[Sequence[str]],
) -> DetectedSchema:
    """Consume the header and rows of a CSV file and detect its schema.

    The caller must already have removed columns colliding with the
    generated PK (see ``without_auto_pk_columns``). A column that is
    completely blank is typed as text.
    """
    unique_header = uniquify_names(normalize_column_name(name) for name in header)
    initial_types: list[UploadType | None] = [None] * len(unique_header)
    column_types = column_types_from_rows(settings, initial_types, rows)
    return DetectedSchema(
        extant_columns=dict(zip(unique_header, column_types, strict=True)),
        generated_columns={AUTO_PK_COLUMN_NAME: UploadType.AUTO_INCREMENTING_INT_PK},
    )
