"""Column type inference by relaxation.

Each column starts at its existing type (or ``None`` when nothing is known)
and is relaxed, row by row, to the closest ancestor that also accepts the
next value. Relaxation only ever generalizes.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from tabular_uploads.core.errors import InternalConsistencyError
from tabular_uploads.typing.classifiers import TypeCheck, type_checks
from tabular_uploads.typing.lattice import LATTICE, NON_INFERABLE_TYPES, UploadType
from tabular_uploads.typing.parsing import ParsingSettings

TypeChecks = dict[UploadType, TypeCheck]

_INFERABLE_TYPES = tuple(t for t in LATTICE.sorted_types if t not in NON_INFERABLE_TYPES)


def _value_to_type(checks: TypeChecks, value: str | None) -> UploadType | None:
    if value is None or not value.strip():
        return None
    trimmed = value.strip()
    for upload_type in _INFERABLE_TYPES:
        if checks[upload_type](trimmed):
            return upload_type
    raise InternalConsistencyError(f"No upload type accepts the value {value!r}")


def _relax(
    checks: TypeChecks,
    current_type: UploadType | None,
    value: str | None,
) -> UploadType | None:
    if value is None:
        return current_type
    if current_type is None:
        return _value_to_type(checks, value)
    trimmed = value.strip()
    if not trimmed:
        return current_type
    for candidate in (current_type, *LATTICE.ancestors(current_type)):
        if candidate in NON_INFERABLE_TYPES:
            continue
        if checks[candidate](trimmed):
            return candidate
    raise InternalConsistencyError(
        f"No ancestor of {current_type.value} accepts the value {value!r}"
    )


def infer_value(settings: ParsingSettings, value: str | None) -> UploadType | None:
    """Determine the most specific type compatible with a value.

    Numbers are assumed to use the separators of the given settings.
    Returns None for blank values.
    """
    return _value_to_type(type_checks(settings), value)


def relax_type(
    settings: ParsingSettings,
    current_type: UploadType | None,
    value: str | None,
) -> UploadType | None:
    """Given an existing column type and a new value, relax the type until it includes the value."""
    return _relax(type_checks(settings), current_type, value)


def _relax_row(
    checks: TypeChecks,
    current_types: list[UploadType | None],
    row: Sequence[str],
) -> list[UploadType | None]:
    # Short rows leave trailing slots unchanged; values past the header are ignored
    width = len(row)
    return [
        _relax(checks, current, row[i] if i < width else None)
        for i, current in enumerate(current_types)
    ]


def column_types_from_rows(
    settings: ParsingSettings,
    existing_types: Sequence[UploadType | None],
    rows: Iterable[Sequence[str]],
) -> list[UploadType]:
    """Given the types of the existing columns (if any) and rows to be added, infer the best supporting types.

    Rows are consumed in a single pass, so ``rows`` may be a lazy reader
    over an arbitrarily large file.
    """
    checks = type_checks(settings)
    value_types: list[UploadType | None] = list(existing_types)
    for row in rows:
        value_types = _relax_row(checks, value_types, row)
    return [LATTICE.column_type(t) for t in value_types]
