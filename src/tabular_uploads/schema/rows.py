"""Conversion of raw CSV rows into typed rows."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from tabular_uploads.core.errors import ParseError
from tabular_uploads.typing.lattice import UploadType
from tabular_uploads.typing.parsing import ParsingSettings, upload_type_parser


def parse_rows(
    settings: ParsingSettings,
    column_types: Sequence[UploadType],
    rows: Iterable[Sequence[str]],
    column_names: Sequence[str] | None = None,
) -> Iterator[list[Any]]:
    """Lazily parse rows, given the upload type of each column.

    Blank values become None. Missing trailing values become None and
    values beyond the column count are dropped, mirroring inference.
    Nothing is cached, so the result can only be restarted if ``rows`` can.

    Raises:
        ParseError: A value does not fit its column's type. This happens when
            an append declined to widen a column that the file needed widened.
    """
    parsers = [upload_type_parser(t, settings) for t in column_types]
    width = len(parsers)
    for row_number, row in enumerate(rows, start=1):
        parsed: list[Any] = []
        for i in range(width):
            value = row[i] if i < len(row) else None
            if value is None or not value.strip():
                parsed.append(None)
                continue
            try:
                parsed.append(parsers[i](value))
            except ParseError as e:
                raise ParseError(
                    value,
                    column_types[i],
                    row=row_number,
                    column=column_names[i] if column_names else None,
                ) from e
        yield parsed
