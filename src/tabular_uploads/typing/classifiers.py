"""Value classifiers: one predicate per inferable upload type.

Each predicate receives an already trimmed, non-blank string and answers
whether that string is a valid literal of its type. Numeric predicates are
built from the locale settings, so a classifier table is specific to one
``ParsingSettings`` value.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from functools import lru_cache
from typing import Any

from tabular_uploads.core.errors import InternalConsistencyError, ParseError
from tabular_uploads.typing.lattice import NON_INFERABLE_TYPES, VALUE_TYPES, UploadType
from tabular_uploads.typing.parsing import (
    ParsingSettings,
    float_regex,
    int_regex,
    parse_datetime,
    parse_local_date,
    parse_offset_datetime,
)

TypeCheck = Callable[[str], bool]

_BOOLEAN = re.compile(r"true|t|yes|y|1|false|f|no|n|0", re.IGNORECASE)


def _does_not_raise(parser: Callable[[str], Any]) -> TypeCheck:
    def check(s: str) -> bool:
        try:
            parser(s)
        except ParseError:
            return False
        return True

    return check


def _regex_matcher(pattern: re.Pattern[str]) -> TypeCheck:
    def check(s: str) -> bool:
        return pattern.fullmatch(s) is not None

    return check


def is_boolean(s: str) -> bool:
    return _BOOLEAN.fullmatch(s) is not None


def is_boolean_or_int(s: str) -> bool:
    return s in ("0", "1")


def is_varchar_255(s: str) -> bool:
    return len(s) <= 255


def is_text(s: str) -> bool:
    return True


is_date = _does_not_raise(parse_local_date)
# A datetime column also accepts plain dates, as midnight
is_datetime = _does_not_raise(parse_datetime)
is_offset_datetime = _does_not_raise(parse_offset_datetime)


@lru_cache(maxsize=8)
def type_checks(settings: ParsingSettings) -> dict[UploadType, TypeCheck]:
    """Build the classifier table for the given locale settings.

    Every inferable type must have a predicate; a missing one is a
    programming error caught here rather than during a row scan.
    """
    separators = settings.number_separators
    checks: dict[UploadType, TypeCheck] = {
        UploadType.BOOLEAN_OR_INT: is_boolean_or_int,
        UploadType.BOOLEAN: is_boolean,
        UploadType.OFFSET_DATETIME: is_offset_datetime,
        UploadType.DATE: is_date,
        UploadType.DATETIME: is_datetime,
        UploadType.INT: _regex_matcher(int_regex(separators)),
        UploadType.FLOAT: _regex_matcher(float_regex(separators)),
        UploadType.VARCHAR_255: is_varchar_255,
        UploadType.TEXT: is_text,
    }
    missing = [t for t in VALUE_TYPES if t not in NON_INFERABLE_TYPES and t not in checks]
    if missing:
        raise InternalConsistencyError(f"No classifier registered for {missing}")
    return checks


def is_valid(settings: ParsingSettings, upload_type: UploadType, value: str) -> bool:
    """Whether a trimmed value is a literal of the given type."""
    if upload_type in NON_INFERABLE_TYPES:
        return False
    return type_checks(settings)[upload_type](value)
