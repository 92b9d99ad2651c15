"""Locale-aware parsing of raw CSV values.

Numbers honour the configured decimal and grouping separators and tolerate
currency signs and accounting-style parentheses, e.g. ``$1,234.50``,
``-$2``, ``$-2``, ``2 €`` or ``(1.000,50)``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, ConfigDict

from tabular_uploads.core.errors import ParseError
from tabular_uploads.typing.lattice import UploadType

CURRENCY_SIGNS = "$€£¥₹₪₩₿¢"

# Currency signs may appear anywhere around the number: $2, -$2, $-2, 2€
CURRENCY_REGEX = rf"[{re.escape(CURRENCY_SIGNS)}\s]"


class NumberSeparators(str, Enum):
    """Decimal separator followed by grouping separator."""

    DOT_COMMA = ".,"
    COMMA_DOT = ",."
    COMMA_SPACE = ", "
    DOT_APOSTROPHE = ".’"

    @classmethod
    def from_setting(cls, value: str) -> NumberSeparators:
        # A lone "." means the default grouping
        if value == ".":
            return cls.DOT_COMMA
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unsupported number separators: {value!r}") from None

    @property
    def decimal(self) -> str:
        return self.value[0]

    @property
    def grouping(self) -> str:
        return self.value[1]


class ParsingSettings(BaseModel):
    """Locale settings for one inference or parsing pass."""

    model_config = ConfigDict(frozen=True)

    number_separators: NumberSeparators = NumberSeparators.DOT_COMMA


# === Numbers ===

_INT_BODY = {
    NumberSeparators.DOT_COMMA: r"\d[\d,]*",
    NumberSeparators.COMMA_DOT: r"\d[\d.]*",
    NumberSeparators.COMMA_SPACE: r"\d[\d \u00a0]*",
    NumberSeparators.DOT_APOSTROPHE: r"\d[\d’]*",
}

_GROUPING_CHARS = {
    NumberSeparators.DOT_COMMA: ",",
    NumberSeparators.COMMA_DOT: ".",
    NumberSeparators.COMMA_SPACE: " \u00a0",
    NumberSeparators.DOT_APOSTROPHE: "’",
}

_PARENS = re.compile(r"\((.*)\)")
_EDGE_CURRENCY = re.compile(rf"^{CURRENCY_REGEX}+|{CURRENCY_REGEX}+$")
_PLAIN_NUMBER = re.compile(r"\d+(\.\d+)?")


def _with_parens(number_regex: str) -> str:
    return rf"({number_regex})|(\({number_regex}\))"


def _with_currency(number_regex: str) -> str:
    c = CURRENCY_REGEX
    return rf"{c}?\s*-?{c}?{number_regex}\s*{c}?"


@lru_cache(maxsize=None)
def int_regex(separators: NumberSeparators) -> re.Pattern[str]:
    """Full-match pattern for integers written with the given separators."""
    return re.compile(_with_parens(_with_currency(_INT_BODY[separators])))


@lru_cache(maxsize=None)
def float_regex(separators: NumberSeparators) -> re.Pattern[str]:
    """Full-match pattern for numbers, with or without a fractional part.

    Whole numbers also match so that a float column keeps accepting them;
    they are still classified as int first.
    """
    body = _INT_BODY[separators] + rf"(?:{re.escape(separators.decimal)}\d+)?"
    return re.compile(_with_parens(_with_currency(body)))


def parse_number(separators: NumberSeparators, s: str) -> int | float:
    """Parse a localized number, returning an int when there is no fraction.

    Only values matching ``float_regex`` are accepted, so parsing never
    succeeds on a value that classification rejected.
    """
    text = s.strip()
    if not float_regex(separators).fullmatch(text):
        raise ParseError(s, "number")
    negative = False
    parens = _PARENS.fullmatch(text)
    if parens:
        negative = True
        text = parens.group(1)
    text = _EDGE_CURRENCY.sub("", text)
    if text.startswith("-"):
        negative = True
        text = _EDGE_CURRENCY.sub("", text[1:])
    for char in _GROUPING_CHARS[separators]:
        text = text.replace(char, "")
    if separators.decimal != ".":
        text = text.replace(separators.decimal, ".")
    if not _PLAIN_NUMBER.fullmatch(text):
        raise ParseError(s, "number")
    try:
        number = Decimal(text)
    except InvalidOperation as e:
        raise ParseError(s, "number") from e
    if negative:
        number = -number
    if "." in text:
        return float(number)
    return int(number)


# === Booleans ===

_TRUE = re.compile(r"true|t|yes|y|1", re.IGNORECASE)
_FALSE = re.compile(r"false|f|no|n|0", re.IGNORECASE)


def parse_bool(s: str) -> bool:
    text = s.strip()
    if _TRUE.fullmatch(text):
        return True
    if _FALSE.fullmatch(text):
        return False
    raise ParseError(s, UploadType.BOOLEAN)


# === Dates and times ===

_MONTH_DAY_FORMATS = [
    "%b %d %Y",
    "%b %d, %Y",
    "%d %b %Y",
    "%d %b, %Y",
    "%B %d %Y",
    "%B %d, %Y",
    "%d %B %Y",
    "%d %B, %Y",
]

LOCAL_DATE_FORMATS: list[str] = [
    "%Y-%m-%d",
    *_MONTH_DAY_FORMATS,
    *(f"%a {fmt}" for fmt in _MONTH_DAY_FORMATS),
    *(f"%a, {fmt}" for fmt in _MONTH_DAY_FORMATS),
    *(f"%A {fmt}" for fmt in _MONTH_DAY_FORMATS),
    *(f"%A, {fmt}" for fmt in _MONTH_DAY_FORMATS),
]

_ISO_DATE = r"(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})"
_ISO_TIME = (
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:\.(?P<fraction>\d{1,9}))?)?"
)
_LOCAL_DATETIME = re.compile(rf"{_ISO_DATE}[T ]{_ISO_TIME}", re.IGNORECASE)
_OFFSET_DATETIME = re.compile(
    rf"{_ISO_DATE}[T ]{_ISO_TIME}\s*"
    r"(?P<offset>Z|[+-]\d{2}(?::?\d{2})?)",
    re.IGNORECASE,
)


def parse_local_date(s: str) -> date:
    """Parse a date in ISO form or an English month-name form."""
    text = " ".join(s.split())
    for fmt in LOCAL_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ParseError(s, UploadType.DATE)


def _datetime_from_match(s: str, match: re.Match[str], upload_type: UploadType) -> datetime:
    fraction = match.group("fraction") or ""
    try:
        return datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second") or 0),
            int(fraction[:6].ljust(6, "0")),
        )
    except ValueError as e:
        raise ParseError(s, upload_type, reason=str(e)) from e


def parse_local_datetime(s: str) -> datetime:
    """Parse an ISO datetime without an offset, e.g. ``2022-01-01 10:30:00``."""
    text = s.strip()
    match = _LOCAL_DATETIME.fullmatch(text)
    if not match:
        raise ParseError(s, UploadType.DATETIME)
    return _datetime_from_match(s, match, UploadType.DATETIME)


def _parse_offset(s: str, offset: str) -> timezone:
    if offset.upper() == "Z":
        return timezone.utc
    sign = -1 if offset[0] == "-" else 1
    digits = offset[1:].replace(":", "")
    hours = int(digits[:2])
    minutes = int(digits[2:4] or 0)
    if hours > 18 or minutes > 59:
        raise ParseError(s, UploadType.OFFSET_DATETIME, reason="offset out of range")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_offset_datetime(s: str) -> datetime:
    """Parse an ISO datetime with ``Z`` or a numeric offset."""
    text = s.strip()
    match = _OFFSET_DATETIME.fullmatch(text)
    if not match:
        raise ParseError(s, UploadType.OFFSET_DATETIME)
    local = _datetime_from_match(s, match, UploadType.OFFSET_DATETIME)
    return local.replace(tzinfo=_parse_offset(s, match.group("offset")))


def parse_datetime(s: str) -> datetime:
    """Parse a value of a datetime column, where plain dates mean midnight."""
    try:
        return parse_local_datetime(s)
    except ParseError:
        pass
    try:
        return datetime.combine(parse_local_date(s), time())
    except ParseError:
        raise ParseError(s, UploadType.DATETIME) from None


# === Per-type parsers ===


def upload_type_parser(
    upload_type: UploadType, settings: ParsingSettings
) -> Callable[[str], Any]:
    """The function converting a non-blank raw value of the given column type."""
    separators = settings.number_separators

    def parse_int(s: str) -> int:
        if not int_regex(separators).fullmatch(s.strip()):
            raise ParseError(s, UploadType.INT)
        number = parse_number(separators, s)
        if not isinstance(number, int):
            raise ParseError(s, UploadType.INT)
        return number

    def parse_float(s: str) -> float:
        return float(parse_number(separators, s))

    parsers: dict[UploadType, Callable[[str], Any]] = {
        UploadType.BOOLEAN_OR_INT: parse_bool,
        UploadType.BOOLEAN: parse_bool,
        UploadType.INT: parse_int,
        UploadType.FLOAT: parse_float,
        UploadType.DATE: parse_local_date,
        UploadType.DATETIME: parse_datetime,
        UploadType.OFFSET_DATETIME: parse_offset_datetime,
        UploadType.VARCHAR_255: str,
        UploadType.TEXT: str,
    }
    if upload_type not in parsers:
        raise ValueError(f"No parser for upload type {upload_type.value}")
    return parsers[upload_type]
