"""Unique table names for uploads."""

from __future__ import annotations

import re
import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from tabular_uploads.schema.detection import slugify

TIME_FORMAT = "_%Y%m%d%H%M%S"
TIME_SUFFIX_LENGTH = len("_yyyyMMddHHmmss")


class MonotonicClock:
    """Clock whose readings never repeat a whole second.

    Each reading is the later of the wall clock and one second past the
    previous reading (truncated to the second), so concurrent callers never
    receive the same timestamp.
    """

    def __init__(self, now: Callable[[], datetime] = datetime.now):
        self._now = now
        self._lock = threading.Lock()
        self._last = now()

    def now(self) -> datetime:
        with self._lock:
            floor = (self._last + timedelta(seconds=1)).replace(microsecond=0)
            self._last = max(self._now(), floor)
            return self._last

    def next_unique_suffix(self) -> str:
        return self.now().strftime(TIME_FORMAT)


_clock = MonotonicClock()


def unique_table_name(
    table_name: str,
    max_length: int,
    clock: MonotonicClock | None = None,
) -> str:
    """Append the current datetime to a name to make it unique.

    The slugified name is truncated so that the result fits in ``max_length``.
    """
    suffix = (clock or _clock).next_unique_suffix()
    slug = slugify(table_name)
    acceptable_length = max(0, max_length - len(suffix))
    return f"{slug[:acceptable_length]}{suffix}"


def filename_prefix(filename: str) -> str:
    """The filename without a trailing ``.csv`` extension."""
    match = re.fullmatch(r"(.*)\.csv", filename, flags=re.DOTALL)
    return match.group(1) if match else filename


def display_name(name: str) -> str:
    """Human readable name for a file or table, e.g. ``"monthly_sales-2024"`` -> ``"Monthly Sales 2024"``."""
    words = [word for word in re.split(r"[\s_\-.]+", name) if word]
    return " ".join(word[:1].upper() + word[1:] for word in words)
