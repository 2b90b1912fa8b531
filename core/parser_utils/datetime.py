"""Date helpers for birthday requests.

Only one textual shape is recognised: ``YYYY-M-D`` with one- or two-digit month
and day. Stored birthdays additionally accept the five character ``MM-DD`` form.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional, Tuple

DATE_PATTERN = re.compile(r"\d{4}-\d{1,2}-\d{1,2}")
_BOUNDED_DATE_PATTERN = re.compile(r"\b\d{4}-\d{1,2}-\d{1,2}\b")
_MONTH_DAY_LENGTH = 5
# MM-DD values are checked against a leap year so 02-29 is accepted.
_LEAP_YEAR = 2000


class InvalidDateError(ValueError):
    """Raised when a birthday string is not a real calendar date."""

    def __init__(self, value: str, reason: str | None = None) -> None:
        detail = reason or "expected YYYY-MM-DD or MM-DD"
        super().__init__(f"invalid date {value!r}: {detail}")
        self.value = value


def has_date(text: str) -> bool:
    """Return True when ``text`` contains a date-shaped substring."""

    return bool(DATE_PATTERN.search(text or ""))


def extract_date(message: str) -> Optional[str]:
    """Return the first ``YYYY-M-D`` substring of ``message`` without any prefix.

    Dates written after a dash ("- 2003-09-09") or after the word "birthday"
    ("birthday 1995-12-25") are found by the same pattern, so the earliest
    date in the text always wins.
    """

    if not message:
        return None
    match = _BOUNDED_DATE_PATTERN.search(message)
    if not match:
        return None
    return match.group(0)


def parse_birthday_date(value: str) -> Tuple[int, int]:
    """Return ``(month, day)`` for a ``YYYY-MM-DD`` or ``MM-DD`` string.

    Raises:
        InvalidDateError: when the string does not parse as a calendar date.
    """

    raw = (value or "").strip()
    if not raw:
        raise InvalidDateError(raw, "date is required")
    try:
        if len(raw) == _MONTH_DAY_LENGTH:
            parsed = datetime.strptime(f"{_LEAP_YEAR}-{raw}", "%Y-%m-%d")
        else:
            parsed = datetime.strptime(raw, "%Y-%m-%d")
    except ValueError as exc:
        raise InvalidDateError(raw, str(exc)) from exc
    return parsed.month, parsed.day


__all__ = [
    "DATE_PATTERN",
    "InvalidDateError",
    "extract_date",
    "has_date",
    "parse_birthday_date",
]
