"""Recurring-date math for stored birthdays."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from core.birthday_store import BirthdayRecord

DEFAULT_WINDOW_DAYS = 30

_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def month_name(month: int) -> str:
    if 1 <= month <= 12:
        return _MONTH_NAMES[month - 1]
    return f"Month {month}"


def occurrence_in_year(year: int, month: int, day: int, now: datetime) -> datetime:
    """Midnight of (month, day) in ``year``, in the same timezone as ``now``.

    Days past the end of the month roll into the next one, so Feb 29 lands on
    Mar 1 in a non-leap year.
    """

    start = datetime(year, month, 1, tzinfo=now.tzinfo)
    return start + timedelta(days=day - 1)


def next_occurrence(record: BirthdayRecord, now: datetime) -> datetime:
    occurrence = occurrence_in_year(now.year, record.month, record.day, now)
    if occurrence <= now:
        occurrence = occurrence_in_year(now.year + 1, record.month, record.day, now)
    return occurrence


def days_until(record: BirthdayRecord, now: datetime) -> int:
    """Whole days from ``now`` to the record's next occurrence, rounded down."""

    delta = next_occurrence(record, now) - now
    hours = delta.total_seconds() / 3600
    return int(hours // 24)


def is_today(record: BirthdayRecord, today: date) -> bool:
    return record.month == today.month and record.day == today.day


@dataclass(frozen=True)
class UpcomingBirthday:
    record: BirthdayRecord
    days_until: int

    def to_dict(self) -> dict:
        payload = self.record.to_dict()
        payload["days_until"] = self.days_until
        return payload


def upcoming_birthdays(
    records: Iterable[BirthdayRecord],
    now: datetime,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> List[UpcomingBirthday]:
    """Birthdays between one and ``window_days`` days away, soonest first."""

    upcoming: List[UpcomingBirthday] = []
    for record in records:
        remaining = days_until(record, now)
        if 0 < remaining <= window_days:
            upcoming.append(UpcomingBirthday(record=record, days_until=remaining))
    upcoming.sort(key=lambda item: (item.days_until, item.record.name))
    return upcoming


def birthdays_on(records: Iterable[BirthdayRecord], target: date) -> List[BirthdayRecord]:
    """Records whose (month, day) matches ``target`` exactly."""

    return [record for record in records if is_today(record, target)]


def local_now(now: Optional[datetime] = None) -> datetime:
    return now or datetime.now().astimezone()


__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "UpcomingBirthday",
    "birthdays_on",
    "days_until",
    "is_today",
    "local_now",
    "month_name",
    "next_occurrence",
    "occurrence_in_year",
    "upcoming_birthdays",
]
