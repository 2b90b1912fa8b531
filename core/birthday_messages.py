"""User-facing reply templates for each birthday intent."""

from __future__ import annotations

from typing import Iterable, Sequence

from core.birthday_calendar import UpcomingBirthday, month_name
from core.birthday_store import BirthdayRecord

HELP_MESSAGE = (
    "Hello! I'm {agent}, your birthday bot. I can help you with:\n"
    "• Generate birthday wishes\n"
    "• Remember birthdays\n"
    "• List stored birthdays\n"
    "• Show upcoming birthdays\n\n"
    "Try asking me to 'remember my birthday 2005-01-01' or 'generate a birthday wish'!"
)
REMEMBER_PROMPT = (
    "I'd love to remember your birthday! Please tell me the date in YYYY-MM-DD format "
    "(like 2005-01-01) and I'll store it for you."
)
EMPTY_LIST_MESSAGE = "📝 No birthdays stored yet! Ask me to 'remember your birthday' to get started."
EMPTY_UPCOMING_MESSAGE = (
    "📅 No upcoming birthdays in the next {window} days! "
    "All your saved birthdays are further away or already passed this year."
)
EMPTY_TODAY_MESSAGE = "📅 No birthdays today."


def format_help(agent_name: str) -> str:
    return HELP_MESSAGE.format(agent=agent_name.capitalize())


def format_date_only(date_text: str) -> str:
    return (
        f"I see you provided a date: {date_text}. To store this as a birthday, please also provide a name. "
        f"For example: 'Remember Alice's birthday is {date_text}'"
    )


def format_remember_confirmation(month: int, day: int) -> str:
    return (
        f"🎂 Perfect! I've remembered your birthday is on {month_name(month)} {day}. "
        "I'll make sure to send a happy birthday wish! 🎉"
    )


def format_remember_failure(reason: str) -> str:
    return f"❌ Sorry, I couldn't store that birthday. Error: {reason}"


def _record_line(record: BirthdayRecord) -> str:
    return f"• {record.name} - {month_name(record.month)} {record.day}"


def format_birthday_list(records: Sequence[BirthdayRecord]) -> str:
    if not records:
        return EMPTY_LIST_MESSAGE
    ordered = sorted(records, key=lambda record: (record.month, record.day, record.name))
    lines = [f"🎂 Stored Birthdays ({len(ordered)} total):", ""]
    lines.extend(_record_line(record) for record in ordered)
    return "\n".join(lines)


def _upcoming_line(item: UpcomingBirthday) -> str:
    record = item.record
    when = f"{month_name(record.month)} {record.day}"
    if item.days_until == 1:
        return f"🎂 {record.name} - Tomorrow ({when})"
    return f"📅 {record.name} - {item.days_until} days ({when})"


def format_upcoming_list(items: Iterable[UpcomingBirthday], window_days: int) -> str:
    entries = list(items)
    if not entries:
        return EMPTY_UPCOMING_MESSAGE.format(window=window_days)
    lines = [f"🎂 Upcoming Birthdays (next {window_days} days):", ""]
    lines.extend(_upcoming_line(item) for item in entries)
    return "\n".join(lines)


def format_today_list(records: Sequence[BirthdayRecord]) -> str:
    if not records:
        return EMPTY_TODAY_MESSAGE
    lines = [f"🎉 Birthdays today ({len(records)}):", ""]
    lines.extend(_record_line(record) for record in sorted(records, key=lambda record: record.name))
    return "\n".join(lines)


__all__ = [
    "EMPTY_LIST_MESSAGE",
    "EMPTY_TODAY_MESSAGE",
    "EMPTY_UPCOMING_MESSAGE",
    "REMEMBER_PROMPT",
    "format_birthday_list",
    "format_date_only",
    "format_help",
    "format_remember_confirmation",
    "format_remember_failure",
    "format_today_list",
    "format_upcoming_list",
]
