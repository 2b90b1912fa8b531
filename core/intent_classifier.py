"""Rule-based intent classification for birthday requests.

Each rule is a ``(predicate, intent)`` pair checked top-down against the
normalized message; the first predicate that holds decides the intent. The
order is part of the observable behaviour: a "remember ... 2005-01-01" request
that also says "wish" must still be stored, and "upcoming" only lists when a
list keyword is present too.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence, Tuple

from core.parser_utils import contains_keyword, has_date

REMEMBER_KEYWORDS = ("remember", "my birthday")
WISH_KEYWORDS = ("birthday wish", "wish", "generate", "random")
LIST_KEYWORDS = ("list", "show birthdays")
UPCOMING_KEYWORDS = ("upcoming", "coming up")
TODAY_KEYWORDS = ("today",)


class Intent(str, Enum):
    REMEMBER_WITH_DATE = "remember_with_date"
    GENERATE_WISH = "generate_wish"
    LIST_ALL = "list_all"
    LIST_UPCOMING = "list_upcoming"
    LIST_TODAY = "list_today"
    REMEMBER_NO_DATE = "remember_no_date"
    DATE_ONLY = "date_only"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class MessageFeatures:
    """Keyword/date flags computed once per normalized message."""

    has_date: bool
    has_remember: bool
    has_wish: bool
    has_list: bool
    has_upcoming: bool
    has_today: bool

    @classmethod
    def from_text(cls, normalized: str) -> "MessageFeatures":
        return cls(
            has_date=has_date(normalized),
            has_remember=contains_keyword(normalized, REMEMBER_KEYWORDS),
            has_wish=contains_keyword(normalized, WISH_KEYWORDS),
            has_list=contains_keyword(normalized, LIST_KEYWORDS),
            has_upcoming=contains_keyword(normalized, UPCOMING_KEYWORDS),
            has_today=contains_keyword(normalized, TODAY_KEYWORDS),
        )


Rule = Tuple[Callable[[MessageFeatures], bool], Intent]

RULES: Sequence[Rule] = (
    (lambda f: f.has_date and f.has_remember, Intent.REMEMBER_WITH_DATE),
    (lambda f: f.has_wish, Intent.GENERATE_WISH),
    (lambda f: f.has_upcoming and f.has_list, Intent.LIST_UPCOMING),
    (lambda f: f.has_today and f.has_list, Intent.LIST_TODAY),
    (lambda f: f.has_list, Intent.LIST_ALL),
    (lambda f: f.has_remember, Intent.REMEMBER_NO_DATE),
    (lambda f: f.has_date, Intent.DATE_ONLY),
)


def classify(normalized_text: str) -> Intent:
    """Return the first intent whose rule matches ``normalized_text``.

    The caller is expected to trim and lower-case the text first
    (see ``core.text_utils.normalize_message``).
    """

    features = MessageFeatures.from_text(normalized_text or "")
    for predicate, intent in RULES:
        if predicate(features):
            return intent
    return Intent.UNKNOWN


__all__ = [
    "Intent",
    "LIST_KEYWORDS",
    "MessageFeatures",
    "REMEMBER_KEYWORDS",
    "RULES",
    "TODAY_KEYWORDS",
    "UPCOMING_KEYWORDS",
    "WISH_KEYWORDS",
    "classify",
]
