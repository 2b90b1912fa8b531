"""Common text-processing helpers shared by the classifier and extractor."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

NAME_MARKERS = {"for", "to"}
_TRAILING_PUNCTUATION = ".,!?;:"


def contains_keyword(text: str, keywords: Iterable[str]) -> bool:
    """Return True when any keyword is present in ``text``."""

    return any(keyword in text for keyword in keywords)


def capitalize_name(token: str) -> str:
    """Upper-case the first character and lower-case the rest ("aLICE" -> "Alice")."""

    if not token:
        return token
    return token[0].upper() + token[1:].lower()


def extract_name(tokens: Sequence[str]) -> Optional[str]:
    # WHAT: pull the person a request is about out of "wish for alice" style phrasing.
    # HOW: walk the tokens, and return the token right after the first "for"/"to" marker.
    for index, token in enumerate(tokens):
        if token.lower() not in NAME_MARKERS:
            continue
        if index + 1 >= len(tokens):
            return None
        candidate = tokens[index + 1].rstrip(_TRAILING_PUNCTUATION)
        if not candidate:
            return None
        return capitalize_name(candidate)
    return None


__all__ = ["NAME_MARKERS", "capitalize_name", "contains_keyword", "extract_name"]
