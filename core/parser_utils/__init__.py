"""Shared helper utilities for intent classification and parameter extraction."""

from .text import capitalize_name, contains_keyword, extract_name
from .datetime import InvalidDateError, extract_date, has_date, parse_birthday_date

__all__ = [
    "InvalidDateError",
    "capitalize_name",
    "contains_keyword",
    "extract_date",
    "extract_name",
    "has_date",
    "parse_birthday_date",
]
