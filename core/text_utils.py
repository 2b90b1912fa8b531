"""Shared text normalization utilities."""

from __future__ import annotations


def normalize_message(value: str | None) -> str:
    """Trim and lower-case an inbound message before classification."""

    return (value or "").strip().lower()


__all__ = ["normalize_message"]
