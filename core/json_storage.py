"""Load and persist the JSON documents behind the birthday store.

Writes land in a sibling ``.tmp`` file that is fsynced and then swapped in
with ``os.replace``. Unreadable documents are renamed to ``.corrupt`` so the
store can start empty without overwriting what was on disk.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

CORRUPT_SUFFIX = ".corrupt"


def read_json(path: Path, default: T) -> T:
    """Return the document at ``path``; ``default`` when it is missing, blank or corrupt."""

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default
    if not raw.strip():
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        quarantine = path.with_name(path.name + CORRUPT_SUFFIX)
        logger.error("Cannot parse %s (%s); moving it to %s", path, exc, quarantine)
        os.replace(path, quarantine)
        return default


def atomic_write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


__all__ = ["CORRUPT_SUFFIX", "atomic_write_json", "read_json"]
