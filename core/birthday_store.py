"""File-backed birthday storage.

The store owns the in-memory map of records and mirrors it to a JSON document
keyed by record id. Callers only ever receive copies of records.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from core.json_storage import atomic_write_json, read_json
from core.parser_utils import parse_birthday_date

logger = logging.getLogger(__name__)

_DEFAULT_STORAGE_PATH = Path("birthdays.json")


def _utc_timestamp() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@dataclass(frozen=True)
class BirthdayRecord:
    """A recurring annual birthday. ``created_at`` is administrative only."""

    id: str
    name: str
    month: int
    day: int
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BirthdayRecord":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            month=int(data["month"]),
            day=int(data["day"]),
            created_at=str(data.get("created_at") or ""),
        )


class BirthdayStore:
    """Thread-safe birthday collection persisted to ``storage_path``."""

    def __init__(self, storage_path: Path | None = None) -> None:
        self._storage_path = Path(storage_path) if storage_path else _DEFAULT_STORAGE_PATH
        self._lock = threading.Lock()
        self._birthdays: Dict[str, BirthdayRecord] = self._load()

    @property
    def storage_path(self) -> Path:
        return self._storage_path

    def add_birthday(self, name: str, date: str) -> str:
        """Store a birthday and return its id.

        ``date`` is ``YYYY-MM-DD`` or ``MM-DD``; only the month and day are kept.

        Raises:
            InvalidDateError: when ``date`` is not a calendar date.
        """

        month, day = parse_birthday_date(date)
        record = BirthdayRecord(
            id=str(uuid.uuid4()),
            name=name,
            month=month,
            day=day,
            created_at=_utc_timestamp(),
        )
        with self._lock:
            updated = dict(self._birthdays)
            updated[record.id] = record
            # Persist first so memory never holds a record the file lacks.
            self._write(updated)
            self._birthdays = updated
        logger.info("Stored birthday for %s on %02d-%02d (id=%s)", name, month, day, record.id)
        return record.id

    def list(self) -> List[BirthdayRecord]:
        """Return a snapshot of every record, in no particular order."""

        with self._lock:
            return list(self._birthdays.values())

    def get(self, record_id: str) -> Optional[BirthdayRecord]:
        with self._lock:
            return self._birthdays.get(record_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._birthdays)

    def _load(self) -> Dict[str, BirthdayRecord]:
        raw = read_json(self._storage_path, {})
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed birthday file %s", self._storage_path)
            return {}
        records: Dict[str, BirthdayRecord] = {}
        for key, value in raw.items():
            if not isinstance(value, dict):
                continue
            try:
                record = BirthdayRecord.from_dict({"id": key, **value})
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed birthday entry %s", key)
                continue
            records[record.id] = record
        logger.debug("Loaded %d birthdays from %s", len(records), self._storage_path)
        return records

    def _write(self, birthdays: Mapping[str, BirthdayRecord]) -> None:
        payload = {record_id: record.to_dict() for record_id, record in birthdays.items()}
        atomic_write_json(self._storage_path, payload)


__all__ = ["BirthdayRecord", "BirthdayStore"]
