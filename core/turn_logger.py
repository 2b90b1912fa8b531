"""JSONL turn log for the birthday assistant.

Each orchestrated message is appended as one ``TurnRecord`` line. Free-text
fields can be scrubbed of e-mail addresses and phone numbers, and the file is
rotated once it grows past ``max_bytes``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Pattern

logger = logging.getLogger(__name__)

_KNOWN_PATTERNS: Dict[str, Pattern[str]] = {
    "email": re.compile(r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b", re.IGNORECASE),
    "phone": re.compile(r"\+\d[\d\s().]{7,}\d"),
}
_REDACT_FIELDS = {"user_text", "response_text", "entities"}


def _utc_now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@dataclass
class TurnRecord:
    """One handled message: what came in, how it was classified, what went out."""

    timestamp: str
    user_text: str
    intent: str
    entities: Dict[str, Any] = field(default_factory=dict)
    response_text: str = ""
    source: str = "rules"
    latency_ms: int | None = None
    metadata: Dict[str, Any] | None = None

    @classmethod
    def new(
        cls,
        *,
        user_text: str,
        intent: str,
        entities: Dict[str, Any] | None = None,
        response_text: str = "",
        source: str = "rules",
        latency_ms: int | None = None,
        metadata: Dict[str, Any] | None = None,
    ) -> "TurnRecord":
        return cls(
            timestamp=_utc_now(),
            user_text=user_text,
            intent=intent,
            entities=entities or {},
            response_text=response_text,
            source=source,
            latency_ms=latency_ms,
            metadata=metadata,
        )


class TurnLogger:
    """Append ``TurnRecord`` rows to ``turn_log_path`` with redaction and rotation."""

    def __init__(
        self,
        *,
        turn_log_path: Path,
        enabled: bool = True,
        redact: bool = True,
        patterns: Iterable[str] | None = None,
        max_bytes: int = 0,
        backup_count: int = 0,
    ) -> None:
        self._turn_log_path = Path(turn_log_path)
        self._enabled = enabled
        self._redact = redact
        self._max_bytes = max_bytes
        self._backup_count = backup_count
        selected = tuple(patterns) if patterns else tuple(_KNOWN_PATTERNS)
        self._redaction_patterns = [(key, _KNOWN_PATTERNS[key]) for key in selected if key in _KNOWN_PATTERNS]

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def path(self) -> Path:
        return self._turn_log_path

    def log_turn(self, record: TurnRecord) -> None:
        if not self._enabled:
            return
        try:
            self._append_json_line(self._turn_log_path, asdict(record))
        except OSError as exc:
            logger.warning("Could not write turn log %s: %s", self._turn_log_path, exc)

    def _append_json_line(self, path: Path, payload: Dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        prepared = self._prepare_payload(payload)
        line = json.dumps(prepared, ensure_ascii=False)
        self._rotate_if_needed(path, len(line.encode("utf-8")) + 1)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line)
            handle.write("\n")

    def _prepare_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self._redact or not self._redaction_patterns:
            return payload
        return {
            key: self._scrub_value(value) if key in _REDACT_FIELDS else value
            for key, value in payload.items()
        }

    def _scrub_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: self._scrub_value(val) for key, val in value.items()}
        if isinstance(value, list):
            return [self._scrub_value(item) for item in value]
        if isinstance(value, str):
            return self._scrub_string(value)
        return value

    def _scrub_string(self, value: str) -> str:
        sanitized = value
        for key, pattern in self._redaction_patterns:
            sanitized = pattern.sub(f"[REDACTED_{key.upper()}]", sanitized)
        return sanitized

    def _rotate_if_needed(self, path: Path, incoming_bytes: int) -> None:
        """Move ``path`` to ``path.1`` (shifting older backups) once it would exceed ``max_bytes``."""
        if self._max_bytes <= 0 or not path.exists():
            return
        if path.stat().st_size + incoming_bytes <= self._max_bytes:
            return

        if self._backup_count <= 0:
            path.unlink()
            return

        for index in range(self._backup_count - 1, 0, -1):
            src = Path(f"{path}.{index}")
            if src.exists():
                src.replace(Path(f"{path}.{index + 1}"))
        path.replace(Path(f"{path}.1"))


__all__ = ["TurnLogger", "TurnRecord"]
