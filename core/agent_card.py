"""Locate and cache the A2A agent card served at ``/.well-known/agent.json``."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_CARD_PATHS: Sequence[Path] = (
    Path("config/agent_card.json"),
    Path("agent_card.json"),
    Path(".well-known/agent.json"),
)


class AgentCardNotFound(FileNotFoundError):
    """Raised when no candidate path holds a readable agent card."""


class AgentCardLoader:
    """Return the first readable agent card among ``paths``, caching the result."""

    def __init__(self, paths: Iterable[Path] | None = None) -> None:
        self._paths = [Path(path) for path in (paths or DEFAULT_CARD_PATHS)]
        self._card: Optional[Dict[str, Any]] = None

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    def load(self) -> Dict[str, Any]:
        if self._card is not None:
            return self._card
        for path in self._paths:
            if not path.is_file():
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.error("Failed to read agent card file %s: %s", path, exc)
                continue
            if not isinstance(data, dict) or not data:
                logger.error("Agent card at %s is empty or not an object", path)
                continue
            logger.info("Found agent card at %s", path)
            self._card = data
            return data
        raise AgentCardNotFound("no agent card file found in any of the expected locations")

    def check(self) -> bool:
        """Load the card eagerly at startup; logs and returns False when missing."""
        try:
            self.load()
        except AgentCardNotFound as exc:
            logger.warning("%s; continuing without agent card", exc)
            return False
        return True


__all__ = ["AgentCardLoader", "AgentCardNotFound", "DEFAULT_CARD_PATHS"]
