"""Deterministic NLU for birthday requests.

Classification runs on the normalized (trimmed, lower-cased) message; entity
extraction runs on the original text so names keep the user's spelling until
they are capitalized.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet

from core.intent_classifier import Intent, classify
from core.parser_utils import extract_date, extract_name
from core.text_utils import normalize_message

DATE_INTENTS: FrozenSet[Intent] = frozenset({Intent.REMEMBER_WITH_DATE, Intent.DATE_ONLY})
NAME_INTENTS: FrozenSet[Intent] = frozenset({Intent.GENERATE_WISH})


@dataclass
class NLUResult:
    intent: Intent
    normalized_text: str
    entities: Dict[str, Any] = field(default_factory=dict)
    source: str = "rules"

    @property
    def date(self) -> str | None:
        return self.entities.get("date")

    @property
    def name(self) -> str | None:
        return self.entities.get("name")


class NLUService:
    """Classify a message and pull out the parameters its intent needs."""

    def parse(self, message: str) -> NLUResult:
        original = message or ""
        normalized = normalize_message(original)
        intent = classify(normalized)
        return NLUResult(
            intent=intent,
            normalized_text=normalized,
            entities=self.extract_entities(intent, original),
        )

    def extract_entities(self, intent: Intent, message: str) -> Dict[str, Any]:
        # WHAT: run only the extractors relevant to ``intent``.
        # HOW: dates come from the first date-shaped substring, names from the token after "for"/"to".
        entities: Dict[str, Any] = {}
        if intent in DATE_INTENTS:
            date_value = extract_date(message)
            if date_value:
                entities["date"] = date_value
        if intent in NAME_INTENTS:
            name = extract_name(message.split())
            if name:
                entities["name"] = name
        return entities

    def build_metadata(self, result: NLUResult) -> Dict[str, Any]:
        """Annotate turns with the classified intent and which entities were found."""
        return {
            "domain": "birthdays",
            "intent": result.intent.value,
            "has_date": "date" in result.entities,
            "has_name": "name" in result.entities,
        }


__all__ = ["DATE_INTENTS", "NAME_INTENTS", "NLUResult", "NLUService"]
