"""Coordinate a single birthday-assistant turn.

The orchestrator is the one entry point shared by the CLI and the web API: it
classifies the message, runs the handler for the detected intent (which may
touch the store or the wish generator) and returns the composed reply. Every
branch ends in a user-visible message; nothing here raises to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from time import perf_counter
from typing import Any, Callable, Dict, Mapping, Optional

from core import birthday_messages as messages
from core.birthday_calendar import DEFAULT_WINDOW_DAYS, birthdays_on, local_now, upcoming_birthdays
from core.birthday_store import BirthdayStore
from core.envelope import InboundShape, extract_text, respond
from core.intent_classifier import Intent
from core.nlu_service import NLUResult, NLUService
from core.parser_utils import InvalidDateError
from core.turn_logger import TurnLogger, TurnRecord
from core.wish_generator import WishGenerator, generate_with_fallback

logger = logging.getLogger(__name__)

RULES_SOURCE = "rules"
DEFAULT_STORED_NAME = "User"


@dataclass
class OrchestratorResponse:
    """Structured result for one handled message."""

    text: str
    user_text: str
    nlu_result: NLUResult
    source: str = RULES_SOURCE
    latency_ms: int = 0
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def intent(self) -> Intent:
        return self.nlu_result.intent


@dataclass
class _HandlerResult:
    text: str
    source: str = RULES_SOURCE
    extras: Dict[str, Any] = field(default_factory=dict)


class Orchestrator:
    """Routes messages to intent handlers and composes the replies."""

    def __init__(
        self,
        nlu: NLUService,
        store: BirthdayStore,
        wish_generator: Optional[WishGenerator] = None,
        logger: Optional[TurnLogger] = None,
        *,
        agent_name: str = "hazel",
        window_days: int = DEFAULT_WINDOW_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._nlu = nlu
        self._store = store
        self._wish_generator = wish_generator
        self._turn_logger = logger
        self._agent_name = agent_name
        self._window_days = window_days
        self._clock = clock or local_now
        self._handlers: Dict[Intent, Callable[[NLUResult], _HandlerResult]] = {
            Intent.REMEMBER_WITH_DATE: self._handle_remember,
            Intent.GENERATE_WISH: self._handle_wish,
            Intent.LIST_UPCOMING: self._handle_upcoming,
            Intent.LIST_TODAY: self._handle_today,
            Intent.LIST_ALL: self._handle_list,
            Intent.REMEMBER_NO_DATE: self._handle_remember,
            Intent.DATE_ONLY: self._handle_date_only,
            Intent.UNKNOWN: self._handle_unknown,
        }

    @property
    def store(self) -> BirthdayStore:
        return self._store

    @property
    def wish_generator(self) -> Optional[WishGenerator]:
        return self._wish_generator

    @property
    def window_days(self) -> int:
        return self._window_days

    def now(self) -> datetime:
        return self._clock()

    def handle_message(self, message: str) -> str:
        """Convenience wrapper for CLI clients that only need the reply text."""
        return self.handle_message_with_details(message).text

    def handle_message_with_details(self, message: str) -> OrchestratorResponse:
        start = perf_counter()
        raw_message = message or ""
        nlu_result = self._nlu.parse(raw_message)
        logger.debug("Classified %r as %s", nlu_result.normalized_text, nlu_result.intent.value)

        outcome = self._handlers[nlu_result.intent](nlu_result)
        latency_ms = int((perf_counter() - start) * 1000)
        response = OrchestratorResponse(
            text=outcome.text,
            user_text=raw_message,
            nlu_result=nlu_result,
            source=outcome.source,
            latency_ms=latency_ms,
            extras=outcome.extras,
        )
        self._log_turn(response)
        return response

    def reply(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Handle an already-validated inbound payload and return the outbound envelope."""
        response = self.handle_message_with_details(extract_text(payload))
        logger.info("Replying to %s intent via %s", response.intent.value, response.source)
        return respond(response.text, InboundShape.from_payload(payload))

    # -- Intent handlers -------------------------------------------------------
    def _handle_remember(self, result: NLUResult) -> _HandlerResult:
        date_value = result.date
        if not date_value:
            return _HandlerResult(messages.REMEMBER_PROMPT)

        try:
            record_id = self._store.add_birthday(DEFAULT_STORED_NAME, date_value)
        except InvalidDateError as exc:
            logger.info("Rejected birthday date %r: %s", date_value, exc)
            return _HandlerResult(messages.format_remember_failure(str(exc)), extras={"error": "invalid_date"})

        record = self._store.get(record_id)
        text = messages.format_remember_confirmation(record.month, record.day)
        return _HandlerResult(text, extras={"birthday_id": record_id})

    def _handle_wish(self, result: NLUResult) -> _HandlerResult:
        wish, source = generate_with_fallback(self._wish_generator, result.name)
        logger.info("Generated %s birthday wish for %s", source, result.name or "you")
        return _HandlerResult(wish, source=source)

    def _handle_list(self, result: NLUResult) -> _HandlerResult:
        records = self._store.list()
        return _HandlerResult(messages.format_birthday_list(records), extras={"count": len(records)})

    def _handle_upcoming(self, result: NLUResult) -> _HandlerResult:
        upcoming = upcoming_birthdays(self._store.list(), self.now(), self._window_days)
        text = messages.format_upcoming_list(upcoming, self._window_days)
        return _HandlerResult(text, extras={"count": len(upcoming)})

    def _handle_today(self, result: NLUResult) -> _HandlerResult:
        today = birthdays_on(self._store.list(), self.now().date())
        return _HandlerResult(messages.format_today_list(today), extras={"count": len(today)})

    def _handle_date_only(self, result: NLUResult) -> _HandlerResult:
        return _HandlerResult(messages.format_date_only(result.date or result.normalized_text))

    def _handle_unknown(self, result: NLUResult) -> _HandlerResult:
        return _HandlerResult(messages.format_help(self._agent_name))

    def _log_turn(self, response: OrchestratorResponse) -> None:
        if not self._turn_logger:
            return
        self._turn_logger.log_turn(
            TurnRecord.new(
                user_text=response.user_text,
                intent=response.intent.value,
                entities=dict(response.nlu_result.entities),
                response_text=response.text,
                source=response.source,
                latency_ms=response.latency_ms,
                metadata=self._nlu.build_metadata(response.nlu_result),
            )
        )


__all__ = ["DEFAULT_STORED_NAME", "Orchestrator", "OrchestratorResponse", "RULES_SOURCE"]
