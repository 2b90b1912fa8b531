"""End-to-end turns through the orchestrator with stubbed collaborators."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytest

from core.birthday_store import BirthdayStore
from core.intent_classifier import Intent
from core.nlu_service import NLUService
from core.orchestrator import Orchestrator
from core.turn_logger import TurnLogger
from core.wish_generator import FALLBACK_SOURCE, GENERATED_SOURCE, ProviderError

FIXED_NOW = datetime(2024, 6, 1, 9, 0)


class StubWishGenerator:
    def __init__(self, text: str = "Happy birthday from the stub!", fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.calls: list[tuple[str, Optional[int]]] = []

    def generate(self, name: str, age: Optional[int] = None) -> str:
        self.calls.append((name, age))
        if self.fail:
            raise ProviderError("provider down")
        return self.text


def _orchestrator(tmp_path: Path, wish_generator=None, logger: TurnLogger | None = None) -> Orchestrator:
    return Orchestrator(
        nlu=NLUService(),
        store=BirthdayStore(tmp_path / "birthdays.json"),
        wish_generator=wish_generator,
        logger=logger,
        clock=lambda: FIXED_NOW,
    )


def test_remember_with_date_stores_and_confirms(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path)

    result = orchestrator.handle_message_with_details("remember my birthday 2005-01-01")

    assert result.intent == Intent.REMEMBER_WITH_DATE
    assert "January 1" in result.text
    records = orchestrator.store.list()
    assert [(r.name, r.month, r.day) for r in records] == [("User", 1, 1)]
    assert result.extras["birthday_id"] == records[0].id


@pytest.mark.parametrize(
    "message",
    [
        "I want you to remember my birthday 2005-01-01",
        "remember my birthday for 2005-01-01",
    ],
)
def test_remember_always_files_the_requesters_birthday(tmp_path: Path, message: str) -> None:
    orchestrator = _orchestrator(tmp_path)

    text = orchestrator.handle_message(message)

    assert "your birthday is on January 1" in text
    assert [record.name for record in orchestrator.store.list()] == ["User"]


def test_remember_with_invalid_date_apologizes(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path)

    result = orchestrator.handle_message_with_details("remember my birthday 2005-02-30")

    assert result.text.startswith("❌ Sorry")
    assert result.extras["error"] == "invalid_date"
    assert orchestrator.store.list() == []


def test_remember_without_date_asks_for_one(tmp_path: Path) -> None:
    text = _orchestrator(tmp_path).handle_message("please remember my birthday")

    assert "YYYY-MM-DD" in text


def test_wish_beats_list_and_uses_generator(tmp_path: Path) -> None:
    generator = StubWishGenerator()
    orchestrator = _orchestrator(tmp_path, wish_generator=generator)

    result = orchestrator.handle_message_with_details("generate a birthday wish for alice")

    assert result.intent == Intent.GENERATE_WISH
    assert result.text == "Happy birthday from the stub!"
    assert result.source == GENERATED_SOURCE
    assert generator.calls == [("Alice", None)]


def test_wish_prompts_with_friend_without_a_name(tmp_path: Path) -> None:
    generator = StubWishGenerator()
    _orchestrator(tmp_path, wish_generator=generator).handle_message("random wish please")

    assert generator.calls == [("friend", None)]


@pytest.mark.parametrize("generator", [None, StubWishGenerator(fail=True)])
def test_wish_falls_back_to_template(tmp_path: Path, generator) -> None:
    result = _orchestrator(tmp_path, wish_generator=generator).handle_message_with_details("wish for bob")

    assert result.source == FALLBACK_SOURCE
    assert "Happy Birthday, Bob!" in result.text


def test_list_all_and_empty_list(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path)
    assert "No birthdays stored yet" in orchestrator.handle_message("list birthdays")

    orchestrator.store.add_birthday("Alice", "1990-06-15")
    orchestrator.store.add_birthday("Bob", "01-02")
    text = orchestrator.handle_message("list birthdays")

    assert "(2 total)" in text
    assert "• Bob - January 2" in text
    assert "• Alice - June 15" in text


def test_upcoming_and_today_lists(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path)
    orchestrator.store.add_birthday("Alice", "1990-06-15")
    orchestrator.store.add_birthday("Bob", "1985-06-01")
    orchestrator.store.add_birthday("Carol", "1985-06-02")

    upcoming = orchestrator.handle_message("list upcoming birthdays")
    today = orchestrator.handle_message("list birthdays today")

    assert "Alice - 13 days (June 15)" in upcoming
    assert "Carol - 0 days" not in upcoming
    assert "TODAY!" not in upcoming
    assert "Bob" not in upcoming
    assert "• Bob - June 1" in today
    assert "Alice" not in today


def test_upcoming_empty_message(tmp_path: Path) -> None:
    text = _orchestrator(tmp_path).handle_message("list upcoming")

    assert "No upcoming birthdays in the next 30 days" in text


def test_date_only_and_unknown_guidance(tmp_path: Path) -> None:
    orchestrator = _orchestrator(tmp_path)

    assert "I see you provided a date: 2003-09-09" in orchestrator.handle_message("2003-09-09")
    assert "your birthday bot" in orchestrator.handle_message("hello")


def test_reply_builds_jsonrpc_envelope(tmp_path: Path) -> None:
    payload = {
        "jsonrpc": "2.0",
        "id": 7,
        "params": {"message": {"parts": [{"text": "remember my birthday 2005-01-01"}]}},
    }

    envelope = _orchestrator(tmp_path).reply(payload)

    assert envelope["jsonrpc"] == "2.0"
    assert envelope["id"] == 7
    part = envelope["result"]["message"]["parts"][0]
    assert part["kind"] == "text"
    assert "January" in part["text"] and "1" in part["text"]


def test_reply_plain_envelope(tmp_path: Path) -> None:
    envelope = _orchestrator(tmp_path).reply({"content": "list"})

    assert envelope["status"] == "success"
    assert "No birthdays stored yet" in envelope["response"]


def test_turns_are_logged(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "turns.jsonl"
    orchestrator = _orchestrator(tmp_path, logger=TurnLogger(turn_log_path=log_path))

    orchestrator.handle_message("remember my birthday 2005-01-01")

    rows = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert rows[0]["intent"] == "remember_with_date"
    assert rows[0]["entities"] == {"date": "2005-01-01"}
    assert rows[0]["metadata"]["has_date"] is True
