from datetime import datetime
from pathlib import Path

import requests

from core.birthday_store import BirthdayStore
from core.reminders import WebhookNotifier, run_daily_check

NOW = datetime(2024, 6, 1, 8, 0)


class StubNotifier:
    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.fail_for = fail_for or set()
        self.sent: list[dict] = []

    def send(self, payload: dict) -> None:
        if payload["name"] in self.fail_for:
            raise requests.ConnectionError("webhook unreachable")
        self.sent.append(payload)


def _store(tmp_path: Path) -> BirthdayStore:
    store = BirthdayStore(tmp_path / "birthdays.json")
    store.add_birthday("Alice", "1990-06-01")
    store.add_birthday("Bob", "1991-06-02")
    store.add_birthday("Carol", "1992-12-24")
    return store


def test_daily_check_collects_today_and_tomorrow(tmp_path: Path) -> None:
    summary = run_daily_check(_store(tmp_path), NOW)

    assert [item["name"] for item in summary["today"]] == ["Alice"]
    assert [item["name"] for item in summary["tomorrow"]] == ["Bob"]
    assert summary["dispatched"] == 0
    events = {item["event"]: item for item in summary["reminders"]}
    assert events["birthday_today"]["source"] == "fallback"
    assert "Happy Birthday, Alice!" in events["birthday_today"]["message"]
    assert "tomorrow" in events["birthday_tomorrow"]["message"]


def test_daily_check_dispatches_and_counts_failures(tmp_path: Path) -> None:
    notifier = StubNotifier(fail_for={"Bob"})

    summary = run_daily_check(_store(tmp_path), NOW, notifier=notifier)

    assert summary["dispatched"] == 1
    assert summary["failed"] == 1
    assert notifier.sent[0]["name"] == "Alice"


class _RecordingSession:
    def __init__(self) -> None:
        self.posts: list[tuple[str, dict, float]] = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json, timeout))
        response = requests.Response()
        response.status_code = 204
        return response


def test_webhook_notifier_posts_json() -> None:
    session = _RecordingSession()
    notifier = WebhookNotifier("https://hooks.example.test/birthdays", timeout=2, session=session)

    notifier.send({"event": "birthday_today"})

    assert session.posts == [("https://hooks.example.test/birthdays", {"event": "birthday_today"}, 2)]
