"""Daily birthday check triggered by the ``daily_check`` webhook event.

Collects tomorrow's and today's birthdays, builds a wish for each birthday
happening today and optionally pushes reminders to an outbound webhook.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from core.birthday_calendar import birthdays_on, month_name
from core.birthday_store import BirthdayRecord, BirthdayStore
from core.wish_generator import WishGenerator, generate_with_fallback

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 8


class WebhookNotifier:
    """POST reminder payloads to a single webhook URL with retries."""

    def __init__(self, url: str, *, timeout: float = _DEFAULT_TIMEOUT_SECONDS, session: requests.Session | None = None) -> None:
        self._url = url
        self._timeout = timeout
        self._session = session or self._build_session()

    @staticmethod
    def _build_session() -> requests.Session:
        session = requests.Session()
        session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
        retry = Retry(total=3, backoff_factor=0.2, status_forcelist=[429, 500, 502, 503, 504], allowed_methods=None)
        session.mount("https://", HTTPAdapter(max_retries=retry))
        session.mount("http://", HTTPAdapter(max_retries=retry))
        return session

    @property
    def url(self) -> str:
        return self._url

    def send(self, payload: Dict[str, Any]) -> None:
        """Deliver ``payload``; raises ``requests.RequestException`` on failure."""
        response = self._session.post(self._url, json=payload, timeout=self._timeout)
        response.raise_for_status()


def _reminder_payload(event: str, record: BirthdayRecord, message: str) -> Dict[str, Any]:
    return {
        "event": event,
        "id": record.id,
        "name": record.name,
        "month": record.month,
        "day": record.day,
        "message": message,
    }


def run_daily_check(
    store: BirthdayStore,
    now: datetime,
    *,
    wish_generator: Optional[WishGenerator] = None,
    notifier: Optional[WebhookNotifier] = None,
) -> Dict[str, Any]:
    """Report tomorrow's and today's birthdays and dispatch reminders.

    Returns a summary with the matching records plus how many reminders were
    delivered or failed. Delivery errors are logged, never raised.
    """

    logger.info("Starting daily birthday check...")
    records = store.list()
    tomorrow_date = (now + timedelta(days=1)).date()
    tomorrow = birthdays_on(records, tomorrow_date)
    today = birthdays_on(records, now.date())
    logger.info(
        "Checking for reminders - tomorrow is %s %d (%d birthdays)",
        month_name(tomorrow_date.month),
        tomorrow_date.day,
        len(tomorrow),
    )
    logger.info("Checking for birthdays - today is %s %d (%d birthdays)", month_name(now.month), now.day, len(today))

    outgoing: List[Dict[str, Any]] = []
    for record in tomorrow:
        text = f"🔔 Reminder: {record.name}'s birthday is tomorrow ({month_name(record.month)} {record.day})!"
        outgoing.append(_reminder_payload("birthday_tomorrow", record, text))
    for record in today:
        wish, source = generate_with_fallback(wish_generator, record.name)
        payload = _reminder_payload("birthday_today", record, wish)
        payload["source"] = source
        outgoing.append(payload)

    dispatched = 0
    failed = 0
    if notifier:
        for payload in outgoing:
            try:
                notifier.send(payload)
            except requests.RequestException as exc:
                failed += 1
                logger.warning("Failed to deliver %s reminder for %s: %s", payload["event"], payload["name"], exc)
                continue
            dispatched += 1

    return {
        "today": [record.to_dict() for record in today],
        "tomorrow": [record.to_dict() for record in tomorrow],
        "reminders": outgoing,
        "dispatched": dispatched,
        "failed": failed,
    }


__all__ = ["WebhookNotifier", "run_daily_check"]
