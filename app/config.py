"""Centralize defaults and environment lookups for the birthday assistant."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Default configuration values
# ---------------------------------------------------------------------------
_DEFAULT_STORE_PATH = "birthdays.json"
_DEFAULT_WISH_MODEL = "gpt-4o-mini"
_DEFAULT_WISH_TIMEOUT_SECONDS = 10.0
_DEFAULT_UPCOMING_WINDOW_DAYS = 30
_DEFAULT_AGENT_NAME = "hazel"
_DEFAULT_LOGGING_ENABLED = True
_DEFAULT_LOG_REDACTION_ENABLED = True
_DEFAULT_LOG_DIR = "logs"
_TURN_LOG_FILENAME = "turns.jsonl"
_DEFAULT_LOG_MAX_BYTES = 1_000_000
_DEFAULT_LOG_BACKUP_COUNT = 5
_DEFAULT_LOG_LEVEL = "INFO"
_DEFAULT_HOST = "0.0.0.0"
_DEFAULT_PORT = 3000
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _source(env: Dict[str, str] | None) -> Dict[str, str]:
    return env if env is not None else os.environ  # type: ignore[return-value]


def _read_bool(env: Dict[str, str] | None, key: str, default: bool) -> bool:
    raw = _source(env).get(key)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _FALSE_VALUES:
        return False
    if normalized in _TRUE_VALUES:
        return True
    return default


def _read_int(env: Dict[str, str] | None, key: str, default: int) -> int:
    raw = _source(env).get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Storage and wish provider
# ---------------------------------------------------------------------------
def get_store_path(env: Dict[str, str] | None = None) -> Path:
    """Return the JSON file that holds stored birthdays."""

    return Path(_source(env).get("BIRTHDAY_STORE_PATH") or _DEFAULT_STORE_PATH)


def get_wish_api_key(env: Dict[str, str] | None = None) -> str | None:
    """Return the API key for the wish provider.

    Args:
        env: Optional mapping used instead of ``os.environ`` to simplify testing.

    Returns:
        The API key string if present, otherwise ``None`` (wishes then use the canned template).
    """

    value = _source(env).get("OPENAI_API_KEY")
    return value.strip() if value and value.strip() else None


def get_wish_model(env: Dict[str, str] | None = None) -> str:
    return _source(env).get("WISH_MODEL") or _DEFAULT_WISH_MODEL


def get_wish_timeout_seconds(env: Dict[str, str] | None = None) -> float:
    """Return the provider request timeout; non-positive or invalid values use the default."""

    raw = _source(env).get("WISH_TIMEOUT_SECONDS")
    if raw is None:
        return _DEFAULT_WISH_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        return _DEFAULT_WISH_TIMEOUT_SECONDS
    return value if value > 0 else _DEFAULT_WISH_TIMEOUT_SECONDS


def get_upcoming_window_days(env: Dict[str, str] | None = None) -> int:
    value = _read_int(env, "UPCOMING_WINDOW_DAYS", _DEFAULT_UPCOMING_WINDOW_DAYS)
    return value if value > 0 else _DEFAULT_UPCOMING_WINDOW_DAYS


# ---------------------------------------------------------------------------
# Agent identity and outbound webhooks
# ---------------------------------------------------------------------------
def get_agent_name(env: Dict[str, str] | None = None) -> str:
    return _source(env).get("AGENT_NAME") or _DEFAULT_AGENT_NAME


def get_agent_card_path(env: Dict[str, str] | None = None) -> Optional[Path]:
    """Return an explicit agent card path, or ``None`` to search the default locations."""

    override = _source(env).get("AGENT_CARD_PATH")
    return Path(override) if override else None


def get_reminder_webhook_url(env: Dict[str, str] | None = None) -> str | None:
    value = _source(env).get("REMINDER_WEBHOOK_URL")
    return value.strip() if value and value.strip() else None


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
def is_logging_enabled(env: Dict[str, str] | None = None) -> bool:
    """Determine whether per-turn JSONL logging is active."""

    return _read_bool(env, "LOGGING_ENABLED", _DEFAULT_LOGGING_ENABLED)


def is_log_redaction_enabled(env: Dict[str, str] | None = None) -> bool:
    return _read_bool(env, "LOG_REDACTION_ENABLED", _DEFAULT_LOG_REDACTION_ENABLED)


def get_log_dir(env: Dict[str, str] | None = None) -> Path:
    override = _source(env).get("LOG_DIR")
    return Path(override) if override else Path(_DEFAULT_LOG_DIR)


def get_turn_log_path(env: Dict[str, str] | None = None) -> Path:
    """Return the full path for the turn log JSONL file."""

    return get_log_dir(env) / _TURN_LOG_FILENAME


def get_log_max_bytes(env: Dict[str, str] | None = None) -> int:
    return max(_read_int(env, "LOG_MAX_BYTES", _DEFAULT_LOG_MAX_BYTES), 0)


def get_log_backup_count(env: Dict[str, str] | None = None) -> int:
    return max(_read_int(env, "LOG_BACKUP_COUNT", _DEFAULT_LOG_BACKUP_COUNT), 0)


def get_log_redaction_patterns(env: Dict[str, str] | None = None) -> List[str]:
    raw = _source(env).get("LOG_REDACTION_PATTERNS") or "email,phone"
    return [part.strip().lower() for part in raw.split(",") if part.strip()]


def get_log_level(env: Dict[str, str] | None = None) -> int:
    """Return the stdlib logging level named by ``LOG_LEVEL`` (INFO when unknown)."""

    name = (_source(env).get("LOG_LEVEL") or _DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(env: Dict[str, str] | None = None) -> None:
    logging.basicConfig(
        level=get_log_level(env),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# HTTP server
# ---------------------------------------------------------------------------
def get_host(env: Dict[str, str] | None = None) -> str:
    return _source(env).get("HOST", _DEFAULT_HOST)


def get_port(env: Dict[str, str] | None = None) -> int:
    value = _read_int(env, "PORT", _DEFAULT_PORT)
    return value if 0 < value <= 65535 else _DEFAULT_PORT
