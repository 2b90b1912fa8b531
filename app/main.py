"""Assemble the orchestrator and run the interactive CLI loop."""

from __future__ import annotations

import logging
from typing import Optional

from app.config import (
    configure_logging,
    get_agent_name,
    get_log_backup_count,
    get_log_max_bytes,
    get_log_redaction_patterns,
    get_store_path,
    get_turn_log_path,
    get_upcoming_window_days,
    get_wish_api_key,
    get_wish_model,
    get_wish_timeout_seconds,
    is_log_redaction_enabled,
    is_logging_enabled,
)
from core.birthday_store import BirthdayStore
from core.nlu_service import NLUService
from core.orchestrator import Orchestrator
from core.turn_logger import TurnLogger
from core.wish_generator import WishGenerator

logger = logging.getLogger(__name__)


def build_wish_generator() -> Optional[WishGenerator]:
    """Return the configured wish provider, or ``None`` when no API key is set."""
    api_key = get_wish_api_key()
    if not api_key:
        logger.warning("OPENAI_API_KEY not set; birthday wishes will use the fallback template")
        return None
    return WishGenerator(
        model=get_wish_model(),
        api_key=api_key,
        timeout=get_wish_timeout_seconds(),
    )


# -- Orchestrator construction -------------------------------------------------
def build_orchestrator(
    store: Optional[BirthdayStore] = None,
    wish_generator: Optional[WishGenerator] = None,
) -> Orchestrator:
    """Wire the store, NLU, wish provider and turn logger.

    The CLI and the web API both call this so they run the same stack.
    """
    turn_logger = TurnLogger(
        turn_log_path=get_turn_log_path(),
        enabled=is_logging_enabled(),
        redact=is_log_redaction_enabled(),
        patterns=get_log_redaction_patterns(),
        max_bytes=get_log_max_bytes(),
        backup_count=get_log_backup_count(),
    )
    return Orchestrator(
        nlu=NLUService(),
        store=store or BirthdayStore(get_store_path()),
        wish_generator=wish_generator if wish_generator is not None else build_wish_generator(),
        logger=turn_logger,
        agent_name=get_agent_name(),
        window_days=get_upcoming_window_days(),
    )


# -- Interactive CLI loop ------------------------------------------------------
def main() -> None:
    """Read prompts from stdin and print the assistant's replies until EOF or "quit"."""
    configure_logging()
    orchestrator = build_orchestrator()
    print(f"{get_agent_name().capitalize()} is ready. Type 'quit' or 'exit' to stop.")

    while True:
        try:
            message = input("You: ")
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if message.strip().lower() in {"quit", "exit"}:
            print("Goodbye!")
            break

        response = orchestrator.handle_message(message)
        print()
        print(f"Assistant: {response}")
        print()


if __name__ == "__main__":
    main()
