"""Generate birthday wishes through the OpenAI chat completions API.

The generator is an optional capability: callers treat every failure as a
``ProviderError`` and fall back to ``fallback_wish``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

GENERATED_SOURCE = "generated"
FALLBACK_SOURCE = "fallback"
_DEFAULT_TIMEOUT_SECONDS = 10.0


class ProviderError(Exception):
    """Raised when the wish provider is unavailable or returns nothing usable."""


def fallback_wish(name: Optional[str] = None) -> str:
    """Canned wish used whenever the provider cannot answer."""

    greeting = f"Happy Birthday, {name}!" if name else "Happy Birthday!"
    return (
        f"🎉 {greeting} 🎂 Wishing you all the joy, happiness, and wonderful surprises "
        "on your special day! May this year bring you endless blessings and amazing adventures! 🌟"
    )


def build_wish_prompt(name: str, age: Optional[int] = None) -> str:
    if age and age > 0:
        return (
            f"Generate a warm and personalized birthday wish for {name} who is turning {age} years old. "
            "Make it heartfelt, positive, and celebratory. Keep it under 100 words."
        )
    return (
        f"Generate a warm and personalized birthday wish for {name}. "
        "Make it heartfelt, positive, and celebratory. Keep it under 100 words."
    )


class WishGenerator:
    """Thin wrapper around an OpenAI client with a fixed request timeout."""

    def __init__(
        self,
        model: str,
        api_key: str | None,
        *,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
        client: Any = None,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    @property
    def model(self) -> str:
        return self._model

    def generate(self, name: str, age: Optional[int] = None) -> str:
        """Return a generated wish for ``name``.

        Raises:
            ProviderError: on missing configuration, timeouts, API errors or an empty reply.
        """

        prompt = build_wish_prompt(name, age)
        content = self._chat_completion(
            messages=[
                {"role": "system", "content": "You write short, warm birthday wishes."},
                {"role": "user", "content": prompt},
            ],
            temperature=0.8,
        )
        text = (content or "").strip()
        if not text:
            raise ProviderError("Wish provider returned an empty response.")
        return text

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self._api_key:
            raise ProviderError("Wish generation is not configured.")
        try:
            from openai import OpenAI
        except ImportError as exc:
            raise ProviderError("Wish generation unavailable: OpenAI package is not installed.") from exc
        self._client = OpenAI(api_key=self._api_key, timeout=self._timeout, max_retries=0)
        return self._client

    def _chat_completion(self, messages: List[Dict[str, str]], temperature: float) -> Optional[str]:
        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=temperature,
                timeout=self._timeout,
            )
        except Exception as exc:  # network/credential/timeout errors from the SDK
            raise ProviderError(f"Wish generation failed: {exc}") from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            return None
        return getattr(choices[0].message, "content", None)


def generate_with_fallback(
    generator: Optional[WishGenerator],
    name: Optional[str],
    age: Optional[int] = None,
    *,
    prompt_name: str = "friend",
) -> tuple[str, str]:
    """Return ``(wish, source)``, falling back to the canned wish on any provider failure.

    ``name`` is used in the canned wish; ``prompt_name`` replaces it in the
    provider prompt when no name is known.
    """

    if generator is None:
        return fallback_wish(name), FALLBACK_SOURCE
    try:
        wish = generator.generate(name or prompt_name, age)
    except ProviderError as exc:
        logger.warning("Falling back to canned wish for %s: %s", name or prompt_name, exc)
        return fallback_wish(name), FALLBACK_SOURCE
    return wish, GENERATED_SOURCE


__all__ = [
    "FALLBACK_SOURCE",
    "GENERATED_SOURCE",
    "ProviderError",
    "WishGenerator",
    "build_wish_prompt",
    "fallback_wish",
    "generate_with_fallback",
]
