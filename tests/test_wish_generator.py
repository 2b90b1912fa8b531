from types import SimpleNamespace

import pytest

from core.wish_generator import (
    FALLBACK_SOURCE,
    GENERATED_SOURCE,
    ProviderError,
    WishGenerator,
    build_wish_prompt,
    fallback_wish,
    generate_with_fallback,
)


class _StubCompletions:
    def __init__(self, content=None, error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions: _StubCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_generate_returns_provider_text_and_passes_timeout():
    completions = _StubCompletions(content="  Happy birthday, Alice!  ")
    generator = WishGenerator("gpt-4o-mini", None, timeout=3.0, client=_client(completions))

    assert generator.generate("Alice", 30) == "Happy birthday, Alice!"
    call = completions.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["timeout"] == 3.0
    assert "turning 30" in call["messages"][-1]["content"]


def test_missing_api_key_raises_provider_error():
    with pytest.raises(ProviderError):
        WishGenerator("gpt-4o-mini", None).generate("Alice")


def test_sdk_errors_become_provider_errors():
    generator = WishGenerator("m", None, client=_client(_StubCompletions(error=TimeoutError("slow"))))

    with pytest.raises(ProviderError) as excinfo:
        generator.generate("Alice")
    assert "slow" in str(excinfo.value)


def test_empty_reply_is_a_provider_error():
    generator = WishGenerator("m", None, client=_client(_StubCompletions(content="   ")))

    with pytest.raises(ProviderError):
        generator.generate("Alice")


def test_generate_with_fallback_tags_the_source():
    generator = WishGenerator("m", None, client=_client(_StubCompletions(content="Yay!")))
    failing = WishGenerator("m", None, client=_client(_StubCompletions(error=RuntimeError("down"))))

    assert generate_with_fallback(generator, "Alice") == ("Yay!", GENERATED_SOURCE)
    assert generate_with_fallback(failing, "Alice") == (fallback_wish("Alice"), FALLBACK_SOURCE)
    assert generate_with_fallback(None, None) == (fallback_wish(None), FALLBACK_SOURCE)


def test_generate_with_fallback_prompts_with_friend_when_nameless():
    completions = _StubCompletions(content="Cheers")
    generate_with_fallback(WishGenerator("m", None, client=_client(completions)), None)

    assert "for friend." in completions.calls[0]["messages"][-1]["content"]


def test_fallback_wish_mentions_the_name():
    assert "Happy Birthday, Alice!" in fallback_wish("Alice")
    assert "Happy Birthday!" in fallback_wish(None)


def test_prompt_without_age():
    assert "turning" not in build_wish_prompt("Alice")
    assert "turning 5" in build_wish_prompt("Alice", 5)
