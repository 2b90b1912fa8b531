import json

import pytest

from core.agent_card import AgentCardLoader, AgentCardNotFound


def test_first_existing_candidate_wins(tmp_path):
    missing = tmp_path / "missing.json"
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    good = tmp_path / "agent.json"
    good.write_text(json.dumps({"name": "Hazel"}), encoding="utf-8")

    loader = AgentCardLoader([missing, broken, good])

    assert loader.load() == {"name": "Hazel"}
    assert loader.check() is True


def test_missing_card_raises(tmp_path):
    loader = AgentCardLoader([tmp_path / "nope.json"])

    with pytest.raises(AgentCardNotFound):
        loader.load()
    assert loader.check() is False


def test_empty_card_is_rejected(tmp_path):
    empty = tmp_path / "empty.json"
    empty.write_text("{}", encoding="utf-8")

    with pytest.raises(AgentCardNotFound):
        AgentCardLoader([empty]).load()
