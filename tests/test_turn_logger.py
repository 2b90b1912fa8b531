import json

from core.turn_logger import TurnLogger, TurnRecord


def _rows(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


def _record(text: str = "remember my birthday 2005-01-01") -> TurnRecord:
    return TurnRecord.new(
        user_text=text,
        intent="remember_with_date",
        entities={"date": "2005-01-01"},
        response_text="Stored",
        latency_ms=3,
    )


def test_turn_logger_writes_jsonl_records(tmp_path):
    path = tmp_path / "turns.jsonl"
    TurnLogger(turn_log_path=path).log_turn(_record())

    rows = _rows(path)
    assert len(rows) == 1
    assert rows[0]["intent"] == "remember_with_date"
    assert rows[0]["latency_ms"] == 3
    assert rows[0]["timestamp"]


def test_disabled_logger_writes_nothing(tmp_path):
    path = tmp_path / "turns.jsonl"
    TurnLogger(turn_log_path=path, enabled=False).log_turn(_record())

    assert not path.exists()


def test_redaction_scrubs_email_and_phone(tmp_path):
    path = tmp_path / "turns.jsonl"
    TurnLogger(turn_log_path=path).log_turn(_record("wish for alice@example.com call +45 12 34 56 78"))

    row = json.loads(path.read_text(encoding="utf-8"))
    assert "alice@example.com" not in row["user_text"]
    assert "[REDACTED_EMAIL]" in row["user_text"]
    assert "[REDACTED_PHONE]" in row["user_text"]
    assert row["entities"] == {"date": "2005-01-01"}


def test_rotation_keeps_backups(tmp_path):
    path = tmp_path / "turns.jsonl"
    logger = TurnLogger(turn_log_path=path, max_bytes=200, backup_count=2)

    for _ in range(5):
        logger.log_turn(_record())

    assert path.exists()
    assert (tmp_path / "turns.jsonl.1").exists()
    assert len(_rows(path)) == 1

