"""
Tests for the command-line entrypoint.
"""

from __future__ import annotations

import json

import pytest

from conftest import USER, WEEKDAY_NOON_MS
from main import main


@pytest.fixture(autouse=True)
def rules_only(monkeypatch):
    for name in ("OLLAMA_ENDPOINT", "HUGGING_FACE_API_KEY", "MIXER_ADDRESSES_PATH",
                 "EXCHANGE_ADDRESSES_PATH", "HIGH_RISK_ADDRESSES_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_scores_event_file(tmp_path, capsys):
    event = tmp_path / "event.json"
    event.write_text(json.dumps({
        "transaction": {"amountUsd": 9500, "recipient": "new-payee", "sender": USER, "kycLevel": 0},
        "history": {"transactions": [], "accountAge": 0},
        "now_ms": WEEKDAY_NOON_MS,
    }))
    assert main([str(event)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["anomaly_score"] == 21
    assert out["risk_level"] == "low"
    assert out["confidence"] == 0.5


def test_invalid_input_exit_code(tmp_path, capsys):
    event = tmp_path / "event.json"
    event.write_text("{not json")
    assert main([str(event)]) == 2
    assert main([str(tmp_path / "missing.json")]) == 2
    assert capsys.readouterr().out == ""
