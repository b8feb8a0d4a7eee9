"""
Pytest fixtures for TxRisk tests: fixed clock, history builders, recording
sink and fake collaborators. No network; model and graph services are fakes.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from backend_txrisk.analysis_engine.features import MS_PER_DAY
from backend_txrisk.analysis_engine.models import HistoryEntry, TransactionRecord, UserHistory

# 2024-01-10 12:00:00 UTC, a Wednesday
WEEKDAY_NOON_MS = 1_704_888_000_000
# 2024-01-13 03:00:00 UTC, a Saturday
SATURDAY_NIGHT_MS = 1_705_114_800_000

USER = "user-wallet-1"


class RecordingSink:
    """EventSink that keeps published events in order."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def publish(self, event: Any) -> None:
        self.events.append(event)


class FailingSink:
    def publish(self, event: Any) -> None:
        raise RuntimeError("sink offline")


class FakeTextService:
    """TextGenerationService returning a canned reply, optionally after a delay."""

    def __init__(self, reply: str = "", delay: float = 0.0, error: Exception | None = None) -> None:
        self.reply = reply
        self.delay = delay
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str, timeout: float) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeClassificationService:
    def __init__(self, reply: Any = None, configured: bool = True, error: Exception | None = None) -> None:
        self.reply = reply
        self.configured = configured
        self.error = error
        self.calls: list[dict[str, Any]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def classify(self, features: dict[str, Any], timeout: float) -> Any:
        self.calls.append(features)
        if self.error is not None:
            raise self.error
        return self.reply


def established_history(now_ms: int = WEEKDAY_NOON_MS) -> UserHistory:
    """
    400-day-old account, 150 transactions every 2 days (newest 2 days ago),
    amounts alternating 40/60 (mean 50, std 10), 30 recurring merchants.
    """
    entries = [
        HistoryEntry(
            timestamp_ms=now_ms - (i + 1) * 2 * MS_PER_DAY,
            amount_usd=40.0 if i % 2 == 0 else 60.0,
            recipient=f"merchant-{i % 30:02d}",
        )
        for i in range(150)
    ]
    return UserHistory.from_entries(entries, account_age_days=400)


@pytest.fixture
def now_ms() -> int:
    return WEEKDAY_NOON_MS


@pytest.fixture
def empty_history() -> UserHistory:
    return UserHistory.empty()


@pytest.fixture
def established() -> UserHistory:
    return established_history()


@pytest.fixture
def everyday_tx() -> TransactionRecord:
    """Amount at the established user's mean, paid to a known merchant."""
    return TransactionRecord(amount_usd=50.0, recipient="merchant-00", sender=USER, kyc_level=2)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
