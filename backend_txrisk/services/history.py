"""
Caller-owned history lookup.

The engine never caches histories; a provider hands out one read-only
snapshot per call. StaticHistoryProvider wraps a mapping the caller owns
(tests, batch jobs); production callers plug in their own store.
"""

from __future__ import annotations

from typing import Mapping

from backend_txrisk.analysis_engine.models import UserHistory


class StaticHistoryProvider:
    """UserHistoryProvider over a fixed mapping; unknown users read as empty history."""

    def __init__(self, histories: Mapping[str, UserHistory]) -> None:
        self._histories = histories

    def get_history(self, user_id: str) -> UserHistory:
        return self._histories.get(user_id) or UserHistory.empty()
