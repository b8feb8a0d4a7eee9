"""
Tests for score fusion and confidence.
"""

from __future__ import annotations

import itertools
import math

import pytest

from backend_txrisk.analysis_engine.models import AnalyzerResult, HistoryEntry, UserHistory
from backend_txrisk.analysis_engine.scorer import WEIGHTS, compose, compose_score, compute_confidence


def _r(score: float) -> AnalyzerResult:
    return AnalyzerResult.from_parts(score, [])


def _history(tx_count: int, age_days: int) -> UserHistory:
    entries = [HistoryEntry(timestamp_ms=i, amount_usd=1.0, recipient="r") for i in range(tx_count)]
    return UserHistory.from_entries(entries, account_age_days=age_days)


def test_weights_sum_to_one():
    assert math.isclose(sum(WEIGHTS.values()), 1.0)


def test_weighted_and_rounded_half_up():
    # 30*0.3 + 15*0.3 + 30*0.25 + 0 = 21.0
    assert compose_score(_r(30), _r(15), _r(30), _r(0)) == 21
    # 0 + 0 + 30*0.25 + 65*0.15 = 17.25
    assert compose_score(_r(0), _r(0), _r(30), _r(65)) == 17
    # 0.25 * 10 = 2.5 rounds up
    assert compose_score(_r(0), _r(0), _r(10), _r(0)) == 3
    # 0.15 * 10 = 1.5 rounds up
    assert compose_score(_r(0), _r(0), _r(0), _r(10)) == 2


def test_bounds():
    values = (-50, 0, 37, 100, 250)
    for p, b, r, n in itertools.product(values, repeat=4):
        assert 0 <= compose_score(_r(p), _r(b), _r(r), _r(n)) <= 100
    assert compose_score(_r(200), _r(200), _r(200), _r(200)) == 100


def test_non_finite_inputs():
    assert compose_score(_r(float("nan")), _r(50), _r(0), _r(0)) == 0
    assert compose_score(_r(float("inf")), _r(0), _r(0), _r(0)) == 100
    assert compose_score(_r(float("-inf")), _r(0), _r(0), _r(0)) == 0


@pytest.mark.parametrize(
    "tx_count,age,expected",
    [
        (0, 0, 0.5),
        (5, 90, 0.5),
        (6, 0, 0.6),
        (21, 91, 0.8),
        (101, 0, 0.8),
        (101, 366, 1.0),
        (150, 400, 1.0),
        (0, 366, 0.7),
    ],
)
def test_confidence_table(tx_count, age, expected):
    assert compute_confidence(_history(tx_count, age)) == pytest.approx(expected)


def test_confidence_ignores_score():
    history = _history(30, 100)
    _, low = compose(_r(0), _r(0), _r(0), _r(0), history)
    _, high = compose(_r(100), _r(100), _r(100), _r(100), history)
    assert low == high == pytest.approx(0.8)
