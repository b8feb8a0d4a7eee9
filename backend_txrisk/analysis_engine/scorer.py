"""
Composite score and confidence.

Fuses the four analyzer scores with fixed weights into one bounded integer
(clamp to [0, 100], then round half up). Confidence depends only on data
sufficiency (history length, account age), never on the score.
"""

from __future__ import annotations

import math

from backend_txrisk.analysis_engine.models import AnalyzerResult, UserHistory

WEIGHTS = {
    "pattern": 0.30,
    "behavior": 0.30,
    "risk": 0.25,
    "network": 0.15,
}

SCORE_MIN = 0
SCORE_MAX = 100

CONFIDENCE_BASE = 0.5
# (min transactions exclusive, bonus), first match wins
HISTORY_CONFIDENCE_STEPS = ((100, 0.3), (20, 0.2), (5, 0.1))
# (min account age days exclusive, bonus), first match wins
AGE_CONFIDENCE_STEPS = ((365, 0.2), (90, 0.1))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def weighted_score(
    pattern: AnalyzerResult,
    behavior: AnalyzerResult,
    risk: AnalyzerResult,
    network: AnalyzerResult,
) -> float:
    """Raw weighted sum before clamping."""
    return (
        pattern.score * WEIGHTS["pattern"]
        + behavior.score * WEIGHTS["behavior"]
        + risk.score * WEIGHTS["risk"]
        + network.score * WEIGHTS["network"]
    )


def compose_score(
    pattern: AnalyzerResult,
    behavior: AnalyzerResult,
    risk: AnalyzerResult,
    network: AnalyzerResult,
) -> int:
    """
    Composite anomaly score in [0, 100].

    Non-finite sums (NaN from a misbehaving analyzer) read as 0.
    """
    raw = weighted_score(pattern, behavior, risk, network)
    if not math.isfinite(raw):
        raw = 0.0 if math.isnan(raw) else (SCORE_MAX if raw > 0 else SCORE_MIN)
    return _round_half_up(min(SCORE_MAX, max(SCORE_MIN, raw)))


def compute_confidence(history: UserHistory) -> float:
    """Confidence in [0, 1] from history length and account age."""
    confidence = CONFIDENCE_BASE
    tx_count = len(history.transactions)
    for minimum, bonus in HISTORY_CONFIDENCE_STEPS:
        if tx_count > minimum:
            confidence += bonus
            break
    for minimum, bonus in AGE_CONFIDENCE_STEPS:
        if history.account_age_days > minimum:
            confidence += bonus
            break
    return round(max(0.0, min(1.0, confidence)), 6)


def compose(
    pattern: AnalyzerResult,
    behavior: AnalyzerResult,
    risk: AnalyzerResult,
    network: AnalyzerResult,
    history: UserHistory,
) -> tuple[int, float]:
    """Return (composite score, confidence)."""
    return compose_score(pattern, behavior, risk, network), compute_confidence(history)
