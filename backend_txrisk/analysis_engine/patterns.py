"""
Rule-based transaction pattern detection.

Flags structuring (amounts just under reporting thresholds), layering,
rapid-fire bursts and unusual timing. Each detector is independent and
explainable; scores add up without a cap (the composite score is clamped
later by the scorer).
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_txrisk.analysis_engine.features import FeatureVector
from backend_txrisk.analysis_engine.models import AnalyzerResult

STRUCTURING_THRESHOLDS = (9999, 4999, 2999, 999)
STRUCTURING_BAND = 0.95
STRUCTURING_POINTS = 30

LAYERING_MIN_TX_LAST_1H = 10
LAYERING_MIN_DIVERSITY = 0.8
LAYERING_POINTS = 25

RAPID_FIRE_MIN_TX_LAST_1H = 5
RAPID_FIRE_MAX_GAP_MS = 60_000
RAPID_FIRE_POINTS = 20

UNUSUAL_HOUR_WEIGHT = 0.3
WEEKEND_WEIGHT = 0.2
# With the two weights above the sum peaks at 0.5, so this branch never fires.
# Kept as-is pending a product decision on the threshold.
TIME_PATTERN_THRESHOLD = 0.7
TIME_PATTERN_POINTS = 15
TIME_PATTERN_INDICATOR = "Unusual transaction timing pattern"


@dataclass(frozen=True)
class PatternHit:
    detected: bool
    reason: str = ""


def is_unusual_hour(hour_of_day: int) -> bool:
    return hour_of_day < 6 or hour_of_day > 22


def is_weekend(day_of_week: int) -> bool:
    return day_of_week in (0, 6)


def detect_structuring(features: FeatureVector) -> PatternHit:
    """Amount in [0.95 * T, T) for a reporting threshold T."""
    amount = features.amount
    for threshold in STRUCTURING_THRESHOLDS:
        if threshold * STRUCTURING_BAND <= amount < threshold:
            return PatternHit(
                True, f"Amount ${amount:.2f} just below ${threshold} threshold"
            )
    return PatternHit(False)


def detect_layering(features: FeatureVector) -> PatternHit:
    if (
        features.tx_count_last_1h > LAYERING_MIN_TX_LAST_1H
        and features.recipient_diversity > LAYERING_MIN_DIVERSITY
    ):
        return PatternHit(True, "Multiple transactions to diverse recipients in short time")
    return PatternHit(False)


def detect_rapid_fire(features: FeatureVector) -> PatternHit:
    if (
        features.tx_count_last_1h > RAPID_FIRE_MIN_TX_LAST_1H
        and features.time_since_last_tx_ms < RAPID_FIRE_MAX_GAP_MS
    ):
        return PatternHit(True, f"{features.tx_count_last_1h} transactions in last hour")
    return PatternHit(False)


def time_pattern_score(features: FeatureVector) -> float:
    score = 0.0
    if is_unusual_hour(features.hour_of_day):
        score += UNUSUAL_HOUR_WEIGHT
    if is_weekend(features.day_of_week):
        score += WEEKEND_WEIGHT
    return score


def analyze_patterns(features: FeatureVector) -> AnalyzerResult:
    """
    Run all pattern detectors and accumulate score and indicators.

    Indicators are appended in detector order; no deduplication here.
    """
    score = 0.0
    indicators: list[str] = []

    structuring = detect_structuring(features)
    if structuring.detected:
        score += STRUCTURING_POINTS
        indicators.append(f"Potential structuring: {structuring.reason}")

    layering = detect_layering(features)
    if layering.detected:
        score += LAYERING_POINTS
        indicators.append(f"Layering pattern: {layering.reason}")

    rapid = detect_rapid_fire(features)
    if rapid.detected:
        score += RAPID_FIRE_POINTS
        indicators.append(f"Rapid transaction pattern: {rapid.reason}")

    if time_pattern_score(features) > TIME_PATTERN_THRESHOLD:
        score += TIME_PATTERN_POINTS
        indicators.append(TIME_PATTERN_INDICATOR)

    return AnalyzerResult.from_parts(score, indicators)
