"""
Tests for score classification and recommendations.
"""

from __future__ import annotations

import pytest

from backend_txrisk.analysis_engine.classifier import RECOMMENDATIONS, classify_risk, score_to_risk_level
from backend_txrisk.analysis_engine.models import RiskLevel


@pytest.mark.parametrize(
    "score,level",
    [
        (0, RiskLevel.LOW),
        (24, RiskLevel.LOW),
        (25, RiskLevel.MEDIUM),
        (49, RiskLevel.MEDIUM),
        (50, RiskLevel.HIGH),
        (74, RiskLevel.HIGH),
        (75, RiskLevel.CRITICAL),
        (100, RiskLevel.CRITICAL),
    ],
)
def test_inclusive_lower_bounds(score, level):
    assert score_to_risk_level(score) is level


def test_total_and_monotonic():
    previous = RiskLevel.LOW
    for score in range(-10, 111):
        level, recommendations = classify_risk(score)
        assert level >= previous
        assert recommendations == RECOMMENDATIONS[level]
        previous = level


def test_every_level_has_recommendations_entry():
    assert set(RECOMMENDATIONS) == set(RiskLevel)
    assert classify_risk(80)[1][0] == "Block transaction immediately"
    assert classify_risk(60)[1] == (
        "Flag for manual review",
        "Request additional documentation",
        "Monitor subsequent transactions closely",
    )
    assert classify_risk(30)[1] == ("Automated monitoring", "Log for pattern analysis")
    assert classify_risk(10)[1] == ()


def test_level_labels_and_order():
    assert RiskLevel.CRITICAL.label == "Critical Risk"
    assert RiskLevel.LOW < RiskLevel.MEDIUM < RiskLevel.HIGH < RiskLevel.CRITICAL
