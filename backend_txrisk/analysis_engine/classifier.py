"""
Score -> risk level and recommendations.

Pure and total over integers; inclusive lower bounds. The recommendation
table covers every RiskLevel member.
"""

from __future__ import annotations

from backend_txrisk.analysis_engine.models import RiskLevel

CRITICAL_MIN = 75
HIGH_MIN = 50
MEDIUM_MIN = 25

RECOMMENDATIONS: dict[RiskLevel, tuple[str, ...]] = {
    RiskLevel.CRITICAL: (
        "Block transaction immediately",
        "Require manual compliance review",
        "Enhanced KYC verification needed",
    ),
    RiskLevel.HIGH: (
        "Flag for manual review",
        "Request additional documentation",
        "Monitor subsequent transactions closely",
    ),
    RiskLevel.MEDIUM: (
        "Automated monitoring",
        "Log for pattern analysis",
    ),
    RiskLevel.LOW: (),
}


def score_to_risk_level(score: int) -> RiskLevel:
    if score >= CRITICAL_MIN:
        return RiskLevel.CRITICAL
    if score >= HIGH_MIN:
        return RiskLevel.HIGH
    if score >= MEDIUM_MIN:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def classify_risk(score: int) -> tuple[RiskLevel, tuple[str, ...]]:
    """Return (level, recommendations) for a composite score."""
    level = score_to_risk_level(score)
    return level, RECOMMENDATIONS[level]
