"""
Assessment reporter: merge indicators, build the RiskAssessment, publish
risk update events.

Indicators from the four analyzers are concatenated in analyzer order,
deduplicated keeping the first occurrence, and capped at 10. When the
score is above the notify threshold, a RiskUpdateEvent (user, score, top 5
indicators, timestamp) goes to the injected EventSink. Publishing is
fire-and-forget: failures are logged and never change the assessment.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable

from backend_txrisk.analysis_engine.models import AnalyzerResult, RiskAssessment, RiskLevel
from backend_txrisk.txrisk_logging import get_logger

if TYPE_CHECKING:
    from backend_txrisk.services.interfaces import EventSink

logger = get_logger(__name__)

MAX_INDICATORS = 10
MAX_EVENT_INDICATORS = 5
DEFAULT_NOTIFY_THRESHOLD = 25

# Flag severity used by the on-chain risk program (exclusive lower bounds)
EVENT_SEVERITY_BANDS = ((75, "critical"), (50, "high"), (25, "medium"))


@dataclass(frozen=True)
class RiskUpdateEvent:
    """Request to update a user's on-chain risk score."""

    user_id: str
    score: int
    indicators: tuple[str, ...]
    timestamp_ms: int
    severity: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "score": self.score,
            "indicators": list(self.indicators),
            "timestamp_ms": self.timestamp_ms,
            "severity": self.severity,
        }


def event_severity(score: int) -> str:
    for minimum, severity in EVENT_SEVERITY_BANDS:
        if score > minimum:
            return severity
    return "low"


def merge_indicators(results: Iterable[AnalyzerResult], limit: int = MAX_INDICATORS) -> tuple[str, ...]:
    """Concatenate, dedupe (first occurrence wins, stable order), truncate."""
    seen: dict[str, None] = {}
    for result in results:
        for indicator in result.indicators:
            seen.setdefault(indicator, None)
    return tuple(seen)[:limit]


def assemble_assessment(
    pattern: AnalyzerResult,
    behavior: AnalyzerResult,
    risk: AnalyzerResult,
    network: AnalyzerResult,
    score: int,
    level: RiskLevel,
    recommendations: Iterable[str],
    confidence: float,
) -> RiskAssessment:
    """Build the immutable RiskAssessment returned to the caller."""
    return RiskAssessment(
        anomaly_score=score,
        risk_level=level,
        indicators=merge_indicators((pattern, behavior, risk, network)),
        recommendations=tuple(recommendations),
        confidence=confidence,
    )


def notify_risk_update(
    sink: "EventSink | None",
    user_id: str,
    assessment: RiskAssessment,
    now_ms: int,
    threshold: int = DEFAULT_NOTIFY_THRESHOLD,
) -> bool:
    """
    Publish a risk update when anomaly_score > threshold.

    Returns True if an event was handed to the sink. Sink failures are
    logged and reported as False; they never propagate.
    """
    if sink is None or assessment.anomaly_score <= threshold:
        return False
    event = RiskUpdateEvent(
        user_id=user_id,
        score=assessment.anomaly_score,
        indicators=assessment.indicators[:MAX_EVENT_INDICATORS],
        timestamp_ms=now_ms,
        severity=event_severity(assessment.anomaly_score),
    )
    try:
        sink.publish(event)
    except Exception as e:
        logger.error(
            "risk_update_publish_failed",
            user_id=user_id,
            score=event.score,
            error=str(e),
        )
        return False
    logger.info(
        "risk_update_published",
        user_id=user_id,
        score=event.score,
        severity=event.severity,
        indicators=list(event.indicators),
    )
    return True
