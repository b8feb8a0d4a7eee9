"""
Tests for assessment assembly and risk update publishing.
"""

from __future__ import annotations

from backend_txrisk.alerts.engine import (
    assemble_assessment,
    event_severity,
    merge_indicators,
    notify_risk_update,
)
from backend_txrisk.alerts.sinks import CallbackEventSink, LoggingEventSink
from backend_txrisk.analysis_engine.classifier import classify_risk
from backend_txrisk.analysis_engine.models import AnalyzerResult, RiskAssessment, RiskLevel
from conftest import USER, WEEKDAY_NOON_MS, FailingSink, RecordingSink


def _r(*indicators: str) -> AnalyzerResult:
    return AnalyzerResult.from_parts(0, indicators)


def _assessment(score: int, indicators: tuple[str, ...] = ()) -> RiskAssessment:
    level, recs = classify_risk(score)
    return RiskAssessment(score, level, indicators, recs, 0.8)


def test_merge_dedupes_in_analyzer_order():
    merged = merge_indicators([_r("a", "b"), _r("b", "c"), _r(), _r("a", "d")])
    assert merged == ("a", "b", "c", "d")


def test_merge_truncates_to_ten():
    merged = merge_indicators([_r(*[f"p{i}" for i in range(6)]), _r(*[f"n{i}" for i in range(6)])])
    assert len(merged) == 10
    assert merged[-1] == "n3"


def test_assemble_assessment():
    level, recs = classify_risk(56)
    assessment = assemble_assessment(_r("x"), _r("y"), _r("x"), _r(), 56, level, recs, 0.6)
    assert assessment.indicators == ("x", "y")
    assert assessment.risk_level is RiskLevel.HIGH
    assert assessment.recommendations == recs
    assert assessment.confidence == 0.6


def test_event_only_above_threshold():
    sink = RecordingSink()
    assert notify_risk_update(sink, USER, _assessment(25, ("a",)), WEEKDAY_NOON_MS) is False
    assert sink.events == []
    assert notify_risk_update(sink, USER, _assessment(26, ("a",)), WEEKDAY_NOON_MS) is True
    assert len(sink.events) == 1


def test_event_contents():
    sink = RecordingSink()
    indicators = tuple(f"i{n}" for n in range(8))
    notify_risk_update(sink, USER, _assessment(80, indicators), WEEKDAY_NOON_MS)
    event = sink.events[0]
    assert event.user_id == USER
    assert event.score == 80
    assert event.indicators == indicators[:5]
    assert event.timestamp_ms == WEEKDAY_NOON_MS
    assert event.severity == "critical"
    assert event.to_dict()["indicators"] == list(indicators[:5])


def test_event_severity_bands():
    assert [event_severity(s) for s in (10, 25, 26, 50, 51, 75, 76)] == [
        "low", "low", "medium", "medium", "high", "high", "critical",
    ]


def test_sink_failure_is_swallowed():
    assessment = _assessment(90, ("a",))
    assert notify_risk_update(FailingSink(), USER, assessment, WEEKDAY_NOON_MS) is False
    assert notify_risk_update(None, USER, assessment, WEEKDAY_NOON_MS) is False


def test_bundled_sinks():
    received = []
    assert notify_risk_update(CallbackEventSink(received.append), USER, _assessment(60), 1) is True
    assert received[0].severity == "high"
    assert notify_risk_update(LoggingEventSink(), USER, _assessment(60), 1) is True
