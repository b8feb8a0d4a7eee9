"""
Assessment reporting: indicator merge, final assessment, risk update events.

Builds the RiskAssessment from analyzer results and publishes an on-chain
risk update event to an injected sink when the score crosses the
actionability threshold.
"""

from backend_txrisk.alerts.engine import (
    RiskUpdateEvent,
    assemble_assessment,
    merge_indicators,
    notify_risk_update,
)
from backend_txrisk.alerts.sinks import CallbackEventSink, LoggingEventSink

__all__ = [
    "CallbackEventSink",
    "LoggingEventSink",
    "RiskUpdateEvent",
    "assemble_assessment",
    "merge_indicators",
    "notify_risk_update",
]
