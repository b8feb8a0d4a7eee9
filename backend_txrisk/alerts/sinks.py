"""
EventSink implementations.

LoggingEventSink records the update request in the structured log (useful
when no publisher is wired). CallbackEventSink forwards events to any
callable, e.g. an on-chain publisher or a queue's put method.
"""

from __future__ import annotations

from typing import Callable

from backend_txrisk.alerts.engine import RiskUpdateEvent
from backend_txrisk.txrisk_logging import get_logger

logger = get_logger(__name__)


class LoggingEventSink:
    def publish(self, event: RiskUpdateEvent) -> None:
        logger.info("onchain_risk_update_requested", **event.to_dict())


class CallbackEventSink:
    def __init__(self, callback: Callable[[RiskUpdateEvent], object]) -> None:
        self._callback = callback

    def publish(self, event: RiskUpdateEvent) -> None:
        self._callback(event)
