"""
Network-level risk: who the transaction touches.

Runs four independent relationship lookups concurrently (recipient
connections, sender connections, mixer interaction, exchange interaction).
Each lookup is bounded by a timeout and fails open: an error or timeout
reads as "not detected" for that sub-check only. The analyzer never raises.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from backend_txrisk.analysis_engine.models import AnalyzerResult, TransactionRecord
from backend_txrisk.core.deadline import Deadline, bounded, budget_for
from backend_txrisk.txrisk_logging import get_logger

if TYPE_CHECKING:
    from backend_txrisk.services.interfaces import RelationshipGraphService

logger = get_logger(__name__)

RISKY_CONNECTION_THRESHOLD = 0.7
RISKY_CONNECTION_POINTS = 25
MIXER_POINTS = 40
SUSPICIOUS_EXCHANGE_POINTS = 20


async def _fail_open(
    check: str,
    call: Callable[[str], Awaitable[dict[str, Any]]],
    address: str,
    timeout: float,
    deadline: Deadline | None,
) -> dict[str, Any]:
    """Run one lookup; any failure yields an empty result (not detected)."""
    try:
        result = await bounded(call(address), budget_for(timeout, deadline), deadline)
    except asyncio.TimeoutError:
        logger.warning("network_check_timeout", check=check, timeout=timeout)
        return {}
    except Exception as e:
        logger.warning("network_check_failed", check=check, error=str(e))
        return {}
    return result if isinstance(result, dict) else {}


def _risk_score(result: dict[str, Any]) -> float:
    try:
        return float(result.get("risk_score") or 0.0)
    except (TypeError, ValueError):
        return 0.0


class NetworkRiskAnalyzer:
    """Scores a transaction from its relationship-graph neighbourhood."""

    def __init__(self, graph: "RelationshipGraphService | None", timeout: float) -> None:
        self._graph = graph
        self._timeout = timeout

    async def analyze(self, tx: TransactionRecord, deadline: Deadline | None = None) -> AnalyzerResult:
        if self._graph is None:
            return AnalyzerResult.from_parts(0, [], source="graph")
        graph = self._graph
        recipient, sender, mixer, exchange = await asyncio.gather(
            _fail_open("recipient_connections", graph.recipient_connections, tx.recipient, self._timeout, deadline),
            _fail_open("sender_connections", graph.sender_connections, tx.sender, self._timeout, deadline),
            _fail_open("mixer_interaction", graph.mixer_interaction, tx.recipient, self._timeout, deadline),
            _fail_open("exchange_interaction", graph.exchange_interaction, tx.recipient, self._timeout, deadline),
        )

        score = 0.0
        indicators: list[str] = []

        if _risk_score(recipient) > RISKY_CONNECTION_THRESHOLD:
            score += RISKY_CONNECTION_POINTS
            indicators.append("Recipient has high-risk connections")

        if mixer.get("detected") is True:
            score += MIXER_POINTS
            indicators.append("Transaction involves mixer service")

        if exchange.get("suspicious") is True:
            score += SUSPICIOUS_EXCHANGE_POINTS
            indicators.append("Suspicious exchange interaction pattern")

        logger.debug(
            "network_risk_evaluated",
            score=score,
            sender_risk=_risk_score(sender),
            cross_chain=tx.cross_chain,
        )
        return AnalyzerResult.from_parts(score, indicators, source="graph")


async def analyze_network_risk(
    tx: TransactionRecord,
    graph: "RelationshipGraphService | None",
    timeout: float,
    deadline: Deadline | None = None,
) -> AnalyzerResult:
    """Functional form of NetworkRiskAnalyzer.analyze."""
    return await NetworkRiskAnalyzer(graph, timeout).analyze(tx, deadline)
