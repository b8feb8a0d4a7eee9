"""
Data models for risk-engine input and output.

- TransactionRecord / HistoryEntry / UserHistory: caller-supplied inputs,
  immutable for the duration of one assessment.
- AnalyzerResult: one per analyzer, fused by the scorer.
- RiskLevel / RiskAssessment: the only externally visible artifact.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key (camelCase or snake_case spellings)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class TransactionRecord:
    """One payment event to score."""

    amount_usd: float
    recipient: str
    sender: str
    recipient_risk_score: float = 0.0
    """Externally supplied recipient risk in [0, 1]."""
    kyc_level: int = 0
    gas_price: float = 0.0
    network_congestion: float = 0.0
    cross_chain: bool = False
    transaction_type: str = "payment"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransactionRecord":
        return cls(
            amount_usd=float(_pick(data, "amount_usd", "amountUsd", default=0.0)),
            recipient=str(_pick(data, "recipient", default="")),
            sender=str(_pick(data, "sender", default="")),
            recipient_risk_score=float(
                _pick(data, "recipient_risk_score", "recipientRiskScore", default=0.0)
            ),
            kyc_level=int(_pick(data, "kyc_level", "kycLevel", default=0)),
            gas_price=float(_pick(data, "gas_price", "gasPrice", default=0.0)),
            network_congestion=float(
                _pick(data, "network_congestion", "networkCongestion", default=0.0)
            ),
            cross_chain=bool(_pick(data, "cross_chain", "crossChain", default=False)),
            transaction_type=str(
                _pick(data, "transaction_type", "transactionType", default="payment")
            ),
        )


@dataclass(frozen=True)
class HistoryEntry:
    """Summary of one prior transaction."""

    timestamp_ms: int
    amount_usd: float
    recipient: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistoryEntry":
        return cls(
            timestamp_ms=int(_pick(data, "timestamp_ms", "timestamp", default=0)),
            amount_usd=float(_pick(data, "amount_usd", "amountUsd", "amount", default=0.0)),
            recipient=str(_pick(data, "recipient", default="")),
        )


@dataclass(frozen=True)
class UserHistory:
    """
    Read-only snapshot of a user's history for one scoring call.

    amounts is parallel to transactions; recipients is a superset of the
    recipients appearing in transactions.
    """

    transactions: tuple[HistoryEntry, ...] = ()
    amounts: tuple[float, ...] = ()
    recipients: frozenset[str] = frozenset()
    last_transaction_ms: int | None = None
    account_age_days: int = 0
    total_volume_usd: float = 0.0

    @classmethod
    def empty(cls, account_age_days: int = 0) -> "UserHistory":
        return cls(account_age_days=account_age_days)

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[HistoryEntry],
        account_age_days: int = 0,
        extra_recipients: Iterable[str] = (),
    ) -> "UserHistory":
        """Build a consistent snapshot from entries (ordered oldest first)."""
        ordered = tuple(sorted(entries, key=lambda e: e.timestamp_ms))
        amounts = tuple(e.amount_usd for e in ordered)
        recipients = frozenset(e.recipient for e in ordered) | frozenset(extra_recipients)
        return cls(
            transactions=ordered,
            amounts=amounts,
            recipients=recipients,
            last_transaction_ms=ordered[-1].timestamp_ms if ordered else None,
            account_age_days=account_age_days,
            total_volume_usd=float(sum(amounts)),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserHistory":
        """Build from a loose mapping; missing amounts/recipients are derived from transactions."""
        entries = [HistoryEntry.from_dict(t) for t in (_pick(data, "transactions", default=[]) or [])]
        amounts_raw = _pick(data, "amounts", default=None)
        amounts = (
            tuple(float(a) for a in amounts_raw)
            if amounts_raw is not None
            else tuple(e.amount_usd for e in entries)
        )
        recipients = frozenset(str(r) for r in (_pick(data, "recipients", default=[]) or []))
        recipients |= frozenset(e.recipient for e in entries)
        last = _pick(data, "last_transaction_ms", "lastTransaction", default=None)
        if isinstance(last, Mapping):
            last = last.get("timestamp")
        return cls(
            transactions=tuple(entries),
            amounts=amounts,
            recipients=recipients,
            last_transaction_ms=int(last) if last is not None else None,
            account_age_days=int(_pick(data, "account_age_days", "accountAge", default=0)),
            total_volume_usd=float(
                _pick(data, "total_volume_usd", "totalVolume", default=sum(amounts))
            ),
        )


@dataclass(frozen=True)
class AnalyzerResult:
    """Score and ordered indicators produced by one analyzer."""

    score: float
    indicators: tuple[str, ...] = ()
    source: str = "rules"
    """Which path produced the result: rules, model or graph."""

    @classmethod
    def from_parts(cls, score: float, indicators: Iterable[str], source: str = "rules") -> "AnalyzerResult":
        return cls(score=float(score), indicators=tuple(indicators), source=source)

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "indicators": list(self.indicators), "source": self.source}


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} Risk"

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank >= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank > other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank < other.rank


_LEVEL_ORDER = (RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL)

DEGRADED_INDICATOR = "analysis failed"
DEGRADED_RECOMMENDATION = "Manual review required"


@dataclass(frozen=True)
class RiskAssessment:
    """
    Final result of one assessment. Constructed fresh per call and never
    mutated; the engine does not retain it.
    """

    anomaly_score: int
    risk_level: RiskLevel
    indicators: tuple[str, ...] = field(default_factory=tuple)
    recommendations: tuple[str, ...] = field(default_factory=tuple)
    confidence: float = 0.0

    @classmethod
    def degraded(cls) -> "RiskAssessment":
        """Safe default returned when an internal fault prevents scoring."""
        return cls(
            anomaly_score=0,
            risk_level=RiskLevel.LOW,
            indicators=(DEGRADED_INDICATOR,),
            recommendations=(DEGRADED_RECOMMENDATION,),
            confidence=0.0,
        )

    @property
    def is_degraded(self) -> bool:
        return self.confidence == 0.0 and self.indicators == (DEGRADED_INDICATOR,)

    def to_dict(self) -> dict[str, Any]:
        return {
            "anomaly_score": self.anomaly_score,
            "risk_level": self.risk_level.value,
            "indicators": list(self.indicators),
            "recommendations": list(self.recommendations),
            "confidence": self.confidence,
        }

    def to_json(self) -> str:
        """Deterministic JSON (sorted keys) for persistence or comparison."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
