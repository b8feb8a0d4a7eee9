"""
Coarse risk-indicator analysis.

Two explicit strategies, selected at construction:
- RuleBasedRiskStrategy: high value, round amount, low KYC with high
  amount, risky recipient.
- ModelRiskStrategy: submits categorized features to a classification
  service. Only used when the service has credentials; errors, timeouts
  and unparseable replies fall back to the rules.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from backend_txrisk.analysis_engine.behavior import parse_behavior_response
from backend_txrisk.analysis_engine.features import FeatureVector
from backend_txrisk.analysis_engine.models import AnalyzerResult
from backend_txrisk.core.deadline import Deadline, bounded, budget_for
from backend_txrisk.core.exceptions import ExternalServiceError, ModelResponseParseError
from backend_txrisk.txrisk_logging import get_logger

if TYPE_CHECKING:
    from backend_txrisk.services.interfaces import RiskClassificationService

logger = get_logger(__name__)

HIGH_VALUE_USD = 10_000
HIGH_VALUE_POINTS = 15
ROUND_AMOUNT_POINTS = 10
LOW_KYC_MAX_LEVEL = 2
LOW_KYC_AMOUNT_USD = 5_000
LOW_KYC_POINTS = 20
RISKY_RECIPIENT_THRESHOLD = 0.7
RISKY_RECIPIENT_POINTS = 30


def categorize_amount(amount: float) -> str:
    if amount < 100:
        return "small"
    if amount < 1_000:
        return "medium"
    if amount < HIGH_VALUE_USD:
        return "large"
    return "very_large"


def categorize_velocity(tx_count_last_24h: int) -> str:
    if tx_count_last_24h < 5:
        return "normal"
    if tx_count_last_24h < 20:
        return "elevated"
    return "high"


def categorize_time(hour_of_day: int) -> str:
    if hour_of_day < 6 or hour_of_day > 22:
        return "unusual"
    if 9 <= hour_of_day < 18:
        return "business_hours"
    return "normal"


def build_risk_features(features: FeatureVector) -> dict[str, Any]:
    """Categorized feature payload sent to the classification service."""
    return {
        "amount_category": categorize_amount(features.amount),
        "velocity_category": categorize_velocity(features.tx_count_last_24h),
        "time_category": categorize_time(features.hour_of_day),
        "recipient_risk": features.recipient_risk_score,
        "user_profile": {
            "kyc_level": features.kyc_level,
            "account_age": features.account_age_days,
            "transaction_count": features.total_transactions,
        },
    }


def rule_based_risk_analysis(features: FeatureVector) -> AnalyzerResult:
    """Deterministic risk rules; used directly or as the model fallback."""
    score = 0.0
    indicators: list[str] = []

    if features.amount > HIGH_VALUE_USD:
        score += HIGH_VALUE_POINTS
        indicators.append("High-value transaction")

    if features.round_amount:
        score += ROUND_AMOUNT_POINTS
        indicators.append("Round amount transaction")

    if features.kyc_level < LOW_KYC_MAX_LEVEL and features.amount > LOW_KYC_AMOUNT_USD:
        score += LOW_KYC_POINTS
        indicators.append("High amount with insufficient KYC")

    if features.recipient_risk_score > RISKY_RECIPIENT_THRESHOLD:
        score += RISKY_RECIPIENT_POINTS
        indicators.append("High-risk recipient")

    return AnalyzerResult.from_parts(score, indicators)


def parse_risk_response(data: Any) -> AnalyzerResult:
    """
    Parse a classification response.

    Accepted shapes:
    - {"score": <0-100>, "indicators": [...]}
    - [{"generated_text": "SCORE: <int> | INDICATORS: ..."}] (text-generation models)
    Anything else raises ModelResponseParseError.
    """
    if isinstance(data, dict) and "score" in data:
        try:
            score = float(data["score"])
        except (TypeError, ValueError) as e:
            raise ModelResponseParseError(f"non-numeric score: {data['score']!r}") from e
        raw = data.get("indicators") or []
        if not isinstance(raw, list):
            raise ModelResponseParseError("indicators must be a list")
        return AnalyzerResult.from_parts(
            max(0.0, min(100.0, score)), [str(i) for i in raw], source="model"
        )
    if isinstance(data, list) and data and isinstance(data[0], dict) and "generated_text" in data[0]:
        return parse_behavior_response(str(data[0]["generated_text"]))
    raise ModelResponseParseError(f"unexpected risk response shape: {type(data).__name__}")


class RuleBasedRiskStrategy:
    name = "rules"

    async def analyze(self, features: FeatureVector, deadline: Deadline | None = None) -> AnalyzerResult:
        return rule_based_risk_analysis(features)


class ModelRiskStrategy:
    """Classification-service path wrapping a rule-based fallback."""

    name = "model"

    def __init__(
        self,
        service: "RiskClassificationService",
        timeout: float,
        fallback: RuleBasedRiskStrategy | None = None,
    ) -> None:
        self._service = service
        self._timeout = timeout
        self._fallback = fallback or RuleBasedRiskStrategy()

    async def analyze(self, features: FeatureVector, deadline: Deadline | None = None) -> AnalyzerResult:
        if not self._service.is_configured:
            return await self._fallback.analyze(features, deadline)
        payload = build_risk_features(features)
        try:
            budget = budget_for(self._timeout, deadline)
            data = await bounded(self._service.classify(payload, budget), budget, deadline)
            return parse_risk_response(data)
        except asyncio.TimeoutError:
            logger.warning("risk_model_timeout", timeout=self._timeout)
        except ExternalServiceError as e:
            logger.info("risk_model_unavailable", error=str(e))
        except ModelResponseParseError as e:
            logger.info("risk_model_unparseable", error=str(e))
        except Exception as e:
            logger.warning("risk_model_failed", error=str(e), error_type=type(e).__name__)
        return await self._fallback.analyze(features, deadline)


class RiskIndicatorAnalyzer:
    """Risk-indicator analyzer bound to one strategy for its lifetime."""

    def __init__(self, strategy: RuleBasedRiskStrategy | ModelRiskStrategy | None = None) -> None:
        self.strategy = strategy or RuleBasedRiskStrategy()

    @classmethod
    def with_model(cls, service: "RiskClassificationService | None", timeout: float) -> "RiskIndicatorAnalyzer":
        """Model strategy only when the service has credentials configured."""
        if service is None or not service.is_configured:
            return cls(RuleBasedRiskStrategy())
        return cls(ModelRiskStrategy(service, timeout))

    async def analyze(self, features: FeatureVector, deadline: Deadline | None = None) -> AnalyzerResult:
        return await self.strategy.analyze(features, deadline)
