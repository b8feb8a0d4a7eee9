"""
Behavior deviation analysis: current transaction vs. the user's baseline.

Two explicit strategies, selected at construction:
- RuleBasedBehaviorStrategy: deterministic rules (amount z-score, velocity,
  odd hours, large amount to a new recipient).
- ModelBehaviorStrategy: prompts a text-generation service and parses
  "SCORE: <int> | INDICATORS: <a, b>"; any error, timeout or malformed reply
  falls back to the rule strategy it wraps.
"""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING

from backend_txrisk.analysis_engine.features import FeatureVector
from backend_txrisk.analysis_engine.models import AnalyzerResult, UserHistory
from backend_txrisk.analysis_engine.patterns import is_unusual_hour
from backend_txrisk.core.deadline import Deadline, bounded, budget_for
from backend_txrisk.core.exceptions import ExternalServiceError, ModelResponseParseError
from backend_txrisk.txrisk_logging import get_logger

if TYPE_CHECKING:
    from backend_txrisk.services.interfaces import TextGenerationService

logger = get_logger(__name__)

Z_SCORE_LIMIT = 2.0
Z_SCORE_POINTS = 20
VELOCITY_MULTIPLIER = 5.0
VELOCITY_POINTS = 25
UNUSUAL_HOUR_POINTS = 10
NEW_RECIPIENT_AMOUNT_MULTIPLIER = 3.0
NEW_RECIPIENT_POINTS = 15

_RESPONSE_RE = re.compile(r"SCORE:\s*(\d+)\s*\|\s*INDICATORS:\s*(.*)", re.DOTALL)
_EMPTY_INDICATORS = {"", "none", "n/a", "[]"}


def rule_based_behavior_analysis(features: FeatureVector) -> AnalyzerResult:
    """Deterministic behavior rules; used directly or as the model fallback."""
    score = 0.0
    indicators: list[str] = []

    if abs(features.amount_z_score) > Z_SCORE_LIMIT:
        score += Z_SCORE_POINTS
        direction = "higher" if features.amount_z_score > 0 else "lower"
        indicators.append(f"Amount significantly {direction} than usual")

    normal_velocity = features.total_transactions / max(features.account_age_days, 1)
    if features.tx_count_last_24h > normal_velocity * VELOCITY_MULTIPLIER:
        score += VELOCITY_POINTS
        indicators.append("Transaction velocity significantly higher than normal")

    if is_unusual_hour(features.hour_of_day):
        score += UNUSUAL_HOUR_POINTS
        indicators.append("Transaction at unusual time")

    if (
        features.is_new_recipient
        and features.amount > features.average_amount * NEW_RECIPIENT_AMOUNT_MULTIPLIER
    ):
        score += NEW_RECIPIENT_POINTS
        indicators.append("Large transaction to new recipient")

    return AnalyzerResult.from_parts(score, indicators)


def build_behavior_prompt(features: FeatureVector, history: UserHistory) -> str:
    """Prompt summarizing profile, current transaction and recent activity."""
    return f"""Analyze this transaction for behavioral anomalies:

User Profile:
- Account age: {features.account_age_days} days
- Total transactions: {features.total_transactions}
- Average amount: ${features.average_amount:.2f}
- Total volume: ${history.total_volume_usd:.2f}
- KYC level: {features.kyc_level}

Current Transaction:
- Amount: ${features.amount:.2f}
- Time: {features.hour_of_day}:00 on day {features.day_of_week}
- New recipient: {str(features.is_new_recipient).lower()}
- Time since last tx: {features.time_since_last_tx_ms}ms

Recent Activity:
- Transactions last 24h: {features.tx_count_last_24h}
- Volume last 24h: ${features.volume_last_24h:.2f}
- Recipient diversity: {features.recipient_diversity:.2f}

Identify any behavioral anomalies and assign a risk score (0-100). Focus on:
1. Deviation from normal patterns
2. Suspicious timing or amounts
3. Unusual recipient behavior
4. Velocity anomalies

Respond with: SCORE: [0-100] | INDICATORS: [list of specific anomalies]"""


def parse_behavior_response(text: str) -> AnalyzerResult:
    """
    Parse "SCORE: <int> | INDICATORS: <comma-separated>".

    Raises ModelResponseParseError when the pattern is absent. Score is
    clamped to [0, 100]; "none" or an empty list yields no indicators.
    """
    match = _RESPONSE_RE.search(text or "")
    if match is None:
        raise ModelResponseParseError("behavior response missing SCORE/INDICATORS")
    score = max(0, min(100, int(match.group(1))))
    raw = match.group(2).strip().splitlines()[0].strip() if match.group(2).strip() else ""
    raw = raw.strip("[]").strip()
    indicators: list[str] = []
    if raw.lower() not in _EMPTY_INDICATORS:
        indicators = [part.strip() for part in raw.split(",") if part.strip()]
    return AnalyzerResult.from_parts(score, indicators, source="model")


class RuleBasedBehaviorStrategy:
    name = "rules"

    async def analyze(
        self,
        features: FeatureVector,
        history: UserHistory,
        deadline: Deadline | None = None,
    ) -> AnalyzerResult:
        return rule_based_behavior_analysis(features)


class ModelBehaviorStrategy:
    """Text-generation model path wrapping a rule-based fallback."""

    name = "model"

    def __init__(
        self,
        service: "TextGenerationService",
        timeout: float,
        fallback: RuleBasedBehaviorStrategy | None = None,
    ) -> None:
        self._service = service
        self._timeout = timeout
        self._fallback = fallback or RuleBasedBehaviorStrategy()

    async def analyze(
        self,
        features: FeatureVector,
        history: UserHistory,
        deadline: Deadline | None = None,
    ) -> AnalyzerResult:
        prompt = build_behavior_prompt(features, history)
        try:
            budget = budget_for(self._timeout, deadline)
            text = await bounded(self._service.generate(prompt, budget), budget, deadline)
            return parse_behavior_response(text)
        except asyncio.TimeoutError:
            logger.warning("behavior_model_timeout", timeout=self._timeout)
        except ExternalServiceError as e:
            logger.info("behavior_model_unavailable", error=str(e))
        except ModelResponseParseError as e:
            logger.info("behavior_model_unparseable", error=str(e))
        except Exception as e:
            logger.warning("behavior_model_failed", error=str(e), error_type=type(e).__name__)
        return await self._fallback.analyze(features, history, deadline)


class BehaviorAnalyzer:
    """Behavior analyzer bound to one strategy for its lifetime."""

    def __init__(self, strategy: RuleBasedBehaviorStrategy | ModelBehaviorStrategy | None = None) -> None:
        self.strategy = strategy or RuleBasedBehaviorStrategy()

    @classmethod
    def with_model(cls, service: "TextGenerationService | None", timeout: float) -> "BehaviorAnalyzer":
        """Model strategy when a service is available, rules otherwise."""
        if service is None:
            return cls(RuleBasedBehaviorStrategy())
        return cls(ModelBehaviorStrategy(service, timeout))

    async def analyze(
        self,
        features: FeatureVector,
        history: UserHistory,
        deadline: Deadline | None = None,
    ) -> AnalyzerResult:
        return await self.strategy.analyze(features, history, deadline)
