"""
Assessment pipeline: features -> four analyzers (concurrent) -> score ->
level -> assessment -> risk update event.

Single entrypoint for the payment pipeline: RiskEngine.assess_transaction.
It is synchronous for the caller, bounded by a deadline, and total: any
internal fault is converted into the degraded safe-default assessment.
The engine keeps no state across calls; collaborators are injected.
"""

from __future__ import annotations

import asyncio
import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from backend_txrisk.alerts.engine import assemble_assessment, notify_risk_update
from backend_txrisk.alerts.sinks import LoggingEventSink
from backend_txrisk.analysis_engine.behavior import BehaviorAnalyzer
from backend_txrisk.analysis_engine.classifier import classify_risk
from backend_txrisk.analysis_engine.features import FeatureVector, extract_features
from backend_txrisk.analysis_engine.models import AnalyzerResult, RiskAssessment, TransactionRecord, UserHistory
from backend_txrisk.analysis_engine.network import NetworkRiskAnalyzer
from backend_txrisk.analysis_engine.patterns import analyze_patterns
from backend_txrisk.analysis_engine.risk_indicators import RiskIndicatorAnalyzer
from backend_txrisk.analysis_engine.scorer import compose
from backend_txrisk.config.settings import EngineSettings, get_settings
from backend_txrisk.core.deadline import Deadline
from backend_txrisk.services.huggingface_client import HuggingFaceRiskClassifier
from backend_txrisk.services.ollama_client import OllamaTextGenerator
from backend_txrisk.services.relationship_graph import StaticRelationshipGraph
from backend_txrisk.txrisk_logging import bind_user, get_logger

if TYPE_CHECKING:
    from backend_txrisk.services.interfaces import (
        EventSink,
        RelationshipGraphService,
        RiskClassificationService,
        TextGenerationService,
        UserHistoryProvider,
    )

logger = get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class RiskEngine:
    """
    Transaction risk-scoring engine.

    Build with from_settings() for the environment-configured collaborators,
    or pass analyzers/sink directly (tests, embedding callers).
    """

    def __init__(
        self,
        *,
        behavior: BehaviorAnalyzer | None = None,
        risk: RiskIndicatorAnalyzer | None = None,
        network: NetworkRiskAnalyzer | None = None,
        event_sink: "EventSink | None" = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.behavior = behavior or BehaviorAnalyzer()
        self.risk = risk or RiskIndicatorAnalyzer()
        self.network = network or NetworkRiskAnalyzer(None, self.settings.graph_timeout_sec)
        self.event_sink = event_sink

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings | None = None,
        *,
        event_sink: "EventSink | None" = None,
        text_service: "TextGenerationService | None" = None,
        classification_service: "RiskClassificationService | None" = None,
        graph: "RelationshipGraphService | None" = None,
    ) -> "RiskEngine":
        """
        Wire analyzers from settings. Strategies are fixed here: the model
        path is chosen only when its service is configured.
        """
        cfg = settings or get_settings()
        if text_service is None and cfg.behavior_model_enabled:
            text_service = OllamaTextGenerator(cfg.ollama_endpoint, cfg.ollama_model)
        if classification_service is None and cfg.risk_model_enabled:
            classification_service = HuggingFaceRiskClassifier(
                cfg.hugging_face_api_key, cfg.hf_risk_model_url
            )
        if graph is None:
            graph = StaticRelationshipGraph.from_files(
                cfg.mixer_addresses_path,
                cfg.exchange_addresses_path,
                cfg.high_risk_addresses_path,
            )
        engine = cls(
            behavior=BehaviorAnalyzer.with_model(text_service, cfg.model_timeout_sec),
            risk=RiskIndicatorAnalyzer.with_model(classification_service, cfg.model_timeout_sec),
            network=NetworkRiskAnalyzer(graph, cfg.graph_timeout_sec),
            event_sink=event_sink if event_sink is not None else LoggingEventSink(),
            settings=cfg,
        )
        logger.info(
            "risk_engine_configured",
            behavior_strategy=engine.behavior.strategy.name,
            risk_strategy=engine.risk.strategy.name,
            model_timeout_sec=cfg.model_timeout_sec,
            graph_timeout_sec=cfg.graph_timeout_sec,
        )
        return engine

    def _resolve_deadline(self, deadline: Deadline | float | None) -> Deadline:
        if isinstance(deadline, Deadline):
            return deadline
        if deadline is None:
            return Deadline.after(self.settings.deadline_sec)
        return Deadline.after(float(deadline))

    async def _assess(
        self,
        tx: TransactionRecord,
        history: UserHistory,
        now_ms: int,
        deadline: Deadline,
        user_id: str,
    ) -> RiskAssessment:
        features = extract_features(tx, history, now_ms)

        pattern, behavior, risk, network = await asyncio.gather(
            _analyze_patterns(features),
            self.behavior.analyze(features, history, deadline),
            self.risk.analyze(features, deadline),
            self.network.analyze(tx, deadline),
        )

        score, confidence = compose(pattern, behavior, risk, network, history)
        level, recommendations = classify_risk(score)
        assessment = assemble_assessment(
            pattern, behavior, risk, network, score, level, recommendations, confidence
        )
        notify_risk_update(
            self.event_sink,
            user_id,
            assessment,
            now_ms,
            threshold=self.settings.notify_threshold,
        )
        bind_user(user_id).info(
            "assessment_done",
            score=score,
            risk_level=level.value,
            confidence=confidence,
            pattern_score=pattern.score,
            behavior_score=behavior.score,
            behavior_source=behavior.source,
            risk_score=risk.score,
            risk_source=risk.source,
            network_score=network.score,
            deadline_expired=deadline.expired,
        )
        return assessment

    async def assess_transaction_async(
        self,
        tx: TransactionRecord,
        history: UserHistory,
        now_ms: int | None = None,
        deadline: Deadline | float | None = None,
        user_id: str | None = None,
    ) -> RiskAssessment:
        """
        Score one transaction. Never raises: internal faults yield
        RiskAssessment.degraded().

        Args:
            tx: Transaction to score.
            history: Read-only history snapshot for the sender.
            now_ms: Scoring time (epoch ms); defaults to the wall clock.
            deadline: Deadline, seconds budget, or None for settings.deadline_sec.
            user_id: Identity used in the risk update event; defaults to tx.sender.
        """
        uid = user_id or str(getattr(tx, "sender", "") or "unknown")
        try:
            when = _now_ms() if now_ms is None else int(now_ms)
            return await self._assess(tx, history, when, self._resolve_deadline(deadline), uid)
        except Exception as e:
            bind_user(uid).error("assessment_degraded", error=str(e), error_type=type(e).__name__, exc_info=True)
            return RiskAssessment.degraded()

    def assess_transaction(
        self,
        tx: TransactionRecord,
        history: UserHistory,
        now_ms: int | None = None,
        deadline: Deadline | float | None = None,
        user_id: str | None = None,
    ) -> RiskAssessment:
        """Synchronous form of assess_transaction_async; safe to call from inside a running loop."""

        def _run() -> RiskAssessment:
            return asyncio.run(self.assess_transaction_async(tx, history, now_ms, deadline, user_id))

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return _run()
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="txrisk-assess") as pool:
            return pool.submit(_run).result()

    def assess_user_transaction(
        self,
        user_id: str,
        tx: TransactionRecord,
        provider: "UserHistoryProvider",
        now_ms: int | None = None,
        deadline: Deadline | float | None = None,
    ) -> RiskAssessment:
        """Fetch the user's history snapshot from provider, then assess. Provider failure degrades."""
        try:
            history = provider.get_history(user_id)
        except Exception as e:
            bind_user(user_id).error("history_lookup_failed", error=str(e), error_type=type(e).__name__)
            return RiskAssessment.degraded()
        return self.assess_transaction(tx, history, now_ms, deadline, user_id=user_id)


async def _analyze_patterns(features: FeatureVector) -> AnalyzerResult:
    """Pattern rules are CPU-only; wrapped so they join the same gather."""
    return analyze_patterns(features)


def assess_transaction(
    tx: TransactionRecord,
    history: UserHistory,
    now_ms: int | None = None,
    deadline: Deadline | float | None = None,
    *,
    engine: RiskEngine | None = None,
) -> RiskAssessment:
    """Module-level convenience: score with the given engine or one built from settings."""
    try:
        eng = engine or RiskEngine.from_settings()
    except Exception as e:
        logger.error("risk_engine_build_failed", error=str(e), exc_info=True)
        return RiskAssessment.degraded()
    return eng.assess_transaction(tx, history, now_ms, deadline)
