"""
Analysis engine package: features, analyzers, score fusion, classification.

Consumes a transaction plus a history snapshot and produces analyzer
results, a composite anomaly score and a risk level. No I/O except through
injected collaborators in the behavior, risk and network analyzers.
"""

from backend_txrisk.analysis_engine.models import (
    AnalyzerResult,
    HistoryEntry,
    RiskAssessment,
    RiskLevel,
    TransactionRecord,
    UserHistory,
)
from backend_txrisk.analysis_engine.features import FeatureVector, extract_features
from backend_txrisk.analysis_engine.patterns import analyze_patterns
from backend_txrisk.analysis_engine.behavior import (
    BehaviorAnalyzer,
    ModelBehaviorStrategy,
    RuleBasedBehaviorStrategy,
    rule_based_behavior_analysis,
)
from backend_txrisk.analysis_engine.risk_indicators import (
    ModelRiskStrategy,
    RiskIndicatorAnalyzer,
    RuleBasedRiskStrategy,
    rule_based_risk_analysis,
)
from backend_txrisk.analysis_engine.network import NetworkRiskAnalyzer, analyze_network_risk
from backend_txrisk.analysis_engine.scorer import compose, compose_score, compute_confidence
from backend_txrisk.analysis_engine.classifier import classify_risk

__all__ = [
    "AnalyzerResult",
    "HistoryEntry",
    "RiskAssessment",
    "RiskLevel",
    "TransactionRecord",
    "UserHistory",
    "FeatureVector",
    "extract_features",
    "analyze_patterns",
    "BehaviorAnalyzer",
    "ModelBehaviorStrategy",
    "RuleBasedBehaviorStrategy",
    "rule_based_behavior_analysis",
    "ModelRiskStrategy",
    "RiskIndicatorAnalyzer",
    "RuleBasedRiskStrategy",
    "rule_based_risk_analysis",
    "NetworkRiskAnalyzer",
    "analyze_network_risk",
    "compose",
    "compose_score",
    "compute_confidence",
    "classify_risk",
]
