"""
Assessment pipeline.

RiskEngine wires feature extraction, the four analyzers, score fusion,
classification and reporting into one total entry point.
"""

from backend_txrisk.analytics.assessment_pipeline import RiskEngine, assess_transaction

__all__ = [
    "RiskEngine",
    "assess_transaction",
]
