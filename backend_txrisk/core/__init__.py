"""
Core utilities: exceptions and time budgets shared by analyzers, service
clients and the assessment pipeline.
"""

from backend_txrisk.core.deadline import Deadline, bounded, budget_for
from backend_txrisk.core.exceptions import (
    ExternalServiceError,
    ModelResponseParseError,
    TxRiskError,
)

__all__ = [
    "Deadline",
    "bounded",
    "budget_for",
    "ExternalServiceError",
    "ModelResponseParseError",
    "TxRiskError",
]
