"""
External collaborators consumed by the engine.

Protocols for text generation, risk classification, relationship graph,
history lookup and event publishing, plus concrete implementations:
Ollama and Hugging Face HTTP clients, a file-backed relationship graph and
a caller-owned history provider.
"""

from backend_txrisk.services.history import StaticHistoryProvider
from backend_txrisk.services.huggingface_client import HuggingFaceRiskClassifier
from backend_txrisk.services.interfaces import (
    EventSink,
    RelationshipGraphService,
    RiskClassificationService,
    TextGenerationService,
    UserHistoryProvider,
)
from backend_txrisk.services.ollama_client import OllamaTextGenerator
from backend_txrisk.services.relationship_graph import StaticRelationshipGraph

__all__ = [
    "EventSink",
    "HuggingFaceRiskClassifier",
    "OllamaTextGenerator",
    "RelationshipGraphService",
    "RiskClassificationService",
    "StaticHistoryProvider",
    "StaticRelationshipGraph",
    "TextGenerationService",
    "UserHistoryProvider",
]
