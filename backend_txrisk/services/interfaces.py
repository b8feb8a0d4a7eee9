"""
Collaborator interfaces.

Implemented outside the engine's scoring logic and injected at
construction; the engine keeps no ambient global state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from backend_txrisk.alerts.engine import RiskUpdateEvent
    from backend_txrisk.analysis_engine.models import UserHistory


@runtime_checkable
class TextGenerationService(Protocol):
    async def generate(self, prompt: str, timeout: float) -> str:
        """Return raw model text for prompt; raise ExternalServiceError on failure."""
        ...


@runtime_checkable
class RiskClassificationService(Protocol):
    @property
    def is_configured(self) -> bool:
        """False when no credential is set; the engine then skips the call entirely."""
        ...

    async def classify(self, features: dict[str, Any], timeout: float) -> Any:
        """Return the decoded JSON response for categorized features."""
        ...


@runtime_checkable
class RelationshipGraphService(Protocol):
    """Four independent lookups; each may fail on its own."""

    async def recipient_connections(self, address: str) -> dict[str, Any]:
        """{"risk_score": float in [0, 1], ...}"""
        ...

    async def sender_connections(self, address: str) -> dict[str, Any]:
        """{"risk_score": float in [0, 1], ...}"""
        ...

    async def mixer_interaction(self, address: str) -> dict[str, Any]:
        """{"detected": bool, ...}"""
        ...

    async def exchange_interaction(self, address: str) -> dict[str, Any]:
        """{"suspicious": bool, ...}"""
        ...


@runtime_checkable
class UserHistoryProvider(Protocol):
    def get_history(self, user_id: str) -> "UserHistory":
        ...


@runtime_checkable
class EventSink(Protocol):
    def publish(self, event: "RiskUpdateEvent") -> None:
        """Fire-and-forget; exceptions are logged by the caller, never propagated."""
        ...
