"""
Application-level exceptions.

Raised by service clients and response parsers; analyzers catch them and
take their deterministic fallback. None of these reach the caller of the
assessment pipeline.
"""

from __future__ import annotations


class TxRiskError(Exception):
    """Base class for engine errors."""


class ExternalServiceError(TxRiskError):
    """An external collaborator (model, graph, sink) failed or returned an error status."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service


class ModelResponseParseError(TxRiskError):
    """A model response did not match the expected format."""
