"""
Configuration management for the TxRisk engine.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for model endpoints, timeouts and
relationship-graph data paths.
"""

from backend_txrisk.config.settings import EngineSettings, get_settings  # noqa: F401

__all__ = ["EngineSettings", "get_settings"]
