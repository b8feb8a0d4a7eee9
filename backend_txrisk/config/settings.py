"""
Engine settings.

Typed, immutable view over the environment (see config.env) used to build
the engine and its collaborators. Thresholds of the scoring rules are not
settings; they live as constants beside the rules that use them.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from backend_txrisk.config import env

DEFAULT_MODEL_TIMEOUT_SEC = 5.0
DEFAULT_GRAPH_TIMEOUT_SEC = 2.0
DEFAULT_DEADLINE_SEC = 10.0
DEFAULT_NOTIFY_THRESHOLD = 25


@dataclass(frozen=True)
class EngineSettings:
    """Configuration for one RiskEngine instance."""

    ollama_endpoint: str = ""
    """Base URL of the text-generation service; empty disables the model path."""
    ollama_model: str = env.DEFAULT_OLLAMA_MODEL
    hugging_face_api_key: str = ""
    """Credential for risk classification; empty short-circuits to rules."""
    hf_risk_model_url: str = env.DEFAULT_HF_RISK_MODEL_URL
    model_timeout_sec: float = DEFAULT_MODEL_TIMEOUT_SEC
    graph_timeout_sec: float = DEFAULT_GRAPH_TIMEOUT_SEC
    deadline_sec: float = DEFAULT_DEADLINE_SEC
    """Default end-to-end budget when the caller passes no deadline."""
    notify_threshold: int = DEFAULT_NOTIFY_THRESHOLD
    mixer_addresses_path: Path | None = None
    exchange_addresses_path: Path | None = None
    high_risk_addresses_path: Path | None = None

    @property
    def behavior_model_enabled(self) -> bool:
        return bool(self.ollama_endpoint)

    @property
    def risk_model_enabled(self) -> bool:
        return bool(self.hugging_face_api_key)


def get_settings() -> EngineSettings:
    """
    Return settings read from the environment (and .env when present).

    Returns:
        EngineSettings with endpoints, credentials, timeouts and data paths.
    """
    return EngineSettings(
        ollama_endpoint=env.get_str("OLLAMA_ENDPOINT"),
        ollama_model=env.get_str("OLLAMA_MODEL", env.DEFAULT_OLLAMA_MODEL),
        hugging_face_api_key=env.get_str("HUGGING_FACE_API_KEY"),
        hf_risk_model_url=env.get_str("HF_RISK_MODEL_URL", env.DEFAULT_HF_RISK_MODEL_URL),
        model_timeout_sec=env.get_float("TXRISK_MODEL_TIMEOUT_SEC", DEFAULT_MODEL_TIMEOUT_SEC),
        graph_timeout_sec=env.get_float("TXRISK_GRAPH_TIMEOUT_SEC", DEFAULT_GRAPH_TIMEOUT_SEC),
        deadline_sec=env.get_float("TXRISK_DEADLINE_SEC", DEFAULT_DEADLINE_SEC),
        notify_threshold=env.get_int("TXRISK_NOTIFY_THRESHOLD", DEFAULT_NOTIFY_THRESHOLD),
        mixer_addresses_path=env.get_path("MIXER_ADDRESSES_PATH"),
        exchange_addresses_path=env.get_path("EXCHANGE_ADDRESSES_PATH"),
        high_risk_addresses_path=env.get_path("HIGH_RISK_ADDRESSES_PATH"),
    )
