"""
Environment variable loading and validation for TxRisk.

- OLLAMA_ENDPOINT: text-generation service for behavior analysis (unset: rules only)
- OLLAMA_MODEL: model name sent to Ollama (default: llama2)
- HUGGING_FACE_API_KEY: credential for the risk classification service (unset: rules only)
- HF_RISK_MODEL_URL: inference endpoint for risk classification
- TXRISK_MODEL_TIMEOUT_SEC / TXRISK_GRAPH_TIMEOUT_SEC / TXRISK_DEADLINE_SEC: time budgets
- TXRISK_NOTIFY_THRESHOLD: score above which a risk update event is published
- MIXER_ADDRESSES_PATH / EXCHANGE_ADDRESSES_PATH / HIGH_RISK_ADDRESSES_PATH: JSON data files
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from backend_txrisk.txrisk_logging import get_logger

logger = get_logger(__name__)

# Project root: config is backend_txrisk/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_OLLAMA_MODEL = "llama2"
DEFAULT_HF_RISK_MODEL_URL = "https://api-inference.huggingface.co/models/microsoft/DialoGPT-medium"


def load_txrisk_env() -> None:
    """Load .env from project root. Safe to call multiple times; existing env wins."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def get_str(name: str, default: str = "") -> str:
    """Return a stripped string env var, or default when unset/blank."""
    load_txrisk_env()
    raw = (os.getenv(name) or "").strip()
    return raw or default


def get_float(name: str, default: float) -> float:
    """Return a float env var; unparseable or negative values fall back to default."""
    raw = get_str(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("config_invalid_float", name=name, value=raw, default=default)
        return default
    if value < 0:
        logger.warning("config_negative_value", name=name, value=raw, default=default)
        return default
    return value


def get_int(name: str, default: int) -> int:
    """Return an int env var; unparseable values fall back to default."""
    raw = get_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("config_invalid_int", name=name, value=raw, default=default)
        return default


def get_path(name: str) -> Path | None:
    """Return a Path from env, or None when unset."""
    raw = get_str(name)
    return Path(raw) if raw else None
