"""
Ollama text-generation client (behavior analysis model path).

POST {endpoint}/api/generate with stream disabled; returns the "response"
text. Transport errors, error statuses and malformed bodies raise
ExternalServiceError so the caller can fall back to rules.
"""

from __future__ import annotations

from typing import Any

import httpx

from backend_txrisk.core.exceptions import ExternalServiceError
from backend_txrisk.txrisk_logging import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "ollama"
GENERATE_PATH = "/api/generate"
DEFAULT_OPTIONS: dict[str, Any] = {"temperature": 0.1, "top_p": 0.9, "num_predict": 200}


class OllamaTextGenerator:
    """TextGenerationService backed by a local or remote Ollama server."""

    def __init__(
        self,
        endpoint: str,
        model: str = "llama2",
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = endpoint.rstrip("/") + GENERATE_PATH
        self._model = model
        self._transport = transport

    async def generate(self, prompt: str, timeout: float) -> str:
        body = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": DEFAULT_OPTIONS,
        }
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                resp = await client.post(self._url, json=body)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            raise ExternalServiceError(SERVICE_NAME, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, f"invalid JSON body: {e}") from e
        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise ExternalServiceError(SERVICE_NAME, "response field missing")
        logger.debug("ollama_generate_ok", model=self._model, chars=len(text))
        return text
