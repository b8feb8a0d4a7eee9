"""
Hugging Face inference client (risk indicator model path).

Sends categorized features as a text input with bearer credentials. Without
an API key the client reports is_configured=False and the engine never
calls it.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from backend_txrisk.core.exceptions import ExternalServiceError
from backend_txrisk.txrisk_logging import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "huggingface"
MAX_LENGTH = 100


class HuggingFaceRiskClassifier:
    """RiskClassificationService over the Hugging Face inference API."""

    def __init__(
        self,
        api_key: str,
        model_url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._url = model_url
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def classify(self, features: dict[str, Any], timeout: float) -> Any:
        if not self.is_configured:
            raise ExternalServiceError(SERVICE_NAME, "no API key configured")
        body = {
            "inputs": f"Analyze transaction risk: {json.dumps(features, sort_keys=True)}",
            "parameters": {"max_length": MAX_LENGTH},
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                resp = await client.post(self._url, json=body, headers=headers)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            raise ExternalServiceError(SERVICE_NAME, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, f"invalid JSON body: {e}") from e
        logger.debug("huggingface_classify_ok", url=self._url)
        return data
