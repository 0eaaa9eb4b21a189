from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..exceptions import HttpStatusError, TransportError
from .base import BaseBackend

ANTHROPIC_VERSION = "2023-06-01"

logger = logging.getLogger(__name__)


class AnthropicBackend(BaseBackend):
    """Backend for Anthropic's text completion endpoint."""

    name = "anthropic"

    def __init__(
        self,
        model: str,
        api_key: str,
        endpoint: str = "https://api.anthropic.com",
        timeout: Optional[float] = None,
        max_tokens_to_sample: int = 1000,
        temperature: float = 0.7,
    ) -> None:
        super().__init__(model, timeout)
        self._api_key = api_key
        self.endpoint = endpoint
        self.max_tokens_to_sample = max_tokens_to_sample
        self.temperature = temperature

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "prompt": f"\n\nHuman: {prompt}\n\nAssistant:",
            "max_tokens_to_sample": self.max_tokens_to_sample,
            "temperature": self.temperature,
        }

    def generate(self, prompt: str) -> str:
        url = self.endpoint.rstrip("/") + "/v1/complete"
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        logger.debug("anthropic request model=%s prompt_len=%d", self.model, len(prompt))
        try:
            response = httpx.post(
                url,
                headers=headers,
                json=self.build_payload(prompt),
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise TransportError(
                f"network error during completion request: {e}", provider=self.name
            ) from e
        status = int(getattr(response, "status_code", 200))
        if status >= 400:
            raise HttpStatusError(
                status, getattr(response, "text", ""), provider=self.name
            )
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"response body is not JSON: {e}", provider=self.name
            ) from e
        completion = data.get("completion") if isinstance(data, dict) else None
        return self._require_text(completion, "completion")
