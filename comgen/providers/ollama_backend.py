from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..exceptions import HttpStatusError, TransportError
from .base import BaseBackend

logger = logging.getLogger(__name__)


class OllamaBackend(BaseBackend):
    """Backend for a local Ollama server. No authentication."""

    name = "ollama"

    def __init__(
        self,
        model: str,
        base_url: str = "http://localhost:11434",
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(model, timeout)
        self.base_url = base_url

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {"model": self.model, "prompt": prompt, "stream": False}

    def generate(self, prompt: str) -> str:
        url = f"{self.base_url.rstrip('/')}/api/generate"
        logger.debug("ollama request url=%s prompt_len=%d", url, len(prompt))
        try:
            response = httpx.post(
                url, json=self.build_payload(prompt), timeout=self.timeout
            )
        except httpx.HTTPError as e:
            raise TransportError(
                f"network error calling {url}: {e}", provider=self.name
            ) from e
        status = int(getattr(response, "status_code", 200))
        if not 200 <= status < 300:
            raise HttpStatusError(
                status, getattr(response, "text", ""), provider=self.name
            )
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"response body is not JSON: {e}", provider=self.name
            ) from e
        text = data.get("response") if isinstance(data, dict) else None
        return self._require_text(text, "response")
