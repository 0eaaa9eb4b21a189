from __future__ import annotations

import logging
from typing import Any, Optional

import openai

from ..exceptions import HttpStatusError, MalformedResponseError, TransportError
from .base import BaseBackend

logger = logging.getLogger(__name__)


class OpenAIBackend(BaseBackend):
    """Backend for OpenAI chat completions.

    The SDK client sends the bearer-authenticated POST; SDK-level retries are
    disabled so that a failure surfaces after exactly one attempt.
    """

    name = "openai"

    def __init__(
        self,
        model: str,
        api_key: str,
        endpoint: str = "https://api.openai.com/v1",
        timeout: Optional[float] = None,
        client: Any = None,
    ) -> None:
        super().__init__(model, timeout)
        self.endpoint = endpoint
        if client is None:
            client = openai.OpenAI(
                base_url=endpoint,
                api_key=api_key,
                timeout=timeout,
                max_retries=0,
            )
        self._client = client

    def build_messages(self, prompt: str) -> list[dict[str, str]]:
        return [{"role": "user", "content": prompt}]

    def generate(self, prompt: str) -> str:
        logger.debug("openai request model=%s prompt_len=%d", self.model, len(prompt))
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(prompt),
            )
        except openai.APIStatusError as e:
            body = getattr(getattr(e, "response", None), "text", "") or str(e)
            raise HttpStatusError(e.status_code, body, provider=self.name) from e
        except openai.APIConnectionError as e:
            raise TransportError(f"connection error: {e}", provider=self.name) from e
        except openai.APIError as e:
            # Remaining SDK errors are undecodable or invalid bodies.
            raise TransportError(f"invalid response: {e}", provider=self.name) from e

        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            raise MalformedResponseError(
                "response has no choices[0].message.content", provider=self.name
            ) from None
        return self._require_text(content, "choices[0].message.content")
