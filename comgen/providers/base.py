from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..exceptions import MalformedResponseError

logger = logging.getLogger(__name__)


def request_timeout_from_env() -> Optional[float]:
    """Per-request timeout in seconds, or None to wait indefinitely."""
    raw = os.environ.get("COMGEN_LLM_REQUEST_TIMEOUT")
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid COMGEN_LLM_REQUEST_TIMEOUT=%r", raw)
        return None
    return value if value > 0 else None


class BaseBackend(ABC):
    """Abstract base for a text-generation backend.

    Each backend encapsulates one provider's wire encoding and auth. The
    contract is identical across providers: ``generate`` returns the
    generated text or raises one of the BackendError subclasses
    (TransportError, HttpStatusError, MalformedResponseError). Retrying is
    never the backend's job.
    """

    name = "base"

    def __init__(self, model: str, timeout: Optional[float] = None) -> None:
        self.model = model
        self.timeout = timeout

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Send ``prompt`` and return the generated text."""
        raise NotImplementedError

    def _require_text(self, value: Any, field_name: str) -> str:
        if not isinstance(value, str):
            raise MalformedResponseError(
                f"response field '{field_name}' missing or not a string",
                provider=self.name,
            )
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"
