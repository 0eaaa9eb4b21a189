"""Exception hierarchy for comgen."""

from __future__ import annotations

from typing import Optional


class ComgenError(Exception):
    """Base class for every error comgen raises on purpose."""


class ConfigError(ComgenError):
    """Configuration could not be read, parsed or validated."""


class RepositoryError(ComgenError):
    """A git invocation failed or produced undecodable output."""

    def __init__(self, command: str, stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"Git command failed: git {command}{detail}")


class BackendError(ComgenError):
    """The language-model backend could not produce text."""

    def __init__(self, message: str, provider: str = "") -> None:
        self.provider = provider
        prefix = f"{provider}: " if provider else ""
        super().__init__(prefix + message)


class TransportError(BackendError):
    """Connection, timeout or undecodable body."""


class HttpStatusError(BackendError):
    """Backend answered with a non-successful HTTP status."""

    def __init__(self, status_code: int, body: str = "", provider: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {body or '<no body>'}", provider)


class MalformedResponseError(BackendError):
    """Backend answered but the expected text field was missing."""


class AuditParseError(ComgenError):
    """Audit response was not a JSON list of findings."""


class OperatorAbort(ComgenError):
    """Operator declined to continue."""


class WorkflowError(ComgenError):
    """Fatal failure while processing one file.

    Carries the underlying error plus the file and stage so the CLI can
    render a single terminal message.
    """

    def __init__(
        self,
        cause: ComgenError,
        stage: str,
        file_path: Optional[str] = None,
    ) -> None:
        self.cause = cause
        self.stage = stage
        self.file_path = file_path
        where = f" for {file_path}" if file_path else ""
        super().__init__(f"{stage} failed{where}: {cause}")

    @property
    def kind(self) -> str:
        """Name of the underlying error class."""
        return type(self.cause).__name__
