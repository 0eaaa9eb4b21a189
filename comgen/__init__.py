"""comgen - AI-drafted, operator-approved per-file Git commits."""

from importlib import import_module
from typing import TYPE_CHECKING

__version__ = "0.1.0"

# Public API (lazy-exported to avoid import-time side effects)
__all__ = [
    # Config
    "Config", "PromptTemplate", "load_config",
    # Backends
    "BaseBackend", "create_backend",
    # Git
    "GitRepo", "ChangeEntry", "ChangeStatus",
    # Workflow
    "FileWorkflow", "WorkflowOptions", "ReviewLoop", "AuditGate", "CommitExecutor",
    # Exceptions
    "ComgenError", "RepositoryError", "BackendError", "AuditParseError",
    "OperatorAbort", "WorkflowError", "ConfigError",
]

_EXPORTS = {
    "Config": "comgen.config",
    "PromptTemplate": "comgen.config",
    "load_config": "comgen.config",
    "BaseBackend": "comgen.providers",
    "create_backend": "comgen.providers",
    "GitRepo": "comgen.git",
    "ChangeEntry": "comgen.git",
    "ChangeStatus": "comgen.git",
    "FileWorkflow": "comgen.core",
    "WorkflowOptions": "comgen.core",
    "ReviewLoop": "comgen.review",
    "AuditGate": "comgen.audit",
    "CommitExecutor": "comgen.commit",
    "ComgenError": "comgen.exceptions",
    "RepositoryError": "comgen.exceptions",
    "BackendError": "comgen.exceptions",
    "AuditParseError": "comgen.exceptions",
    "OperatorAbort": "comgen.exceptions",
    "WorkflowError": "comgen.exceptions",
    "ConfigError": "comgen.exceptions",
}


def __getattr__(name: str):
    """Lazy attribute loader so ``import comgen`` stays cheap.

    Backends pull in the OpenAI SDK and httpx; they are only imported when
    one of their names is accessed.
    """
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module 'comgen' has no attribute {name!r}")
    value = getattr(import_module(module_name), name)
    globals()[name] = value
    return value


if TYPE_CHECKING:  # pragma: no cover
    from .audit import AuditGate
    from .commit import CommitExecutor
    from .config import Config, PromptTemplate, load_config
    from .core import FileWorkflow, WorkflowOptions
    from .exceptions import (
        AuditParseError,
        BackendError,
        ComgenError,
        ConfigError,
        OperatorAbort,
        RepositoryError,
        WorkflowError,
    )
    from .git import ChangeEntry, ChangeStatus, GitRepo
    from .providers import BaseBackend, create_backend
    from .review import ReviewLoop
