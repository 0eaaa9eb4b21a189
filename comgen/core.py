"""Core workflow logic for comgen."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TypeVar

from .audit import AuditGate, AuditOutcome
from .commit import CommitExecutor
from .config import Config, PromptTemplate
from .display import Display
from .exceptions import AuditParseError, BackendError, ComgenError, WorkflowError
from .git import ChangeEntry, GitRepo
from .prompt import build_prompt
from .providers.base import BaseBackend
from .review import ReviewLoop

T = TypeVar("T")


@dataclass
class WorkflowOptions:
    """Read-only settings consumed by the workflow."""

    base_prompt: str = ""
    template: PromptTemplate = field(default_factory=PromptTemplate)
    audit_enabled: bool = False
    audit_prompt: str = ""
    prefix: str = ""
    auto_push: bool = False
    force: bool = False

    @classmethod
    def from_config(
        cls,
        config: Config,
        prefix: str = "",
        auto_push: bool = False,
        audit: bool = True,
        force: bool = False,
    ) -> "WorkflowOptions":
        return cls(
            base_prompt=config.base_prompt,
            template=config.templates,
            audit_enabled=bool(audit and config.audit.enabled),
            audit_prompt=config.audit.prompt,
            prefix=prefix,
            auto_push=auto_push,
            force=force,
        )


@dataclass
class WorkflowResult:
    committed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    pushed: bool = False

    @property
    def summary(self) -> str:
        if not self.committed and not self.skipped:
            return "No modified files"
        parts = [f"Committed {len(self.committed)} file(s)"]
        if self.skipped:
            parts.append(f"skipped {len(self.skipped)} deleted file(s)")
        if self.pushed:
            parts.append("pushed")
        return ", ".join(parts)


class FileWorkflow:
    """Per-file commit workflow with LLM-drafted messages.

    Files are processed strictly one at a time. The first failure stops
    the run and is raised as WorkflowError naming the file and stage.
    """

    def __init__(
        self,
        git_repo: GitRepo,
        backend: BaseBackend,
        display: Display,
        options: WorkflowOptions,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.git_repo = git_repo
        self.backend = backend
        self.display = display
        self.options = options
        self.logger = logger or logging.getLogger(__name__)
        self.executor = CommitExecutor(git_repo)

    def _step(
        self, stage: str, file_path: Optional[str], fn: Callable[[], T]
    ) -> T:
        try:
            return fn()
        except WorkflowError:
            raise
        except ComgenError as exc:
            self.logger.error("%s failed for %s: %s", stage, file_path or "-", exc)
            self.display.spinner.finish_with_message(
                f"✗ Error during {stage}" + (f" for {file_path}" if file_path else "")
            )
            raise WorkflowError(exc, stage, file_path) from exc

    def list_changes(self) -> List[ChangeEntry]:
        self.display.spinner.start("Analyzing repository...")
        entries = self._step("inspect", None, self.git_repo.list_changes)
        self.display.spinner.finish()
        self.logger.info("found %d changed file(s)", len(entries))
        return entries

    def run(self, entries: Optional[List[ChangeEntry]] = None) -> WorkflowResult:
        """Process every change in listing order."""
        if entries is None:
            entries = self.list_changes()
        result = WorkflowResult()
        for entry in entries:
            if entry.is_deleted:
                self.logger.info("skipping deleted file %s", entry.path)
                self.display.spinner.finish_with_message(
                    f"✗ File {entry.path} has been deleted"
                )
                result.skipped.append(entry.path)
                continue
            pushed = self.process_file(entry.path)
            result.committed.append(entry.path)
            result.pushed = result.pushed or pushed
        return result

    def process_file(self, file_path: str) -> bool:
        """Diff, audit, draft, review and commit one file.

        Returns True when the commit was pushed.
        """
        self.logger.info("processing %s", file_path)
        diff_text = self._step("diff", file_path, lambda: self.git_repo.diff(file_path))
        prompt = build_prompt(diff_text, self.options.template, self.options.base_prompt)

        if self.options.audit_enabled:
            self._run_audit(file_path, diff_text)

        review = ReviewLoop(
            self.backend,
            approver=self.display.prompt_commit_message,
            prefix=self.options.prefix,
            auto_approve=self.options.force,
            on_generate=self.display.spinner.start,
        )
        draft = self._step("generate", file_path, lambda: review.run(file_path, prompt))
        self.display.spinner.finish()

        self.display.spinner.start(f"Committing {file_path}")
        self._step("stage", file_path, lambda: self.executor.stage(file_path))
        self._step(
            "commit", file_path, lambda: self.executor.commit(draft.text, file_path)
        )
        if self.options.auto_push:
            self._step("push", file_path, self.executor.push)
            self.display.spinner.finish_with_message(f"✓ Pushed {file_path}")
            return True
        self.display.spinner.finish_with_message(f"✓ Committed {file_path}")
        return False

    def _run_audit(self, file_path: str, diff_text: str) -> Optional[AuditOutcome]:
        gate = AuditGate(self.backend, self.options.audit_prompt)
        self.display.spinner.start("Performing code audit...")
        try:
            outcome = gate.audit(diff_text)
        except AuditParseError as exc:
            self.logger.error("audit response unusable for %s: %s", file_path, exc)
            self.display.spinner.finish_with_message(
                f"✗ Error during audit for {file_path}"
            )
            raise WorkflowError(exc, "audit", file_path) from exc
        except BackendError as exc:
            self.logger.warning("audit failed for %s: %s", file_path, exc)
            self.display.spinner.finish_with_message("✗ Error during audit")
            proceed = self._step(
                "audit", file_path, self.display.prompt_continue_without_audit
            )
            if proceed:
                self.logger.info("continuing %s without audit results", file_path)
                return None
            self.logger.info("operator declined to continue after audit failure")
            raise WorkflowError(exc, "audit", file_path) from exc
        self.display.show_audit_results(file_path, outcome)
        return outcome
