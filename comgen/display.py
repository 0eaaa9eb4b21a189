"""Terminal output, spinner and operator prompts."""

from __future__ import annotations

import sys
from typing import Callable, Iterable, Optional, TextIO

from rich.console import Console
from rich.status import Status

from .audit import AuditOutcome, filter_findings
from .exceptions import OperatorAbort
from .git import ChangeEntry, ChangeStatus

RESET = "\033[0m"
BOLD = "\033[1m"
CYAN = "\033[96m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"

SEVERITY_COLORS = {
    "CRITICAL": "\033[31m",
    "HIGH": "\033[33m",
    "MEDIUM": "\033[32m",
    "LOW": "\033[36m",
}

BOX_WIDTH = 50


def truncate(text: str, max_width: int) -> str:
    """Shorten ``text`` to ``max_width`` characters, ending in '...'."""
    if len(text) <= max_width:
        return text
    return text[: max(max_width - 3, 0)] + "..."


class Spinner:
    """Progress spinner shown while a blocking call runs."""

    def __init__(self, console: Optional[Console] = None, enabled: bool = True) -> None:
        self.console = console or Console(stderr=True)
        self.enabled = enabled
        self._status: Optional[Status] = None

    def start(self, message: str) -> None:
        self.finish()
        if not self.enabled:
            return
        self._status = self.console.status(message, spinner="dots")
        self._status.start()

    def update(self, message: str) -> None:
        if self._status is not None:
            self._status.update(message)

    def finish(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def finish_with_message(self, message: str) -> None:
        self.finish()
        print(message)


class Display:
    """Renders boxes and reads operator answers.

    ``input_fn`` is the line reader used for both prompts so tests can
    script the operator.
    """

    def __init__(
        self,
        spinner: Optional[Spinner] = None,
        input_fn: Callable[[str], str] = input,
        out: Optional[TextIO] = None,
        audit_level: str = "LOW",
    ) -> None:
        self.spinner = spinner or Spinner()
        self.input_fn = input_fn
        self.out = out
        self.audit_level = audit_level

    def _print(self, text: str = "") -> None:
        print(text, file=self.out or sys.stdout)

    def _ask(self, prompt: str) -> str:
        self.spinner.finish()
        try:
            return self.input_fn(prompt)
        except EOFError:
            # Closed stdin reads as an empty answer, i.e. the default.
            return ""
        except KeyboardInterrupt as exc:
            raise OperatorAbort("interrupted at prompt") from exc

    # ------------------------------------------------------------------
    # Boxes
    # ------------------------------------------------------------------
    def display_files(self, entries: Iterable[ChangeEntry]) -> None:
        entries = list(entries)
        if not entries:
            self._print("> No modified files")
            return
        self._print(f"╭─ Modified Files {'─' * (BOX_WIDTH - 16)}╮")
        for entry in entries:
            if entry.status is ChangeStatus.MODIFIED:
                marker = f"{YELLOW}●{RESET}"
            else:
                marker = f"{RED}✗{RESET}"
            name = truncate(entry.path, BOX_WIDTH - 4)
            self._print(f"│ {marker} {name:<{BOX_WIDTH - 4}} │")
        self._print(f"╰{'─' * BOX_WIDTH}╯")

    def show_commit_preview(self, file_path: str, message: str) -> None:
        self._print(f"\n╭─ Commit Message Preview {'─' * (BOX_WIDTH - 23)}╮")
        self._print(f"│ File: {file_path}")
        self._print(f"│ Message: {message}")
        self._print(f"╰{'─' * BOX_WIDTH}╯")

    def show_audit_results(self, file_path: str, outcome: AuditOutcome) -> None:
        self.spinner.finish()
        self._print(f"\n╭─ Code Audit Results {'─' * (BOX_WIDTH - 20)}╮")
        for finding in filter_findings(outcome, self.audit_level):
            color = SEVERITY_COLORS.get(finding.severity, "")
            self._print(f"│ {color}[{finding.severity}]{RESET} {finding.title}")
            self._print(f"│ Impact: {finding.impact}")
            self._print(f"│ Suggestion: {finding.suggestion}")
            self._print(f"│ Context: {finding.context}")
            self._print(f"│ File: {file_path}")
            self._print(f"├{'─' * (BOX_WIDTH - 2)}┤")
        if outcome.has_critical:
            self._print(f"│ {RED}{BOLD}Critical issues found - review before committing{RESET}")
        self._print(f"│ Summary: {outcome.summary}")
        self._print(f"╰{'─' * BOX_WIDTH}╯")

    def show_error(self, message: str) -> None:
        self.spinner.finish()
        self._print(f"{RED}✗ {message}{RESET}")

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------
    def prompt_commit_message(self, file_path: str, message: str) -> bool:
        """Show a draft and ask for approval. Only 'n' rejects."""
        self.spinner.finish()
        self.show_commit_preview(file_path, message)
        answer = self._ask("Accept this commit message? [Y/n]: ")
        return answer.strip().lower() != "n"

    def prompt_continue_without_audit(self) -> bool:
        """Ask whether to proceed after a failed audit. Only 'y' continues."""
        answer = self._ask("Audit failed. Continue anyway? [y/N]: ")
        return answer.strip().lower() == "y"
