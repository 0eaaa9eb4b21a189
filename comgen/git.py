"""Git operations for comgen."""

from __future__ import annotations

import enum
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .exceptions import RepositoryError

logger = logging.getLogger(__name__)


def find_git_repo_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Return the top-level Git repository directory for ``start_path``.

    Attempts ``git rev-parse --show-toplevel`` first so worktrees and
    submodules are handled correctly. Falls back to walking parent
    directories looking for a ``.git`` directory or file. Returns ``None``
    when no Git repository can be found starting from ``start_path``.
    """

    path = Path(start_path or Path.cwd()).expanduser().resolve(strict=False)
    if path.is_file():
        path = path.parent

    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=path,
            capture_output=True,
            text=True,
            check=True,
        )
        top = result.stdout.strip()
        if top:
            return Path(top)
    except (subprocess.CalledProcessError, FileNotFoundError):
        pass

    for candidate in (path, *path.parents):
        if (candidate / ".git").exists():
            return candidate

    return None


class ChangeStatus(str, enum.Enum):
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True)
class ChangeEntry:
    """A path with pending changes relative to HEAD."""

    path: str
    status: ChangeStatus

    @property
    def is_deleted(self) -> bool:
        return self.status is ChangeStatus.DELETED


class GitRepo:
    """Handles Git repository operations."""

    def __init__(self, repo_path: Optional[str] = None) -> None:
        self.repo_path = Path(repo_path or ".")

    def _run_git_command(self, args: list[str]) -> str:
        """Run a Git command and return its stdout.

        A non-zero exit status, a missing ``git`` binary and output that is
        not valid UTF-8 all raise RepositoryError.
        """
        cmd = " ".join(args)
        logger.debug("git %s", cmd)
        try:
            result = subprocess.run(
                ["git"] + args,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="strict",
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise RepositoryError(cmd, e.stderr or "") from e
        except UnicodeDecodeError as e:
            raise RepositoryError(cmd, f"invalid UTF-8 output: {e}") from e
        except FileNotFoundError as exc:
            raise RepositoryError(
                cmd, "Git command not found. Please install Git."
            ) from exc
        return result.stdout

    def _list_paths(self, flag: str) -> list[str]:
        output = self._run_git_command(["ls-files", flag])
        return [line for line in output.splitlines() if line]

    def list_changes(self) -> list[ChangeEntry]:
        """Return pending changes, deleted paths first.

        A path reported by both listings is emitted once, as deleted, so
        that no diff is attempted for a file that no longer exists.
        """
        deleted = self._list_paths("--deleted")
        modified = self._list_paths("--modified")

        entries: list[ChangeEntry] = []
        seen: set[str] = set()
        for path in deleted:
            if path in seen:
                continue
            seen.add(path)
            entries.append(ChangeEntry(path, ChangeStatus.DELETED))
        for path in modified:
            if path in seen:
                continue
            seen.add(path)
            entries.append(ChangeEntry(path, ChangeStatus.MODIFIED))
        return entries

    def diff(self, path: Optional[str] = None) -> str:
        """Diff the working tree against the index.

        Args:
            path: Limit the diff to one file. ``None`` diffs the whole tree.
        """
        args = ["diff"]
        if path is not None:
            args += ["--", path]
        return self._run_git_command(args)

    def stage_file(self, file_path: str) -> None:
        """Stage a specific file for commit."""
        self._run_git_command(["add", "--", file_path])

    def commit(self, message: str) -> None:
        """Create a commit with the given message."""
        self._run_git_command(["commit", "-q", "-m", message])

    def push(self) -> str:
        """Push the current branch to its upstream."""
        return self._run_git_command(["push", "-q"])
