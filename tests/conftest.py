import subprocess
from collections.abc import Generator
from pathlib import Path
from typing import Optional

import pytest

from comgen.display import Display, Spinner
from comgen.exceptions import RepositoryError
from comgen.git import ChangeEntry, ChangeStatus
from comgen.providers.base import BaseBackend


@pytest.fixture(autouse=True)
def isolate_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    for name in (
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "COMGEN_PROVIDER",
        "COMGEN_MODEL",
        "COMGEN_LLM_REQUEST_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("COMGEN_HOME", str(tmp_path / ".comgen-home"))
    yield


# Ensure no real HTTP escapes during tests that don't stub the endpoint.
@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    import httpx

    def fake_post(url, *args, **kwargs):  # noqa: D401
        raise httpx.ConnectError(f"network disabled in tests: {url}")

    monkeypatch.setattr(httpx, "post", fake_post)


class FakeBackend(BaseBackend):
    """Backend returning scripted replies; exceptions in the script are raised."""

    name = "fake"

    def __init__(self, replies=None) -> None:
        super().__init__("fake-model")
        self.replies = list(replies or [])
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError("FakeBackend ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class ScriptedInput:
    """Stand-in for ``input`` that answers from a list."""

    def __init__(self, answers=None) -> None:
        self.answers = list(answers or [])
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise AssertionError(f"unexpected prompt: {prompt!r}")
        return self.answers.pop(0)


class FakeGitRepo:
    """In-memory GitRepo double recording every call in order."""

    def __init__(self, entries=None, diffs=None, fail: Optional[str] = None) -> None:
        self.entries = list(entries or [])
        self.diffs = dict(diffs or {})
        self.fail = fail
        self.calls: list[tuple] = []

    def _maybe_fail(self, name: str) -> None:
        if self.fail == name:
            raise RepositoryError(name, f"{name} exploded")

    def list_changes(self):
        self.calls.append(("list_changes",))
        self._maybe_fail("list_changes")
        return list(self.entries)

    def diff(self, path=None):
        self.calls.append(("diff", path))
        self._maybe_fail("diff")
        return self.diffs.get(path, f"diff --git a/{path} b/{path}\n+change\n")

    def stage_file(self, path):
        self.calls.append(("stage", path))
        self._maybe_fail("stage")

    def commit(self, message):
        self.calls.append(("commit", message))
        self._maybe_fail("commit")

    def push(self):
        self.calls.append(("push",))
        self._maybe_fail("push")
        return ""

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


def modified(path: str) -> ChangeEntry:
    return ChangeEntry(path, ChangeStatus.MODIFIED)


def deleted(path: str) -> ChangeEntry:
    return ChangeEntry(path, ChangeStatus.DELETED)


@pytest.fixture
def scripted_display():
    def _make(answers=None, audit_level: str = "LOW"):
        reader = ScriptedInput(answers)
        display = Display(
            spinner=Spinner(enabled=False), input_fn=reader, audit_level=audit_level
        )
        return display, reader

    return _make


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=repo, capture_output=True, text=True, check=True
    )
    return result.stdout


@pytest.fixture
def git_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """A real repository with ``a.txt``, ``b.txt`` and ``c.txt`` committed."""
    for var, value in (
        ("GIT_AUTHOR_NAME", "Test"),
        ("GIT_AUTHOR_EMAIL", "test@example.com"),
        ("GIT_COMMITTER_NAME", "Test"),
        ("GIT_COMMITTER_EMAIL", "test@example.com"),
    ):
        monkeypatch.setenv(var, value)
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "config", "commit.gpgsign", "false")
    for name in ("a.txt", "b.txt", "c.txt"):
        (repo / name).write_text(f"{name} original\n")
    _git(repo, "add", ".")
    _git(repo, "commit", "-q", "-m", "chore: init")
    return repo


@pytest.fixture
def run_git():
    return _git
