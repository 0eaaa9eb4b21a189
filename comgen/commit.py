"""Staging, committing and pushing an approved change."""

from __future__ import annotations

import logging
from typing import Optional

from .exceptions import RepositoryError
from .git import GitRepo

logger = logging.getLogger(__name__)


class CommitExecutor:
    """Records one file under an approved message.

    Tracks the last successfully staged path so that a commit can never
    happen without a successful stage, and a push never happens without a
    successful commit.
    """

    def __init__(self, git_repo: GitRepo) -> None:
        self.git_repo = git_repo
        self._staged: Optional[str] = None
        self._committed = False

    def stage(self, file_path: str) -> None:
        self._staged = None
        self._committed = False
        self.git_repo.stage_file(file_path)
        self._staged = file_path
        logger.debug("staged %s", file_path)

    def commit(self, message: str, file_path: Optional[str] = None) -> None:
        if self._staged is None or (file_path is not None and file_path != self._staged):
            raise RepositoryError(
                "commit", f"refusing to commit: {file_path or 'file'} was not staged"
            )
        self.git_repo.commit(message)
        logger.info("committed %s", self._staged)
        self._staged = None
        self._committed = True

    def push(self) -> None:
        if not self._committed:
            raise RepositoryError("push", "refusing to push: nothing was committed")
        self.git_repo.push()
        logger.info("pushed")
        self._committed = False
