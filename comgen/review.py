"""Interactive accept/regenerate loop for one file's commit message."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .providers.base import BaseBackend

logger = logging.getLogger(__name__)

# (file_path, draft_text) -> True when approved
Approver = Callable[[str, str], bool]


class ReviewState(enum.Enum):
    DRAFTING = "drafting"
    AWAITING_APPROVAL = "awaiting_approval"
    REGENERATING = "regenerating"
    APPROVED = "approved"


@dataclass
class DraftMessage:
    text: str
    approved: bool = False

    def replace(self, text: str) -> None:
        if self.approved:
            raise ValueError("approved draft cannot change")
        self.text = text

    def approve(self) -> None:
        self.approved = True


def apply_prefix(text: str, prefix: str) -> str:
    return f"[{prefix}] {text}" if prefix else text


class ReviewLoop:
    """Draft, present, and regenerate until the operator approves.

    Every regeneration sends the identical prompt. Backend errors propagate
    unchanged; the loop never retries on its own and never caps the number
    of regenerations.
    """

    def __init__(
        self,
        backend: BaseBackend,
        approver: Approver,
        prefix: str = "",
        auto_approve: bool = False,
        on_generate: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.backend = backend
        self.approver = approver
        self.prefix = prefix
        self.auto_approve = auto_approve
        self.on_generate = on_generate
        self.state = ReviewState.DRAFTING
        self.generations = 0

    def _generate(self, prompt: str, label: str) -> str:
        if self.on_generate is not None:
            self.on_generate(label)
        text = self.backend.generate(prompt)
        self.generations += 1
        logger.debug("%s produced %d chars", label, len(text))
        return apply_prefix(text, self.prefix)

    def run(self, file_path: str, prompt: str) -> DraftMessage:
        self.state = ReviewState.DRAFTING
        self.generations = 0
        draft = DraftMessage(self._generate(prompt, "Generating commit message..."))
        self.state = ReviewState.AWAITING_APPROVAL

        while self.state is not ReviewState.APPROVED:
            if self.state is ReviewState.AWAITING_APPROVAL:
                if self.auto_approve or self.approver(file_path, draft.text):
                    self.state = ReviewState.APPROVED
                else:
                    logger.info("draft rejected for %s", file_path)
                    self.state = ReviewState.REGENERATING
            elif self.state is ReviewState.REGENERATING:
                draft.replace(
                    self._generate(prompt, "Generating new commit message...")
                )
                self.state = ReviewState.AWAITING_APPROVAL

        draft.approve()
        logger.info(
            "message approved for %s after %d generation(s)",
            file_path,
            self.generations,
        )
        return draft
