"""Pre-commit security audit of a diff."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List

from .exceptions import AuditParseError
from .prompt import build_audit_prompt
from .providers.base import BaseBackend

SEVERITY_LEVELS = ("LOW", "MEDIUM", "HIGH", "CRITICAL")
FINDING_FIELDS = ("severity", "title", "impact", "context", "suggestion")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditFinding:
    severity: str
    title: str
    impact: str
    context: str
    suggestion: str


@dataclass
class AuditOutcome:
    """Findings parsed from one audit response."""

    findings: List[AuditFinding] = field(default_factory=list)
    summary: str = ""

    @property
    def has_critical(self) -> bool:
        return has_critical(self)


def has_critical(outcome: AuditOutcome) -> bool:
    """True iff any finding's severity is exactly ``"CRITICAL"``."""
    return any(f.severity == "CRITICAL" for f in outcome.findings)


def _strip_code_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "")


def _finding_from(item: Any, index: int) -> AuditFinding:
    if not isinstance(item, dict):
        raise AuditParseError(f"finding #{index} is not an object")
    values = {}
    for name in FINDING_FIELDS:
        value = item.get(name)
        if not isinstance(value, str):
            raise AuditParseError(
                f"finding #{index} field '{name}' missing or not a string"
            )
        values[name] = value
    return AuditFinding(**values)


def parse_audit_response(response: str) -> AuditOutcome:
    """Parse an audit response into an AuditOutcome.

    Code-fence markers are removed first; the rest must be a JSON list of
    objects carrying the five finding fields.
    """
    stripped = _strip_code_fences(response)
    try:
        raw = json.loads(stripped)
    except json.JSONDecodeError as exc:
        raise AuditParseError(f"audit response is not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise AuditParseError("audit response is not a list of findings")
    findings = [_finding_from(item, i) for i, item in enumerate(raw, 1)]
    return AuditOutcome(findings=findings, summary=f"Found {len(findings)} issues")


def filter_findings(outcome: AuditOutcome, minimum: str) -> List[AuditFinding]:
    """Findings at or above ``minimum``. Unrecognised severities always pass."""
    try:
        threshold = SEVERITY_LEVELS.index(minimum.upper())
    except ValueError:
        threshold = 0
    shown = []
    for finding in outcome.findings:
        if finding.severity not in SEVERITY_LEVELS:
            shown.append(finding)
        elif SEVERITY_LEVELS.index(finding.severity) >= threshold:
            shown.append(finding)
    return shown


class AuditGate:
    """Runs one audit request per diff."""

    def __init__(self, backend: BaseBackend, audit_template: str) -> None:
        self.backend = backend
        self.audit_template = audit_template

    def audit(self, diff_text: str) -> AuditOutcome:
        prompt = build_audit_prompt(diff_text, self.audit_template)
        response = self.backend.generate(prompt)
        outcome = parse_audit_response(response)
        logger.info(
            "audit complete: %s (critical=%s)", outcome.summary, outcome.has_critical
        )
        return outcome
