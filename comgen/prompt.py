"""Prompt construction for commit messages and audits."""

from __future__ import annotations

from .config import PromptTemplate

DIFF_PLACEHOLDER = "{{git_diff}}"


def _substitute_diff(template: str, diff_text: str) -> str:
    # Single left-to-right pass: placeholder text inside the diff itself is
    # never substituted again.
    return template.replace(DIFF_PLACEHOLDER, diff_text)


def build_prompt(diff_text: str, template: PromptTemplate, base_prompt: str) -> str:
    """Combine a diff, the commit rules and the base prompt into one prompt."""
    return (
        _substitute_diff(base_prompt, diff_text)
        + "\n\nAllowed commit types:\n- "
        + "\n- ".join(template.allowed_categories)
        + "\n\nOutput format requirements:"
        + "\n- Follow this template: "
        + template.body_template
        + "\n- Maximum length: "
        + str(template.max_length)
        + " characters"
        + "\n\nExample commits:\n- "
        + "\n- ".join(template.examples)
    )


def build_audit_prompt(diff_text: str, audit_template: str) -> str:
    return _substitute_diff(audit_template, diff_text)
