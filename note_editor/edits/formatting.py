from __future__ import annotations
from typing import Optional
import logging

from note_editor.cancellation import CancellationToken
from note_editor.edits.base import ModelClient, OperationResult, run_llm_edit
from note_editor.errors import MarkdownValidationError
from note_editor.lint import attempt_markdown_fix, lint_markdown
from note_editor.llm.prompts import FORMAT_MARKDOWN_TEMPLATE
from note_editor.rules.load_rules import get_operation_settings

logger = logging.getLogger(__name__)


def _check_markdown(text: str) -> str:
    fixed = attempt_markdown_fix(text)
    findings = lint_markdown(fixed)
    if not findings:
        return fixed

    summary = "; ".join(f"line {f.line}: {f.message}" for f in findings)
    if get_operation_settings("formatMarkdown").strict_markdown:
        raise MarkdownValidationError(summary)
    logger.warning(f"Formatted markdown has {len(findings)} lint issue(s): {summary}")
    return fixed


def format_markdown(
    content: str,
    client: ModelClient,
    cancel_token: Optional[CancellationToken] = None,
) -> OperationResult:
    """Add headings, list syntax, code fences and spacing without rewording."""
    return run_llm_edit(
        "formatMarkdown",
        FORMAT_MARKDOWN_TEMPLATE,
        content,
        client,
        cancel_token,
        postprocess=_check_markdown,
    )
