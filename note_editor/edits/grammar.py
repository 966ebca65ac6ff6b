from __future__ import annotations
from typing import Optional

from note_editor.cancellation import CancellationToken
from note_editor.edits.base import ModelClient, OperationResult, run_llm_edit
from note_editor.llm.prompts import FIX_GRAMMAR_TEMPLATE


def fix_grammar(
    content: str,
    client: ModelClient,
    cancel_token: Optional[CancellationToken] = None,
) -> OperationResult:
    """Correct spelling, grammar and punctuation, keeping wording and tone."""
    return run_llm_edit("fixGrammar", FIX_GRAMMAR_TEMPLATE, content, client, cancel_token)
