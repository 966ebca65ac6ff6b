from __future__ import annotations
from typing import Optional

from note_editor.cancellation import CancellationToken
from note_editor.edits.base import ModelClient, OperationResult, run_llm_edit
from note_editor.llm.prompts import ADD_HEADINGS_TEMPLATE, IMPROVE_STRUCTURE_TEMPLATE


def add_headings(
    content: str,
    client: ModelClient,
    cancel_token: Optional[CancellationToken] = None,
) -> OperationResult:
    """Insert section headings that organize the note hierarchically."""
    return run_llm_edit("addHeadings", ADD_HEADINGS_TEMPLATE, content, client, cancel_token)


def improve_structure(
    content: str,
    client: ModelClient,
    cancel_token: Optional[CancellationToken] = None,
) -> OperationResult:
    """Reorder and group content for a clearer logical flow."""
    return run_llm_edit("improveStructure", IMPROVE_STRUCTURE_TEMPLATE, content, client, cancel_token)
