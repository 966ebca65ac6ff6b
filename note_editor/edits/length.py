from __future__ import annotations
from typing import Optional

from note_editor.cancellation import CancellationToken
from note_editor.edits.base import ModelClient, OperationResult, run_llm_edit
from note_editor.llm.prompts import EXPAND_CONTENT_TEMPLATE, MAKE_CONCISE_TEMPLATE


def make_concise(
    content: str,
    client: ModelClient,
    cancel_token: Optional[CancellationToken] = None,
) -> OperationResult:
    return run_llm_edit("makeConcise", MAKE_CONCISE_TEMPLATE, content, client, cancel_token)


def expand_content(
    content: str,
    client: ModelClient,
    cancel_token: Optional[CancellationToken] = None,
) -> OperationResult:
    return run_llm_edit("expandContent", EXPAND_CONTENT_TEMPLATE, content, client, cancel_token)
