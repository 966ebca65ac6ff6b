"""
Shared runner for single AI edit operations.

Each operation builds a prompt, asks the model client for a full rewrite of
the note, and reports a single-operation result. Cancellation propagates as
OperationCancelled; every other error becomes a FailedEdit.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol
import logging
import time

from note_editor.cancellation import CancellationToken
from note_editor.editops import AppliedEdit, EditError, EditType, FailedEdit
from note_editor.errors import OperationCancelled, classify_exception, make_error
from note_editor.llm.prompts import SYSTEM_PROMPT
from note_editor.rules.load_rules import get_operation_settings

logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    def complete(
        self,
        prompt: str,
        temperature: float,
        max_tokens: Optional[int] = None,
        system: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str: ...


@dataclass
class OperationResult:
    """Outcome of one edit operation: the single-operation analogue of EditResult."""
    success: bool
    content: str
    applied_edits: List[AppliedEdit] = field(default_factory=list)
    failed_edits: List[FailedEdit] = field(default_factory=list)
    processing_time_ms: float = 0.0
    error: Optional[EditError] = None


EditOperation = Callable[[str, ModelClient, Optional[CancellationToken]], OperationResult]


def run_llm_edit(
    edit_type: EditType,
    template: str,
    content: str,
    client: ModelClient,
    cancel_token: Optional[CancellationToken] = None,
    postprocess: Optional[Callable[[str], str]] = None,
) -> OperationResult:
    """Run one prompt-driven edit against `content`."""
    start_time = time.time()
    settings = get_operation_settings(edit_type)

    try:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        edited = client.complete(
            template.format(content=content),
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            system=SYSTEM_PROMPT,
            cancel_token=cancel_token,
        )
        edited = (edited or "").strip() or content
        if postprocess is not None:
            edited = postprocess(edited)

    except OperationCancelled:
        raise
    except Exception as e:
        if cancel_token is not None and cancel_token.cancelled:
            raise OperationCancelled() from e
        duration_ms = (time.time() - start_time) * 1000
        code = classify_exception(e)
        message = str(e) or type(e).__name__
        logger.warning(f"{edit_type} failed after {duration_ms:.0f}ms: {type(e).__name__}: {message}")
        return OperationResult(
            success=False,
            content=content,
            failed_edits=[FailedEdit(type=edit_type, code=code, message=message, retryable=True)],
            processing_time_ms=duration_ms,
            error=make_error(code, message=message, context={"exception_type": type(e).__name__}, retryable=True),
        )

    duration_ms = (time.time() - start_time) * 1000
    changes_made = edited != content
    logger.debug(f"{edit_type} completed in {duration_ms:.0f}ms ({len(content)} -> {len(edited)} chars)")

    return OperationResult(
        success=True,
        content=edited,
        applied_edits=[AppliedEdit(
            type=edit_type,
            duration_ms=duration_ms,
            changes_made=changes_made,
            character_delta=len(edited) - len(content),
        )],
        processing_time_ms=duration_ms,
    )
