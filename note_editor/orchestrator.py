"""
AI Edits Orchestrator

Applies the user's selected edits to a note:
1. Validate input (length bounds, at least one option)
2. Batch 1: format markdown + fix grammar (parallel, same snapshot)
3. Batch 2: add headings + improve structure (parallel, reads Batch 1 output)
4. Batch 3: length adjustment (reads Batch 2 output)
5. Compare with the original and decide whether the change is meaningful

Within a parallel batch each operation rewrites the same snapshot. Results are
merged in invocation order and each success overwrites the working content, so
when two edits of one batch succeed only the later one's text survives while
both are reported as applied. `OrchestratorConfig.sequential_batches` runs
batch members one after another instead, so no rewrite is discarded.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
from concurrent.futures import ThreadPoolExecutor
import logging
import time

from note_editor.cancellation import CancellationToken
from note_editor.editops import (
    AppliedEdit,
    EditOptions,
    EditResult,
    EditType,
    FailedEdit,
    ProgressEvent,
    ProgressStatus,
)
from note_editor.edits import DEFAULT_OPERATIONS, EditOperation, ModelClient, OperationResult
from note_editor.errors import (
    API_FAILURE,
    NO_CHANGES_MADE,
    USER_CANCELLED,
    OperationCancelled,
    classify_exception,
    make_error,
)
from note_editor.similarity import calculate_similarity
from note_editor.verify import MAX_CONTENT_LENGTH, MIN_CONTENT_LENGTH, validate_request

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class OrchestratorConfig:
    """Configuration for the edit orchestrator."""
    max_concurrent: int = 2
    similarity_threshold: float = 0.98   # At or above: treat as no change
    min_content_length: int = MIN_CONTENT_LENGTH
    max_content_length: int = MAX_CONTENT_LENGTH
    sequential_batches: bool = False     # Chain batch members instead of last-write-wins
    operations: Dict[str, EditOperation] = field(default_factory=lambda: dict(DEFAULT_OPERATIONS))


@dataclass
class _RunState:
    content: str
    applied: List[AppliedEdit] = field(default_factory=list)
    failed: List[FailedEdit] = field(default_factory=list)


def plan_batches(options: EditOptions) -> List[List[EditType]]:
    """Selected edit types grouped into dependency-ordered batches. Empty batches are dropped."""
    batches: List[List[EditType]] = [[], [], []]
    if options.format_markdown:
        batches[0].append("formatMarkdown")
    if options.fix_grammar:
        batches[0].append("fixGrammar")
    if options.add_headings:
        batches[1].append("addHeadings")
    if options.improve_structure:
        batches[1].append("improveStructure")
    if options.length_adjustment == "concise":
        batches[2].append("makeConcise")
    elif options.length_adjustment == "expand":
        batches[2].append("expandContent")
    return [b for b in batches if b]


class _Runner:
    """Executes the batch plan for one invocation."""

    def __init__(
        self,
        client: ModelClient,
        config: OrchestratorConfig,
        cancel_token: Optional[CancellationToken],
        progress_callback: Optional[ProgressCallback],
    ):
        self.client = client
        self.config = config
        self.cancel_token = cancel_token
        self.progress_callback = progress_callback

    def _emit(self, edit_type: EditType, status: ProgressStatus, duration_ms: Optional[float] = None) -> None:
        if self.progress_callback:
            self.progress_callback(ProgressEvent(edit_type, status, duration_ms))

    def _check_cancelled(self) -> None:
        if self.cancel_token is not None and self.cancel_token.cancelled:
            raise OperationCancelled()

    def _invoke(self, edit_type: EditType, content: str) -> OperationResult:
        """Run one operation, turning its exceptions (other than cancellation) into a failed result."""
        operation = self.config.operations[edit_type]
        self._emit(edit_type, "in_progress")
        start_time = time.time()
        try:
            result = operation(content, self.client, self.cancel_token)
        except OperationCancelled:
            self._emit(edit_type, "failed", (time.time() - start_time) * 1000)
            raise
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            if self.cancel_token is not None and self.cancel_token.cancelled:
                self._emit(edit_type, "failed", duration_ms)
                raise OperationCancelled() from e
            logger.warning(f"{edit_type} raised {type(e).__name__}: {e}")
            self._emit(edit_type, "failed", duration_ms)
            return OperationResult(
                success=False,
                content=content,
                failed_edits=[FailedEdit(
                    type=edit_type,
                    code=classify_exception(e),
                    message=str(e) or type(e).__name__,
                    retryable=True,
                )],
                processing_time_ms=duration_ms,
            )

        duration_ms = (time.time() - start_time) * 1000
        self._emit(edit_type, "completed" if result.success else "failed", duration_ms)
        return result

    def _merge(self, edit_type: EditType, result: OperationResult, state: _RunState) -> None:
        if result.success:
            state.content = result.content
            state.applied.extend(result.applied_edits)
        else:
            failures = result.failed_edits or [FailedEdit(
                type=edit_type,
                code=result.error.code if result.error else API_FAILURE,
                message=result.error.message if result.error else "Edit reported failure without details",
                retryable=result.error.retryable if result.error else True,
            )]
            for failure in failures:
                logger.warning(f"{failure.type} failed ({failure.code}): {failure.message}")
            state.failed.extend(failures)

    def _run_parallel(self, batch: List[EditType], state: _RunState, more_batches: bool) -> None:
        snapshot = state.content
        workers = max(1, min(self.config.max_concurrent, len(batch)))

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self._invoke, edit_type, snapshot) for edit_type in batch]
        # Leaving the executor waits for every future: the batch has settled

        outcomes: List[Tuple[EditType, OperationResult]] = []
        cancelled = False
        first_error: Optional[BaseException] = None
        for edit_type, future in zip(batch, futures):
            try:
                outcomes.append((edit_type, future.result()))
            except OperationCancelled:
                cancelled = True
            except Exception as e:
                first_error = first_error or e

        if cancelled:
            raise OperationCancelled()
        if first_error is not None:
            raise first_error
        if more_batches:
            self._check_cancelled()

        for edit_type, result in outcomes:
            self._merge(edit_type, result, state)

    def _run_sequential(self, batch: List[EditType], state: _RunState, more_batches: bool) -> None:
        for index, edit_type in enumerate(batch):
            self._check_cancelled()
            result = self._invoke(edit_type, state.content)
            # Cancellation only stops work that has not started yet
            if more_batches or index < len(batch) - 1:
                self._check_cancelled()
            self._merge(edit_type, result, state)

    def run(self, batches: List[List[EditType]], state: _RunState) -> None:
        for number, batch in enumerate(batches, start=1):
            self._check_cancelled()
            for edit_type in batch:
                self._emit(edit_type, "pending")

            logger.info(f"Batch {number}: running {', '.join(batch)}")
            start_time = time.time()
            more_batches = number < len(batches)
            if len(batch) > 1 and not self.config.sequential_batches:
                self._run_parallel(batch, state, more_batches)
            else:
                self._run_sequential(batch, state, more_batches)
            logger.info(f"Batch {number} settled in {time.time() - start_time:.2f}s")


def apply_ai_edits(
    content: str,
    options: EditOptions,
    client: ModelClient,
    cancel_token: Optional[CancellationToken] = None,
    progress_callback: Optional[ProgressCallback] = None,
    config: Optional[OrchestratorConfig] = None,
) -> EditResult:
    """
    Apply the selected AI edits to note content.

    Args:
        content: The note content to edit
        options: Selected edit options
        client: Model client handed to every operation
        cancel_token: Optional cooperative cancellation token
        progress_callback: Optional callback(ProgressEvent) per operation state change
        config: Orchestrator configuration

    Returns:
        EditResult with the final content and per-edit metadata
    """
    config = config or OrchestratorConfig()
    start_time = time.time()
    original_content = content
    state = _RunState(content=content)

    def elapsed_ms() -> float:
        return (time.time() - start_time) * 1000

    def failure(error) -> EditResult:
        return EditResult(
            success=False,
            content=original_content,
            original_content=original_content,
            applied_edits=state.applied,
            failed_edits=state.failed,
            change_percentage=0.0,
            processing_time_ms=elapsed_ms(),
            error=error,
        )

    try:
        error = validate_request(
            content,
            options,
            min_length=config.min_content_length,
            max_length=config.max_content_length,
        )
        if error is not None:
            logger.info(f"Rejected edit request: {error.code}")
            return failure(error)

        batches = plan_batches(options)
        logger.info(f"Applying AI edits to {len(content)} chars in {len(batches)} batch(es)")
        _Runner(client, config, cancel_token, progress_callback).run(batches, state)

        if not state.applied:
            logger.warning(f"All {len(state.failed)} selected edit(s) failed")
            return failure(make_error(
                API_FAILURE,
                message="All selected edits failed",
                context={"failed": [f.type for f in state.failed]},
                retryable=any(f.retryable for f in state.failed),
            ))

        failed_edits = state.failed or None
        similarity = calculate_similarity(original_content, state.content)

        if similarity >= config.similarity_threshold:
            logger.info(f"Edits judged trivial (similarity {similarity:.3f})")
            return EditResult(
                success=True,
                content=original_content,
                original_content=original_content,
                applied_edits=state.applied,
                failed_edits=failed_edits,
                change_percentage=0.0,
                processing_time_ms=elapsed_ms(),
                error=make_error(NO_CHANGES_MADE, context={"similarity": similarity}),
            )

        character_delta = len(state.content) - len(original_content)
        change_percentage = abs(character_delta / len(original_content)) * 100

        logger.info(
            f"Applied {len(state.applied)} edit(s), {len(state.failed)} failed, "
            f"{change_percentage:.1f}% length change in {elapsed_ms():.0f}ms"
        )
        return EditResult(
            success=True,
            content=state.content,
            original_content=original_content,
            applied_edits=state.applied,
            failed_edits=failed_edits,
            change_percentage=change_percentage,
            processing_time_ms=elapsed_ms(),
        )

    except OperationCancelled:
        logger.warning("AI edits cancelled")
        return failure(make_error(USER_CANCELLED))
    except Exception as e:
        if cancel_token is not None and cancel_token.cancelled:
            logger.warning("AI edits cancelled")
            return failure(make_error(USER_CANCELLED))
        logger.error(f"AI edits failed: {type(e).__name__}: {e}")
        return failure(make_error(
            API_FAILURE,
            message=str(e) or "Unknown error occurred",
            context={"original_error": repr(e), "exception_type": type(e).__name__},
            retryable=True,
        ))
