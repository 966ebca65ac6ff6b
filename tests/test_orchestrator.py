import math
import time

import pytest

from conftest import FakeClient, raising_op, rewrite_op

from note_editor.cancellation import CancellationToken
from note_editor.editops import EditOptions, FailedEdit
from note_editor.edits import DEFAULT_OPERATIONS, OperationResult
from note_editor.errors import OperationCancelled
from note_editor.orchestrator import OrchestratorConfig, apply_ai_edits, plan_batches

NOTE = "alpha beta gamma delta epsilon"


def _config(**ops):
    operations = dict(DEFAULT_OPERATIONS)
    for edit_type, op in ops.items():
        operations[edit_type] = op
    return OrchestratorConfig(operations=operations)


def _explode(*args, **kwargs):
    raise AssertionError("operation should not run")


def test_plan_batches_dependency_order():
    options = EditOptions(
        format_markdown=True,
        fix_grammar=True,
        add_headings=True,
        improve_structure=True,
        length_adjustment="expand",
    )
    assert plan_batches(options) == [
        ["formatMarkdown", "fixGrammar"],
        ["addHeadings", "improveStructure"],
        ["expandContent"],
    ]


def test_plan_batches_skips_empty_batches():
    assert plan_batches(EditOptions(improve_structure=True)) == [["improveStructure"]]
    assert plan_batches(EditOptions(fix_grammar=True, length_adjustment="concise")) == [
        ["fixGrammar"],
        ["makeConcise"],
    ]
    assert plan_batches(EditOptions(tone="professional")) == []


@pytest.mark.parametrize("content", ["", "short", "   123456789   "])
def test_content_too_short(content):
    events = []
    result = apply_ai_edits(
        content,
        EditOptions(fix_grammar=True),
        FakeClient(),
        progress_callback=events.append,
        config=_config(fixGrammar=_explode),
    )
    assert not result.success
    assert result.error_code == "CONTENT_TOO_SHORT"
    assert result.content == content
    assert result.original_content == content
    assert result.change_percentage == 0
    assert events == []


def test_content_too_long():
    content = "x" * 50_001
    result = apply_ai_edits(content, EditOptions(fix_grammar=True), FakeClient(), config=_config(fixGrammar=_explode))
    assert not result.success
    assert result.error_code == "CONTENT_TOO_LONG"
    assert result.content == content


def test_max_length_content_is_accepted():
    content = "word " * 10_000
    result = apply_ai_edits(
        content,
        EditOptions(fix_grammar=True),
        FakeClient(),
        config=_config(fixGrammar=rewrite_op("fixGrammar", lambda s: "Rewritten entirely."))
    )
    assert len(content) == 50_000
    assert result.success


def test_no_options_selected():
    result = apply_ai_edits(NOTE, EditOptions(tone="clear"), FakeClient())
    assert not result.success
    assert result.error_code == "NO_OPTIONS_SELECTED"
    assert result.content == NOTE


def test_hello_world_grammar_fix():
    result = apply_ai_edits(
        "Hello world",
        EditOptions(fix_grammar=True),
        FakeClient(),
        config=_config(fixGrammar=rewrite_op("fixGrammar", lambda s: "Hello, world!")),
    )
    assert result.success
    assert result.error is None
    assert result.content == "Hello, world!"
    assert math.isclose(result.change_percentage, 2 / 11 * 100)
    assert [e.type for e in result.applied_edits] == ["fixGrammar"]
    assert result.failed_edits is None


def test_identical_output_is_no_changes_made():
    result = apply_ai_edits(
        "Hello world",
        EditOptions(fix_grammar=True),
        FakeClient(),
        config=_config(fixGrammar=rewrite_op("fixGrammar", lambda s: s)),
    )
    assert result.success
    assert result.error_code == "NO_CHANGES_MADE"
    assert result.content == "Hello world"
    assert result.change_percentage == 0
    assert len(result.applied_edits) == 1


def test_whitespace_and_case_changes_are_trivial():
    result = apply_ai_edits(
        NOTE,
        EditOptions(format_markdown=True),
        FakeClient(),
        config=_config(formatMarkdown=rewrite_op("formatMarkdown", lambda s: "  " + s.upper().replace(" ", "\n\n") + "\n")),
    )
    assert result.success
    assert result.error_code == "NO_CHANGES_MADE"
    assert result.content == NOTE


def test_parallel_batch_last_write_wins_in_invocation_order():
    seen = []
    config = _config(
        formatMarkdown=rewrite_op("formatMarkdown", lambda s: "A. Formatted version of the note.", seen),
        fixGrammar=rewrite_op("fixGrammar", lambda s: "a! Grammar fixed version here.", seen),
    )
    result = apply_ai_edits(NOTE, EditOptions(format_markdown=True, fix_grammar=True), FakeClient(), config=config)

    assert result.success
    # Both rewrote the same snapshot
    assert sorted(seen) == [("fixGrammar", NOTE), ("formatMarkdown", NOTE)]
    assert [e.type for e in result.applied_edits] == ["formatMarkdown", "fixGrammar"]
    assert result.content == "a! Grammar fixed version here."


def test_sequential_batches_keep_every_edit():
    seen = []
    config = _config(
        formatMarkdown=rewrite_op("formatMarkdown", lambda s: s + " [formatted]", seen),
        fixGrammar=rewrite_op("fixGrammar", lambda s: s + " [grammar]", seen),
    )
    config.sequential_batches = True
    result = apply_ai_edits(NOTE, EditOptions(format_markdown=True, fix_grammar=True), FakeClient(), config=config)

    assert result.success
    assert seen == [("formatMarkdown", NOTE), ("fixGrammar", NOTE + " [formatted]")]
    assert result.content == NOTE + " [formatted] [grammar]"


def test_batches_chain_their_outputs():
    seen = []
    config = _config(
        fixGrammar=rewrite_op("fixGrammar", lambda s: s + " one", seen),
        addHeadings=rewrite_op("addHeadings", lambda s: "## Title\n" + s, seen),
        makeConcise=rewrite_op("makeConcise", lambda s: s.replace("alpha beta ", ""), seen),
    )
    options = EditOptions(fix_grammar=True, add_headings=True, length_adjustment="concise")
    result = apply_ai_edits(NOTE, options, FakeClient(), config=config)

    assert seen == [
        ("fixGrammar", NOTE),
        ("addHeadings", NOTE + " one"),
        ("makeConcise", "## Title\n" + NOTE + " one"),
    ]
    assert result.content == "## Title\ngamma delta epsilon one"
    assert [e.type for e in result.applied_edits] == ["fixGrammar", "addHeadings", "makeConcise"]


def test_expand_runs_expand_content_only():
    config = _config(
        makeConcise=_explode,
        expandContent=rewrite_op("expandContent", lambda s: s + " with a great deal more detail added"),
    )
    result = apply_ai_edits(NOTE, EditOptions(length_adjustment="expand"), FakeClient(), config=config)
    assert [e.type for e in result.applied_edits] == ["expandContent"]


def test_single_operation_raising_fails_the_run():
    result = apply_ai_edits(
        NOTE,
        EditOptions(fix_grammar=True),
        FakeClient(),
        config=_config(fixGrammar=raising_op(ValueError("model exploded"))),
    )
    assert not result.success
    assert result.content == NOTE
    assert result.change_percentage == 0
    assert result.applied_edits == []
    assert len(result.failed_edits) == 1
    failed = result.failed_edits[0]
    assert failed.type == "fixGrammar"
    assert failed.code == "API_FAILURE"
    assert failed.message == "model exploded"
    assert failed.retryable
    assert result.error_code == "API_FAILURE"
    assert result.error.retryable


def test_partial_failure_within_a_batch():
    config = _config(
        formatMarkdown=raising_op(RuntimeError("boom")),
        fixGrammar=rewrite_op("fixGrammar", lambda s: "Completely different grammar output."),
    )
    result = apply_ai_edits(NOTE, EditOptions(format_markdown=True, fix_grammar=True), FakeClient(), config=config)

    assert result.success
    assert len(result.applied_edits) == 1
    assert len(result.failed_edits) == 1
    assert result.failed_edits[0].type == "formatMarkdown"
    assert result.content == "Completely different grammar output."


def test_failure_in_earlier_batch_keeps_pipeline_going():
    seen = []
    config = _config(
        fixGrammar=raising_op(ConnectionError("connection reset")),
        addHeadings=rewrite_op("addHeadings", lambda s: "## Heading\n" + s, seen),
    )
    result = apply_ai_edits(NOTE, EditOptions(fix_grammar=True, add_headings=True), FakeClient(), config=config)

    assert result.success
    assert seen == [("addHeadings", NOTE)]
    assert result.failed_edits[0].code == "NETWORK_ERROR"


def test_operation_reporting_failure_without_details():
    def op(content, client, cancel_token=None):
        return OperationResult(success=False, content=content)

    result = apply_ai_edits(NOTE, EditOptions(add_headings=True), FakeClient(), config=_config(addHeadings=op))
    assert not result.success
    assert result.failed_edits == [
        FailedEdit(type="addHeadings", code="API_FAILURE", message="Edit reported failure without details", retryable=True)
    ]


def test_progress_events_for_single_operation_batches():
    events = []
    config = _config(
        fixGrammar=rewrite_op("fixGrammar", lambda s: s + " fixed and changed a lot more"),
        makeConcise=raising_op(RuntimeError("nope")),
    )
    apply_ai_edits(
        NOTE,
        EditOptions(fix_grammar=True, length_adjustment="concise"),
        FakeClient(),
        progress_callback=events.append,
        config=config,
    )
    assert [(e.edit_type, e.status) for e in events] == [
        ("fixGrammar", "pending"),
        ("fixGrammar", "in_progress"),
        ("fixGrammar", "completed"),
        ("makeConcise", "pending"),
        ("makeConcise", "in_progress"),
        ("makeConcise", "failed"),
    ]
    assert events[0].duration_ms is None
    assert events[2].duration_ms is not None
    assert events[5].duration_ms is not None


def test_progress_events_for_parallel_batch():
    events = []
    config = _config(
        addHeadings=rewrite_op("addHeadings", lambda s: "## A\n" + s),
        improveStructure=rewrite_op("improveStructure", lambda s: s + "\n\nMore structure here."),
    )
    apply_ai_edits(
        NOTE,
        EditOptions(add_headings=True, improve_structure=True),
        FakeClient(),
        progress_callback=events.append,
        config=config,
    )
    statuses = [(e.edit_type, e.status) for e in events]
    assert statuses[:2] == [("addHeadings", "pending"), ("improveStructure", "pending")]
    for edit_type in ("addHeadings", "improveStructure"):
        own = [status for kind, status in statuses if kind == edit_type]
        assert own == ["pending", "in_progress", "completed"]


def test_cancelled_before_start_runs_nothing():
    token = CancellationToken()
    token.cancel()
    events = []
    result = apply_ai_edits(
        NOTE,
        EditOptions(fix_grammar=True),
        FakeClient(),
        cancel_token=token,
        progress_callback=events.append,
        config=_config(fixGrammar=_explode),
    )
    assert not result.success
    assert result.error_code == "USER_CANCELLED"
    assert not result.error.retryable
    assert result.content == NOTE
    assert events == []


def test_cancel_during_batch_keeps_earlier_edits():
    token = CancellationToken()

    def cancelling_op(content, client, cancel_token=None):
        token.cancel()
        cancel_token.raise_if_cancelled()

    config = _config(
        fixGrammar=rewrite_op("fixGrammar", lambda s: "Grammar fixed to something new."),
        addHeadings=cancelling_op,
        improveStructure=rewrite_op("improveStructure", lambda s: s + " restructured"),
        makeConcise=_explode,
    )
    options = EditOptions(fix_grammar=True, add_headings=True, improve_structure=True, length_adjustment="concise")
    result = apply_ai_edits(NOTE, options, FakeClient(), cancel_token=token, config=config)

    assert not result.success
    assert result.error_code == "USER_CANCELLED"
    assert result.content == NOTE
    assert [e.type for e in result.applied_edits] == ["fixGrammar"]


def test_operation_ignoring_token_still_stops_the_run():
    token = CancellationToken()

    def op(content, client, cancel_token=None):
        token.cancel()
        return rewrite_op("formatMarkdown", lambda s: "# Done\n" + s)(content, client)

    config = _config(formatMarkdown=op, makeConcise=_explode)
    result = apply_ai_edits(
        NOTE,
        EditOptions(format_markdown=True, length_adjustment="concise"),
        FakeClient(),
        cancel_token=token,
        config=config,
    )
    assert result.error_code == "USER_CANCELLED"
    assert result.content == NOTE


def test_operation_cancelled_exception_maps_to_user_cancelled():
    result = apply_ai_edits(
        NOTE,
        EditOptions(improve_structure=True),
        FakeClient(),
        config=_config(improveStructure=raising_op(OperationCancelled())),
    )
    assert result.error_code == "USER_CANCELLED"
    assert result.failed_edits == []


def test_progress_sink_error_maps_to_api_failure():
    def sink(event):
        if event.status == "completed":
            raise RuntimeError("sink is broken")

    result = apply_ai_edits(
        NOTE,
        EditOptions(fix_grammar=True),
        FakeClient(),
        progress_callback=sink,
        config=_config(fixGrammar=rewrite_op("fixGrammar", lambda s: "Something else entirely.")),
    )
    assert not result.success
    assert result.content == NOTE
    assert result.error_code == "API_FAILURE"
    assert result.error.retryable
    assert result.error.context["exception_type"] == "RuntimeError"


def test_second_run_on_converged_output_is_trivial():
    fixed = "Alpha, beta, gamma, delta and epsilon."
    config = _config(fixGrammar=rewrite_op("fixGrammar", lambda s: fixed))

    first = apply_ai_edits(NOTE, EditOptions(fix_grammar=True), FakeClient(), config=config)
    assert first.success and first.error is None

    second = apply_ai_edits(first.content, EditOptions(fix_grammar=True), FakeClient(), config=config)
    assert second.success
    assert second.error_code == "NO_CHANGES_MADE"


def test_result_serializes_with_api_keys():
    result = apply_ai_edits(
        "Hello world",
        EditOptions(fix_grammar=True),
        FakeClient(),
        config=_config(fixGrammar=rewrite_op("fixGrammar", lambda s: "Hello, world!")),
    )
    payload = result.to_dict()
    assert payload["success"] is True
    assert payload["originalContent"] == "Hello world"
    assert payload["appliedEdits"][0]["type"] == "fixGrammar"
    assert "failedEdits" not in payload
    assert "error" not in payload


def test_one_word_change_in_max_length_note_is_trivial():
    content = "word " * 10_000
    config = _config(fixGrammar=rewrite_op("fixGrammar", lambda s: s.replace("word", "text", 1)))

    start = time.monotonic()
    result = apply_ai_edits(content, EditOptions(fix_grammar=True), FakeClient(), config=config)
    assert time.monotonic() - start < 5.0

    assert result.success
    assert result.error_code == "NO_CHANGES_MADE"
    assert result.content == content


def test_large_cut_in_max_length_note_reports_percentage():
    content = "word " * 10_000
    config = _config(makeConcise=rewrite_op("makeConcise", lambda s: s[:40_000]))
    result = apply_ai_edits(content, EditOptions(length_adjustment="concise"), FakeClient(), config=config)

    assert result.success
    assert result.error is None
    assert len(result.content) == 40_000
    assert math.isclose(result.change_percentage, 20.0)


def test_cancel_after_final_operation_keeps_finished_work():
    token = CancellationToken()

    def op(content, client, cancel_token=None):
        result = rewrite_op("fixGrammar", lambda s: "Grammar fixed to something new.")(content, client)
        token.cancel()
        return result

    result = apply_ai_edits(NOTE, EditOptions(fix_grammar=True), FakeClient(), cancel_token=token, config=_config(fixGrammar=op))

    assert result.success
    assert result.error is None
    assert result.content == "Grammar fixed to something new."


def test_cancel_after_final_parallel_batch_keeps_finished_work():
    token = CancellationToken()

    def op(content, client, cancel_token=None):
        result = rewrite_op("fixGrammar", lambda s: "Grammar fixed to something new.")(content, client)
        token.cancel()
        return result

    config = _config(formatMarkdown=rewrite_op("formatMarkdown", lambda s: "# Notes\n\n" + s), fixGrammar=op)
    result = apply_ai_edits(
        NOTE,
        EditOptions(format_markdown=True, fix_grammar=True),
        FakeClient(),
        cancel_token=token,
        config=config,
    )

    assert result.success
    assert [e.type for e in result.applied_edits] == ["formatMarkdown", "fixGrammar"]
    assert result.content == "Grammar fixed to something new."
