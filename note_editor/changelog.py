from __future__ import annotations
from typing import Dict, Any, List
import json

from note_editor.editops import EditResult

EDIT_LABELS = {
    "formatMarkdown": "Format markdown",
    "fixGrammar": "Fix grammar",
    "addHeadings": "Add headings",
    "improveStructure": "Improve structure",
    "makeConcise": "Make concise",
    "expandContent": "Expand content",
    "changeTone": "Change tone",
}


def write_json(path: str, payload: Dict[str, Any]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def summarize_edits(result: EditResult) -> List[Dict[str, Any]]:
    """One row per edit type that ran, applied edits first in completion order."""
    rows: List[Dict[str, Any]] = []
    for edit in result.applied_edits:
        rows.append({
            "type": edit.type,
            "label": EDIT_LABELS.get(edit.type, edit.type),
            "status": "applied",
            "duration_ms": round(edit.duration_ms),
            "character_delta": edit.character_delta,
        })
    for edit in result.failed_edits or []:
        rows.append({
            "type": edit.type,
            "label": EDIT_LABELS.get(edit.type, edit.type),
            "status": "failed",
            "code": edit.code,
            "error": edit.message,
            "retryable": edit.retryable,
        })
    return rows


def render_txt(result: EditResult) -> str:
    lines: List[str] = []
    if result.success and result.error_code is None:
        headline = f"Edited ({result.change_percentage:.1f}% length change)"
    elif result.success:
        headline = result.error.user_message
    else:
        headline = f"Not edited: {result.error.user_message if result.error else 'unknown error'}"
    lines.append(f"AI Edits: {headline}")
    lines.append("")

    lines.append("Edits")
    rows = summarize_edits(result)
    if not rows:
        lines.append("- [none ran]")
    for row in rows:
        if row["status"] == "applied":
            lines.append(f"- ✓ {row['label']} ({row['duration_ms']} ms, {row['character_delta']:+d} chars)")
        else:
            retry = "retryable" if row["retryable"] else "not retryable"
            lines.append(f"- ✗ {row['label']}: {row['error']} [{row['code']}, {retry}]")
    lines.append("")

    lines.append("Stats")
    lines.append(f"- Original length: {len(result.original_content)}")
    lines.append(f"- Final length:    {len(result.content)}")
    lines.append(f"- Processing time: {result.processing_time_ms / 1000:.1f}s")
    if result.error is not None:
        lines.append(f"- Code: {result.error.code}")
    return "\n".join(lines)
