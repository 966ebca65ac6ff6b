from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Literal

EditType = Literal[
    "formatMarkdown",
    "fixGrammar",
    "addHeadings",
    "improveStructure",
    "makeConcise",
    "expandContent",
    "changeTone",  # reserved, never scheduled
]

LengthAdjustment = Literal["keep", "concise", "expand"]
Tone = Literal["professional", "technical", "clear"]
ProgressStatus = Literal["pending", "in_progress", "completed", "failed"]

LENGTH_ADJUSTMENTS = ("keep", "concise", "expand")
TONES = ("professional", "technical", "clear")


def _flag(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean, got {value!r}")
    return value


@dataclass(frozen=True)
class EditOptions:
    """Which edits to run. Supplied once per invocation, never mutated."""
    format_markdown: bool = False
    fix_grammar: bool = False
    add_headings: bool = False
    improve_structure: bool = False
    length_adjustment: LengthAdjustment = "keep"
    tone: Optional[Tone] = None  # carried through, not wired into batching

    def __post_init__(self):
        if self.length_adjustment not in LENGTH_ADJUSTMENTS:
            raise ValueError(f"length_adjustment must be one of {LENGTH_ADJUSTMENTS}, got {self.length_adjustment!r}")
        if self.tone is not None and self.tone not in TONES:
            raise ValueError(f"tone must be one of {TONES} or None, got {self.tone!r}")

    def has_selection(self) -> bool:
        return bool(
            self.format_markdown
            or self.fix_grammar
            or self.add_headings
            or self.improve_structure
            or self.length_adjustment != "keep"
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditOptions":
        """Build options from a request body using the camelCase keys of the JSON API."""
        return cls(
            format_markdown=_flag(data, "formatMarkdown"),
            fix_grammar=_flag(data, "fixGrammar"),
            add_headings=_flag(data, "addHeadings"),
            improve_structure=_flag(data, "improveStructure"),
            length_adjustment=data.get("lengthAdjustment") or "keep",
            tone=data.get("tone") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "formatMarkdown": self.format_markdown,
            "fixGrammar": self.fix_grammar,
            "addHeadings": self.add_headings,
            "improveStructure": self.improve_structure,
            "lengthAdjustment": self.length_adjustment,
            "tone": self.tone,
        }


@dataclass
class AppliedEdit:
    type: EditType
    duration_ms: float
    changes_made: bool = True
    character_delta: int = 0
    status: str = "success"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "status": self.status,
            "durationMs": self.duration_ms,
            "changesMade": self.changes_made,
            "characterDelta": self.character_delta,
        }


@dataclass
class FailedEdit:
    type: EditType
    code: str
    message: str
    retryable: bool = True
    status: str = "failed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "status": self.status,
            "code": self.code,
            "error": self.message,
            "recoverable": self.retryable,
        }


@dataclass
class EditError:
    code: str
    message: str
    user_message: str
    retryable: bool = False
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "code": self.code,
            "message": self.message,
            "userMessage": self.user_message,
            "retryable": self.retryable,
        }
        if self.context:
            payload["context"] = self.context
        return payload


@dataclass
class EditResult:
    """
    Aggregate outcome of one orchestrator run.

    `original_content` is always the verbatim input. When `success` is False,
    `content` equals `original_content`. `error` may be present on success for
    informational outcomes such as NO_CHANGES_MADE.
    """
    success: bool
    content: str
    original_content: str
    applied_edits: List[AppliedEdit] = field(default_factory=list)
    failed_edits: Optional[List[FailedEdit]] = None
    change_percentage: float = 0.0
    processing_time_ms: float = 0.0
    error: Optional[EditError] = None

    @property
    def error_code(self) -> Optional[str]:
        return self.error.code if self.error else None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "content": self.content,
            "appliedEdits": [e.to_dict() for e in self.applied_edits],
            "originalContent": self.original_content,
            "changePercentage": self.change_percentage,
            "processingTimeMs": self.processing_time_ms,
        }
        if self.failed_edits is not None:
            payload["failedEdits"] = [e.to_dict() for e in self.failed_edits]
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        return payload


@dataclass(frozen=True)
class ProgressEvent:
    edit_type: EditType
    status: ProgressStatus
    duration_ms: Optional[float] = None
