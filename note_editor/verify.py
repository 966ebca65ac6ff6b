from __future__ import annotations
from typing import Optional

from note_editor.editops import EditError, EditOptions
from note_editor.errors import (
    CONTENT_TOO_LONG,
    CONTENT_TOO_SHORT,
    NO_OPTIONS_SELECTED,
    make_error,
)

MIN_CONTENT_LENGTH = 10
MAX_CONTENT_LENGTH = 50_000


def validate_request(
    content: str,
    options: EditOptions,
    min_length: int = MIN_CONTENT_LENGTH,
    max_length: int = MAX_CONTENT_LENGTH,
) -> Optional[EditError]:
    """Pre-flight checks. Returns the first failing condition, or None when the run may proceed."""
    if not content or len(content.strip()) < min_length:
        return make_error(
            CONTENT_TOO_SHORT,
            context={"length": len(content.strip()) if content else 0, "min_length": min_length},
        )
    if len(content) > max_length:
        return make_error(
            CONTENT_TOO_LONG,
            context={"length": len(content), "max_length": max_length},
        )
    if not options.has_selection():
        return make_error(NO_OPTIONS_SELECTED)
    return None
