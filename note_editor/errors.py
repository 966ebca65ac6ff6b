"""
Error taxonomy for AI edits.

Every code carries a technical message (for logs) and a user-facing message
(for display). Only API_FAILURE and NETWORK_ERROR are retryable.
"""
from __future__ import annotations
from typing import Dict, Any, Optional, Tuple

from note_editor.editops import EditError

API_FAILURE = "API_FAILURE"
NETWORK_ERROR = "NETWORK_ERROR"
CONTENT_TOO_SHORT = "CONTENT_TOO_SHORT"
CONTENT_TOO_LONG = "CONTENT_TOO_LONG"
NO_OPTIONS_SELECTED = "NO_OPTIONS_SELECTED"
NO_CHANGES_MADE = "NO_CHANGES_MADE"
USER_CANCELLED = "USER_CANCELLED"
MARKDOWN_VALIDATION_FAILED = "MARKDOWN_VALIDATION_FAILED"

# code -> (message, user_message, retryable)
ERROR_MESSAGES: Dict[str, Tuple[str, str, bool]] = {
    API_FAILURE: (
        "Unknown error occurred",
        "AI service unavailable. Please try again.",
        True,
    ),
    NETWORK_ERROR: (
        "Could not reach the AI service",
        "Network error. Check your connection and try again.",
        True,
    ),
    CONTENT_TOO_SHORT: (
        "Content must be at least 10 characters",
        "Note must have at least 10 characters to edit",
        False,
    ),
    CONTENT_TOO_LONG: (
        "Content exceeds 50,000 character limit",
        "Note too long for AI editing (max 50,000 characters)",
        False,
    ),
    NO_OPTIONS_SELECTED: (
        "No edit options selected",
        "Please select at least one edit option",
        False,
    ),
    NO_CHANGES_MADE: (
        "Content is 98%+ similar to original",
        "No changes needed! Your note looks good.",
        False,
    ),
    USER_CANCELLED: (
        "User cancelled the operation",
        "Operation cancelled",
        False,
    ),
    MARKDOWN_VALIDATION_FAILED: (
        "Edited content is not valid markdown",
        "Formatting produced invalid markdown. Please try again.",
        True,
    ),
}

# Exception class names from the model SDK that mean the request never got an answer
_NETWORK_EXCEPTIONS = {"APIConnectionError", "APITimeoutError", "ConnectionError", "TimeoutError"}


class OperationCancelled(Exception):
    """Raised inside an edit operation once its cancellation token has fired."""

    def __init__(self, message: str = "Operation cancelled"):
        super().__init__(message)


class MarkdownValidationError(Exception):
    """Raised when edited content fails the markdown lint and cannot be fixed."""


def make_error(
    code: str,
    message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    retryable: Optional[bool] = None,
) -> EditError:
    default_message, user_message, default_retryable = ERROR_MESSAGES[code]
    return EditError(
        code=code,
        message=message or default_message,
        user_message=user_message,
        retryable=default_retryable if retryable is None else retryable,
        context=context or {},
    )


def classify_exception(exc: BaseException) -> str:
    """Map an exception raised by an edit operation to an error code."""
    for klass in type(exc).__mro__:
        if klass.__name__ in _NETWORK_EXCEPTIONS:
            return NETWORK_ERROR
    if isinstance(exc, MarkdownValidationError):
        return MARKDOWN_VALIDATION_FAILED
    return API_FAILURE
