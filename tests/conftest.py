from types import SimpleNamespace

import pytest

from note_editor.edits import OperationResult
from note_editor.editops import AppliedEdit
from note_editor.rules.load_rules import use_edit_settings


class FakeClient:
    """Model client returning canned replies and recording each call."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def complete(self, prompt, temperature, max_tokens=None, system=None, cancel_token=None):
        self.calls.append(SimpleNamespace(
            prompt=prompt,
            temperature=temperature,
            max_tokens=max_tokens,
            system=system,
            cancel_token=cancel_token,
        ))
        if self.error is not None:
            raise self.error
        return self.reply(prompt) if callable(self.reply) else self.reply


def rewrite_op(edit_type, transform, seen=None):
    """Fake edit operation applying `transform` to its input."""
    def op(content, client, cancel_token=None):
        if seen is not None:
            seen.append((edit_type, content))
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        edited = transform(content)
        return OperationResult(
            success=True,
            content=edited,
            applied_edits=[AppliedEdit(
                type=edit_type,
                duration_ms=1.0,
                changes_made=edited != content,
                character_delta=len(edited) - len(content),
            )],
        )
    return op


def raising_op(exc):
    def op(content, client, cancel_token=None):
        raise exc
    return op


@pytest.fixture(autouse=True)
def reset_edit_settings():
    use_edit_settings(None)
    yield
    use_edit_settings(None)
