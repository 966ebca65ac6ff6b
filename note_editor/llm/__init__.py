from __future__ import annotations

from note_editor.llm.client import ClaudeClient, LLMConfig

__all__ = ["ClaudeClient", "LLMConfig"]
