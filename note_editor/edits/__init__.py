"""
AI Edit Operations

Each operation takes note text, a model client and an optional cancellation
token, and returns an OperationResult describing one full-document rewrite.
"""
from typing import Dict

from note_editor.edits.base import EditOperation, ModelClient, OperationResult, run_llm_edit
from note_editor.edits.formatting import format_markdown
from note_editor.edits.grammar import fix_grammar
from note_editor.edits.structure import add_headings, improve_structure
from note_editor.edits.length import make_concise, expand_content

DEFAULT_OPERATIONS: Dict[str, EditOperation] = {
    "formatMarkdown": format_markdown,
    "fixGrammar": fix_grammar,
    "addHeadings": add_headings,
    "improveStructure": improve_structure,
    "makeConcise": make_concise,
    "expandContent": expand_content,
}

__all__ = [
    "EditOperation",
    "ModelClient",
    "OperationResult",
    "run_llm_edit",
    "format_markdown",
    "fix_grammar",
    "add_headings",
    "improve_structure",
    "make_concise",
    "expand_content",
    "DEFAULT_OPERATIONS",
]
