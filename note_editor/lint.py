from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Optional
import re

_HEADING = re.compile(r"^(#{1,6})\s+")
_FENCE = "```"


@dataclass
class Finding:
    rule_id: str
    severity: str  # warning|error
    message: str
    line: Optional[int] = None
    details: Dict[str, str] = field(default_factory=dict)


def _heading_findings(lines: List[str]) -> List[Finding]:
    findings: List[Finding] = []
    previous_level = 0
    in_code = False
    for i, line in enumerate(lines):
        if line.strip().startswith(_FENCE):
            in_code = not in_code
            continue
        if in_code:
            continue
        m = _HEADING.match(line)
        if not m:
            continue
        level = len(m.group(1))
        if previous_level > 0 and level > previous_level + 1:
            findings.append(Finding(
                rule_id="markdown.heading.skip",
                severity="error",
                message=(
                    f"Heading level {level} skips level {previous_level + 1}. "
                    f"Proper hierarchy: {previous_level} → {previous_level + 1} → {level}"
                ),
                line=i + 1,
                details={"level": str(level), "previous_level": str(previous_level)},
            ))
        previous_level = level
    return findings


def _open_fence_line(lines: List[str]) -> Optional[int]:
    """1-based line of a fence left open at end of text, else None."""
    start = None
    for i, line in enumerate(lines):
        if line.strip().startswith(_FENCE):
            start = None if start is not None else i + 1
    return start


def lint_markdown(content: str) -> List[Finding]:
    lines = content.split("\n")
    findings = _heading_findings(lines)

    start = _open_fence_line(lines)
    if start is not None:
        findings.append(Finding(
            rule_id="markdown.code_block.unclosed",
            severity="error",
            message=f"Unclosed code block starting at line {start}. Missing closing {_FENCE}",
            line=start,
        ))
    return findings


def attempt_markdown_fix(content: str) -> str:
    """Close a dangling code fence. Anything else is left for the caller to report."""
    if _open_fence_line(content.split("\n")) is not None:
        return content + "\n" + _FENCE
    return content
