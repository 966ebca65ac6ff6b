"""
Change-significance detection.

Normalized Levenshtein similarity between the original note and the edited
result. Used to decide whether a run produced a meaningful change.
"""
from __future__ import annotations
import re

from rapidfuzz.distance import Levenshtein

_WHITESPACE = re.compile(r"\s+")


def normalize_for_comparison(text: str) -> str:
    """Lowercase, trim, and collapse runs of whitespace to a single space."""
    return _WHITESPACE.sub(" ", text.lower().strip())


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit costs."""
    return Levenshtein.distance(a, b)


def calculate_similarity(original: str, edited: str) -> float:
    """
    Return similarity in [0, 1]; 1.0 means identical after normalization.
    """
    norm1 = normalize_for_comparison(original)
    norm2 = normalize_for_comparison(edited)

    if norm1 == norm2:
        return 1.0

    distance = levenshtein_distance(norm1, norm2)
    max_length = max(len(norm1), len(norm2))
    return 1 - distance / max_length
