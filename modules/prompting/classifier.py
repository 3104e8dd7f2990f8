"""Heuristic detection of coding-related prompts."""

from __future__ import annotations

from typing import Iterable, Tuple

CODING_KEYWORDS: Tuple[str, ...] = (
    "function", "class", "method", "variable", "array", "loop", "if", "else",
    "code", "program", "algorithm", "data structure", "implement", "create",
    "write", "develop", "build", "make", "generate", "return", "print",
    "calculate", "sort", "search", "parse", "validate", "convert", "format",
    "api", "database", "query", "component", "module", "package", "import",
)


class PromptClassifier:
    """Substring matcher over a fixed coding vocabulary.

    This is a soft gate: a negative answer produces an advisory the user may
    override, so false positives and negatives are acceptable.
    """

    def __init__(self, vocabulary: Iterable[str] = CODING_KEYWORDS) -> None:
        self.vocabulary = tuple(term.lower() for term in vocabulary if term and term.strip())

    def is_coding_prompt(self, text: str) -> bool:
        """Return True when any vocabulary term occurs in ``text``."""
        lowered = (text or "").lower()
        if not lowered.strip():
            return False
        return any(term in lowered for term in self.vocabulary)


_DEFAULT = PromptClassifier()


def is_coding_prompt(text: str) -> bool:
    """Classify ``text`` with the default vocabulary."""
    return _DEFAULT.is_coding_prompt(text)
