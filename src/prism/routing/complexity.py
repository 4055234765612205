"""Keyword-based complexity estimation for backend routing.

The estimate is a cheap heuristic over the prompt text, not a model of task
difficulty. Checks run in order and the first match wins:

1. Any high-signal term in the lower-cased prompt -> HIGH
2. Any low-signal term -> LOW
3. Prompt longer than LONG_PROMPT_THRESHOLD characters -> HIGH
4. Otherwise -> MEDIUM

A prompt containing both high- and low-signal terms is HIGH.

Usage:
    from prism.routing.complexity import estimate_complexity

    estimate_complexity("Review this design pattern")  # ComplexityClass.HIGH
    estimate_complexity("a quick fix")                  # ComplexityClass.LOW
"""

from collections.abc import Callable
from enum import StrEnum


class ComplexityClass(StrEnum):
    """Coarse estimate of how demanding a prompt is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


LONG_PROMPT_THRESHOLD = 500

# English and Arabic terms
HIGH_SIGNAL_TERMS: frozenset[str] = frozenset({
    "architecture",
    "design pattern",
    "optimize",
    "security",
    "review",
    "معماري",
    "تصميم",
    "أمان",
    "مراجعة",
})

LOW_SIGNAL_TERMS: frozenset[str] = frozenset({
    "simple",
    "basic",
    "quick",
    "بسيط",
    "سريع",
    "صغير",
})

ComplexityStrategy = Callable[[str], ComplexityClass]
"""Any pure function from prompt text to ComplexityClass."""


def estimate_complexity(prompt: str) -> ComplexityClass:
    """Classify a prompt as low, medium or high complexity.

    Pure and deterministic: the same text always yields the same class.

    Args:
        prompt: The task text.

    Returns:
        The ComplexityClass of the prompt.
    """
    lowered = prompt.lower()
    if any(term in lowered for term in HIGH_SIGNAL_TERMS):
        return ComplexityClass.HIGH
    if any(term in lowered for term in LOW_SIGNAL_TERMS):
        return ComplexityClass.LOW
    if len(prompt) > LONG_PROMPT_THRESHOLD:
        return ComplexityClass.HIGH
    return ComplexityClass.MEDIUM
