"""
Word-level fuzzy matching for noisy speech-to-text output.

A transcript word counts as a target word when it is within a small edit
distance of it, contains it (recognizers merge words: "harekrishna"), or is
one of its known alternate spellings ("krushna", "raama").
"""
from typing import Iterable

from rapidfuzz.distance import Levenshtein

DEFAULT_DISTANCE_THRESHOLD = 2


def distance(target: str, observed: str) -> int:
    """Levenshtein edit distance (unit-cost insert / delete / substitute)."""
    return Levenshtein.distance(target or "", observed or "")


def matches(
    target: str,
    observed: str,
    threshold: int = DEFAULT_DISTANCE_THRESHOLD,
    alternates: Iterable[str] = (),
) -> bool:
    """
    True if `observed` is an acceptable rendering of `target`.

    Args:
        target: Expected word (normalized).
        observed: Word from the transcript (normalized).
        threshold: Max edit distance still accepted.
        alternates: Known alternate spellings of target.
    """
    observed = observed or ""
    if distance(target, observed) <= threshold:
        return True
    if target and target in observed:
        return True
    return observed in alternates
