"""
In-order subsequence validation of the mantra against buffered transcript words.

Greedy single pass: a pointer walks the template; any word that fuzzy-matches
the target under the pointer advances it, every other word is noise. A word
that could serve the current or a later position is always credited to the
current one, so the earliest complete occurrence wins.
"""
from dataclasses import dataclass
from typing import Sequence

from core.fuzzy import DEFAULT_DISTANCE_THRESHOLD, matches
from core.mantra import DEFAULT_TEMPLATE, MantraTemplate


@dataclass(frozen=True)
class MatchResult:
    """Outcome of one validation pass."""
    matched: bool
    consumed_up_to: int = 0  # index just past the word that completed the mantra
    progress: int = 0        # template words matched so far (len(template) when matched)


def find_match(
    words: Sequence[str],
    template: MantraTemplate = DEFAULT_TEMPLATE,
    threshold: int = DEFAULT_DISTANCE_THRESHOLD,
) -> MatchResult:
    """
    Find the first complete in-order occurrence of `template` in `words`.

    Args:
        words: Normalized transcript words.
        template: Target mantra.
        threshold: Edit distance accepted per word.

    Returns:
        MatchResult; consumed_up_to is 0 and progress < len(template) when not matched.
    """
    pointer = 0
    total = len(template)
    for i, word in enumerate(words):
        target = template[pointer]
        if matches(target, word, threshold, template.alternates_for(target)):
            pointer += 1
            if pointer == total:
                return MatchResult(matched=True, consumed_up_to=i + 1, progress=total)
    return MatchResult(matched=False, consumed_up_to=0, progress=pointer)


def validate(
    words: Sequence[str],
    template: MantraTemplate = DEFAULT_TEMPLATE,
    threshold: int = DEFAULT_DISTANCE_THRESHOLD,
) -> bool:
    """True if the words contain one full in-order occurrence of the mantra."""
    return find_match(words, template, threshold).matched
