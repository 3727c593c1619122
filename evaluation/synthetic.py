"""
Synthetic noisy transcript streams for benchmarking.

Mimics what a browser recognizer returns for a chanting session: alternate
spellings of mantra words, filler words between them, and utterances split
at arbitrary word boundaries.
"""
import random
from typing import Any, Dict, List, Optional, Sequence

from core.mantra import DEFAULT_TEMPLATE, MantraTemplate

# Chosen to stay outside edit distance 2 of every mantra word
FILLER_WORDS = ("um", "uh", "okay", "so", "now", "like", "well")


def noisy_chant_words(
    rng: random.Random,
    template: MantraTemplate = DEFAULT_TEMPLATE,
    variant_rate: float = 0.2,
    filler_rate: float = 0.1,
    fillers: Sequence[str] = FILLER_WORDS,
) -> List[str]:
    """One recited mantra as recognizer words."""
    words: List[str] = []
    for target in template.words:
        if fillers and rng.random() < filler_rate:
            words.append(rng.choice(fillers))
        alternates = sorted(template.alternates_for(target))
        if alternates and rng.random() < variant_rate:
            words.append(rng.choice(alternates))
        else:
            words.append(target)
    return words


def split_fragments(rng: random.Random, words: List[str], min_words: int = 2, max_words: int = 8) -> List[str]:
    """Cut a word stream into utterance-sized fragments."""
    fragments = []
    i = 0
    while i < len(words):
        n = rng.randint(min_words, max_words)
        fragments.append(" ".join(words[i:i + n]))
        i += n
    return fragments


def generate_samples(
    n_samples: int,
    seed: int = 108,
    max_chants: int = 3,
    template: MantraTemplate = DEFAULT_TEMPLATE,
    variant_rate: float = 0.2,
    filler_rate: float = 0.1,
    capitalize: Optional[bool] = True,
) -> List[Dict[str, Any]]:
    """
    Build a labeled dataset: [{"sample_id", "fragments", "expected_count"}, ...].
    Same seed, same dataset.
    """
    rng = random.Random(seed)
    samples = []
    for i in range(n_samples):
        expected = rng.randint(0, max_chants)
        words: List[str] = []
        for _ in range(expected):
            words.extend(noisy_chant_words(rng, template, variant_rate, filler_rate))
        if not words:
            words = [rng.choice(FILLER_WORDS) for _ in range(rng.randint(1, 6))]
        fragments = split_fragments(rng, words)
        if capitalize:
            # Recognizers capitalize utterances and add punctuation
            fragments = [f[:1].upper() + f[1:] + rng.choice((".", ",", "", "!")) for f in fragments]
        samples.append({"sample_id": f"synthetic-{i:04d}", "fragments": fragments, "expected_count": expected})
    return samples
