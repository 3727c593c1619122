"""
Mantra template and engine configuration.

The Maha-mantra is 16 words in two halves of 8:
    hare krishna hare krishna krishna krishna hare hare
    hare rama hare rama rama rama hare hare
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from core.fuzzy import DEFAULT_DISTANCE_THRESHOLD
from core.normalization import normalize_transcript

MAHA_MANTRA_WORDS: Tuple[str, ...] = (
    "hare", "krishna", "hare", "krishna",
    "krishna", "krishna", "hare", "hare",
    "hare", "rama", "hare", "rama",
    "rama", "rama", "hare", "hare",
)

# Common recognizer renderings that fall outside the edit-distance threshold or are worth naming
MAHA_MANTRA_ALTERNATES: Dict[str, FrozenSet[str]] = {
    "hare": frozenset({"hari", "harey", "hurry"}),
    "krishna": frozenset({"krisna", "krsna", "krushna"}),
    "rama": frozenset({"ram", "raama"}),
}

DEFAULT_BUFFER_CAP = 500
DEFAULT_BUFFER_KEEP = 200


@dataclass(frozen=True)
class MantraTemplate:
    """Ordered target words plus per-word alternate spellings. Immutable."""
    words: Tuple[str, ...]
    alternates: Mapping[str, FrozenSet[str]] = field(default_factory=dict)

    def __post_init__(self):
        words = tuple(normalize_transcript(w) for w in self.words)
        if not words:
            raise ValueError("Mantra template must contain at least one word")
        if any(not w or " " in w for w in words):
            raise ValueError(f"Template words must be single non-empty words: {self.words!r}")
        alternates = {
            normalize_transcript(k): frozenset(normalize_transcript(v) for v in vs)
            for k, vs in dict(self.alternates).items()
        }
        object.__setattr__(self, "words", words)
        object.__setattr__(self, "alternates", MappingProxyType(alternates))

    def __len__(self) -> int:
        return len(self.words)

    def __getitem__(self, index: int) -> str:
        return self.words[index]

    def alternates_for(self, word: str) -> FrozenSet[str]:
        return self.alternates.get(word, frozenset())

    def __hash__(self) -> int:
        return hash(self.words)

    @classmethod
    def from_text(cls, text: str, alternates: Optional[Mapping[str, Iterable[str]]] = None) -> "MantraTemplate":
        """Build a template from a phrase, e.g. an env override."""
        return cls(
            words=tuple(normalize_transcript(text).split()),
            alternates={k: frozenset(v) for k, v in (alternates or {}).items()},
        )


DEFAULT_TEMPLATE = MantraTemplate(words=MAHA_MANTRA_WORDS, alternates=MAHA_MANTRA_ALTERNATES)


@dataclass(frozen=True)
class EngineConfig:
    """Configuration injected into ChantEngine at construction."""
    template: MantraTemplate = DEFAULT_TEMPLATE
    distance_threshold: int = DEFAULT_DISTANCE_THRESHOLD
    buffer_cap: int = DEFAULT_BUFFER_CAP   # max buffered characters
    buffer_keep: int = DEFAULT_BUFFER_KEEP  # characters kept when the cap is exceeded

    def __post_init__(self):
        if self.distance_threshold < 0:
            raise ValueError("distance_threshold must be >= 0")
        if self.buffer_cap <= 0:
            raise ValueError("buffer_cap must be > 0")
        if not 0 <= self.buffer_keep <= self.buffer_cap:
            raise ValueError("buffer_keep must be between 0 and buffer_cap")
