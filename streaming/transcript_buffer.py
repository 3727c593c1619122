"""
Streaming transcript buffer for chant recognition.

Accumulates normalized words from final transcript fragments, checks the
buffer for a complete mantra on every fragment, and drops everything up to the
end of a confirmed match so it is never counted twice. A character cap bounds
memory and rescanning cost: when exceeded, only the most recent
`keep_chars` characters survive, which may lose an old partial match.
"""

import logging
from typing import List, Optional

from core.mantra import EngineConfig
from core.normalization import tokenize
from core.validator import MatchResult, find_match

logger = logging.getLogger(__name__)


class TranscriptBuffer:
    """
    Per-session word buffer.

    - `ingest(text)` appends a fragment and reports whether it completed a chant.
    - Words before the end of a confirmed match are discarded.
    - Character length never exceeds `config.buffer_cap` after an ingest.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Args:
            config: Template, fuzzy threshold and cap settings (defaults if None).
        """
        self.config = config or EngineConfig()
        self._words: List[str] = []
        self._overflow_count = 0
        self._last_result = MatchResult(matched=False)

    def ingest(self, fragment: object) -> bool:
        """
        Append a fragment and validate the buffer.

        Non-string or empty fragments append nothing but still trigger a rescan,
        so ingest("") confirms a second mantra left over from a previous call.
        """
        text = fragment if isinstance(fragment, str) else ""
        self._words.extend(tokenize(text))

        result = find_match(self._words, self.config.template, self.config.distance_threshold)
        self._last_result = result
        if result.matched:
            self._words = self._words[result.consumed_up_to:]

        self._enforce_cap()
        return result.matched

    def rescan(self) -> bool:
        """Validate the remaining buffer without new input."""
        return self.ingest("")

    def _enforce_cap(self) -> None:
        text = self.text
        if len(text) <= self.config.buffer_cap:
            return
        keep = self.config.buffer_keep
        tail = text[len(text) - keep:] if keep else ""
        # Cut landed inside a word: drop the fragment
        if tail and text[len(text) - keep - 1] != " ":
            _, _, tail = tail.partition(" ")
        self._words = tail.split()
        self._overflow_count += 1
        logger.debug("Transcript buffer over %d chars; kept last %d", self.config.buffer_cap, len(self.text))

    @property
    def words(self) -> List[str]:
        """Unconsumed words (copy)."""
        return list(self._words)

    @property
    def text(self) -> str:
        return " ".join(self._words)

    def char_length(self) -> int:
        return len(self.text)

    @property
    def progress(self) -> int:
        """Template words matched in the unconsumed buffer at the last scan."""
        return 0 if self._last_result.matched else self._last_result.progress

    @property
    def overflow_count(self) -> int:
        """Times the cap forced a truncation (for stats)."""
        return self._overflow_count

    def clear(self) -> None:
        """Drop all buffered words (e.g. on mode change)."""
        self._words = []
        self._last_result = MatchResult(matched=False)
