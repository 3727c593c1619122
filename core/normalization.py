import re
import unicodedata
from typing import List, Optional

# Speech APIs return Latin text; IAST transliterations (Kṛṣṇa, Rāma) fold to plain a-z.
_NON_LETTER = re.compile(r'[^a-z\s]')
_WHITESPACE = re.compile(r'\s+')


def normalize_transcript(text: Optional[str]) -> str:
    """
    Normalize a transcript fragment for matching: lowercase, diacritics folded,
    every non-letter removed (not replaced), whitespace collapsed.
    """
    if not text or not isinstance(text, str):
        return ""

    text = unicodedata.normalize("NFKD", text.lower())
    # Drop combining marks left by NFKD (ṛ -> r, ā -> a)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))

    text = _NON_LETTER.sub('', text)
    text = _WHITESPACE.sub(' ', text)

    return text.strip()


def tokenize(text: Optional[str]) -> List[str]:
    """Normalized words of a fragment; empty input gives an empty list."""
    normalized = normalize_transcript(text)
    if not normalized:
        return []
    return normalized.split(' ')
