"""
Text normalization and tokenization.

Lowercases, strips punctuation, splits on word boundaries and reduces each
token with a Porter suffix-stripping stemmer. Deterministic and free of I/O;
the token sequence feeds both pattern matching and vector scoring.
"""

import re
from typing import List

from nltk.stem.porter import PorterStemmer

_APOSTROPHES = re.compile(r"['’]")
_PUNCTUATION = re.compile(r"[^\w\s]")
_TOKEN = re.compile(r"\w+")

# Original 1980 rules, without the NLTK irregular-form extensions
_STEMMER = PorterStemmer(mode=PorterStemmer.ORIGINAL_ALGORITHM)


def normalize(text: str) -> str:
    """Lowercase and collapse whitespace. Used for cache keys."""
    return " ".join((text or "").lower().split())


def tokenize(text: str) -> List[str]:
    """Lowercase, drop punctuation and split into word tokens (no stemming)."""
    if not text or not text.strip():
        return []
    cleaned = _APOSTROPHES.sub("", text.lower())
    cleaned = _PUNCTUATION.sub(" ", cleaned)
    return _TOKEN.findall(cleaned)


def preprocess(text: str) -> List[str]:
    """Return the ordered, stemmed token sequence for text."""
    return [stem(token) for token in tokenize(text)]




def stem(word: str) -> str:
    """Reduce a lowercase token to its Porter stem. Tokens of two characters or fewer are kept."""
    if len(word) <= 2:
        return word
    return _STEMMER.stem(word, to_lowercase=False)
