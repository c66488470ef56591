"""
Per-provider match patterns.

Each registered provider contributes its name and aliases. Every term is
resolved once, at registration, into an immutable pattern holding a
case-insensitive regex for the raw text and the stemmed token sequence for
the preprocessed text.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .preprocessor import preprocess
from .providers import CapabilityProvider

logger = logging.getLogger("task-router.patterns")


@dataclass(frozen=True)
class CapabilityPattern:
    term: str
    regex: re.Pattern
    stems: Tuple[str, ...]

    def matches(self, text: str, tokens: Sequence[str]) -> bool:
        if self.regex.search(text):
            return True
        return contains_run(tokens, self.stems)


def contains_run(tokens: Sequence[str], run: Tuple[str, ...]) -> bool:
    """True if run appears as a contiguous subsequence of tokens."""
    if not run or len(run) > len(tokens):
        return False
    width = len(run)
    return any(tuple(tokens[i:i + width]) == run for i in range(len(tokens) - width + 1))


def _term_regex(term: str) -> re.Pattern:
    """Build a regex matching the term as whole words, tolerant of _ - and spaces."""
    words = [re.escape(w) for w in re.split(r"[\s_\-]+", term.strip()) if w]
    return re.compile(r"\b" + r"[\s_\-]+".join(words) + r"\b", re.IGNORECASE)


def _terms_for(provider: CapabilityProvider) -> List[str]:
    terms = [provider.name]
    terms.extend(provider.aliases)
    seen = set()
    unique = []
    for term in terms:
        key = term.strip().lower()
        if key and key not in seen:
            seen.add(key)
            unique.append(term.strip())
    return unique


def build_patterns(provider: CapabilityProvider) -> Tuple[CapabilityPattern, ...]:
    """Build the pattern set for one provider."""
    patterns = []
    for term in _terms_for(provider):
        patterns.append(
            CapabilityPattern(
                term=term,
                regex=_term_regex(term),
                stems=tuple(preprocess(term.replace("_", " "))),
            )
        )
    return tuple(patterns)


class PatternRegistry:
    """Ordered, immutable mapping of provider name to its pattern set."""

    def __init__(self, providers: Iterable[CapabilityProvider]) -> None:
        entries = []
        for provider in providers:
            entries.append((provider.name, build_patterns(provider)))
        self._entries: Tuple[Tuple[str, Tuple[CapabilityPattern, ...]], ...] = tuple(entries)
        logger.info(f"Built patterns for {len(self._entries)} providers")

    def __len__(self) -> int:
        return len(self._entries)

    def patterns_for(self, name: str) -> Tuple[CapabilityPattern, ...]:
        for provider_name, patterns in self._entries:
            if provider_name == name:
                return patterns
        return ()

    def match(self, text: str, tokens: Sequence[str]) -> Optional[Tuple[str, str]]:
        """
        Return (provider name, matched term) for the first provider in
        registration order with a matching pattern, or None.
        """
        for provider_name, patterns in self._entries:
            for pattern in patterns:
                if pattern.matches(text, tokens):
                    return provider_name, pattern.term
        return None
