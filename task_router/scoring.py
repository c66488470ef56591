"""
Similarity scoring strategies used when no provider pattern matches.

The active PerformanceModeConfig selects the strategy: NullScorer never
proposes a provider, VectorScorer compares a bag-of-tokens vector of the
query with a precomputed anchor vector per provider using cosine similarity.
"""

import logging
from abc import ABC, abstractmethod
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .preprocessor import preprocess
from .providers import CapabilityProvider

logger = logging.getLogger("task-router.scoring")

DEFAULT_THRESHOLD = 0.35

# Function words carry no routing signal; removed before vectorizing
STOP_WORDS = frozenset(
    preprocess(
        "a an and are about as at be by can could do does for from give how i in is it "
        "its me my of on or please show tell that the this to was what when where which "
        "who why will with would you your"
    )
)


def _vector_tokens(tokens: Iterable[str]) -> List[str]:
    return [t for t in tokens if t not in STOP_WORDS and not t.isdigit()]


class Scorer(ABC):
    """Proposes a provider for a query that matched no pattern."""

    @abstractmethod
    def best_match(self, tokens: Sequence[str]) -> Optional[Tuple[str, float]]:
        """Return (provider name, score) above the threshold, or None."""


class NullScorer(Scorer):
    """Strategy for modes without similarity fallback."""

    def best_match(self, tokens: Sequence[str]) -> Optional[Tuple[str, float]]:
        return None


class VectorScorer(Scorer):
    """Cosine similarity between query and per-provider anchor vectors."""

    def __init__(
        self,
        providers: Iterable[CapabilityProvider],
        threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        self.threshold = threshold
        self._names: List[str] = []
        anchors: List[Counter] = []
        for provider in providers:
            self._names.append(provider.name)
            anchors.append(Counter(_vector_tokens(_anchor_tokens(provider))))

        vocabulary = sorted({token for anchor in anchors for token in anchor})
        self._index: Dict[str, int] = {token: i for i, token in enumerate(vocabulary)}
        self._anchors = np.zeros((len(anchors), len(vocabulary)), dtype=float)
        for row, anchor in enumerate(anchors):
            for token, count in anchor.items():
                self._anchors[row, self._index[token]] = count
        self._anchor_norms = np.linalg.norm(self._anchors, axis=1)
        logger.info(
            f"Vector scorer ready: {len(self._names)} anchors, "
            f"{len(vocabulary)} terms, threshold={threshold}"
        )

    def vectorize(self, tokens: Sequence[str]) -> Tuple[np.ndarray, float]:
        """
        Project tokens onto the anchor vocabulary.

        Returns the vector and the norm of the full query (including tokens
        outside the vocabulary), so unknown words still dilute similarity.
        """
        counts = Counter(_vector_tokens(tokens))
        vector = np.zeros(len(self._index), dtype=float)
        for token, count in counts.items():
            i = self._index.get(token)
            if i is not None:
                vector[i] = count
        norm = float(np.sqrt(sum(c * c for c in counts.values())))
        return vector, norm

    def scores(self, tokens: Sequence[str]) -> Dict[str, float]:
        """Cosine similarity of the query against every provider anchor."""
        vector, norm = self.vectorize(tokens)
        result = {name: 0.0 for name in self._names}
        if norm == 0.0 or not self._names:
            return result
        dots = self._anchors @ vector
        for row, name in enumerate(self._names):
            anchor_norm = self._anchor_norms[row]
            if anchor_norm:
                result[name] = float(dots[row] / (anchor_norm * norm))
        return result

    def best_match(self, tokens: Sequence[str]) -> Optional[Tuple[str, float]]:
        best_name, best_score = None, 0.0
        # Strict > keeps the earliest registered provider on ties
        for name, score in self.scores(tokens).items():
            if score > best_score:
                best_name, best_score = name, score
        if best_name is None or best_score <= self.threshold:
            return None
        return best_name, round(min(best_score, 1.0), 4)


def _anchor_tokens(provider: CapabilityProvider) -> List[str]:
    # Aliases belong to the pattern tier only
    parts = [provider.name.replace("_", " "), provider.description]
    parts.extend(provider.keywords)
    tokens: List[str] = []
    for part in parts:
        tokens.extend(preprocess(part))
    return tokens
