"""
Deterministic two-tier intent classifier.

Tier 1 tests each provider's name/alias patterns in registration order; the
first provider with a matching pattern wins. Tier 2, enabled only when the
active mode uses vector scoring, falls back to cosine similarity against
per-provider anchors. Anything else is a general task. No I/O occurs here.
"""

import logging
from typing import Iterable, Optional

from .models import ClassificationResult, Intent, PerformanceModeConfig
from .patterns import PatternRegistry
from .preprocessor import preprocess
from .providers import CapabilityProvider
from .scoring import DEFAULT_THRESHOLD, NullScorer, Scorer, VectorScorer

logger = logging.getLogger("task-router.classifier")

PATTERN_CONFIDENCE = 0.9


class IntentClassifier:
    """Routes text to a provider or to the general responder."""

    def __init__(
        self,
        providers: Iterable[CapabilityProvider],
        threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        providers = list(providers)
        self.patterns = PatternRegistry(providers)
        self._null_scorer: Scorer = NullScorer()
        self._vector_scorer: Scorer = VectorScorer(providers, threshold=threshold)

    def scorer_for(self, config: Optional[PerformanceModeConfig]) -> Scorer:
        """Select the fallback strategy for a mode config."""
        if config is not None and config.use_vector_scoring:
            return self._vector_scorer
        return self._null_scorer

    def classify(
        self, text: str, config: Optional[PerformanceModeConfig] = None
    ) -> ClassificationResult:
        tokens = preprocess(text)
        if not tokens:
            return ClassificationResult(intent=Intent.GENERAL)

        matched = self.patterns.match(text, tokens)
        if matched is not None:
            tool_name, term = matched
            logger.debug(f"Pattern '{term}' routed task to {tool_name}")
            return ClassificationResult(
                intent=Intent.TOOL,
                tool_name=tool_name,
                confidence=PATTERN_CONFIDENCE,
            )

        best = self.scorer_for(config).best_match(tokens)
        if best is not None:
            tool_name, score = best
            logger.debug(f"Vector similarity {score} routed task to {tool_name}")
            return ClassificationResult(
                intent=Intent.TOOL,
                tool_name=tool_name,
                confidence=score,
            )

        return ClassificationResult(intent=Intent.GENERAL)
