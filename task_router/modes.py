"""
Performance mode controller.

Holds the active mode and the configuration bound to it. Fast and balanced
disable vector scoring and differ only in response verbosity; quality
enables vector scoring and allows longer responses.
"""

import logging
from typing import Dict, List, Union

from .errors import ValidationError
from .models import ModeDescription, PerformanceMode, PerformanceModeConfig

logger = logging.getLogger("task-router.modes")

MODE_CONFIGS: Dict[PerformanceMode, PerformanceModeConfig] = {
    PerformanceMode.FAST: PerformanceModeConfig(
        mode=PerformanceMode.FAST,
        use_vector_scoring=False,
        max_response_tokens=100,
    ),
    PerformanceMode.BALANCED: PerformanceModeConfig(
        mode=PerformanceMode.BALANCED,
        use_vector_scoring=False,
        max_response_tokens=200,
    ),
    PerformanceMode.QUALITY: PerformanceModeConfig(
        mode=PerformanceMode.QUALITY,
        use_vector_scoring=True,
        max_response_tokens=500,
    ),
}

MODE_DESCRIPTIONS: List[ModeDescription] = [
    ModeDescription(
        mode=PerformanceMode.FAST,
        description="Fastest responses using name and alias pattern matching",
        use_case="Quick queries, real-time chat",
        features=["Pattern matching", "No similarity scoring", "Concise responses"],
    ),
    ModeDescription(
        mode=PerformanceMode.BALANCED,
        description="Pattern matching with conversational responses",
        use_case="General purpose, production use",
        features=["Pattern matching", "Stemmed token matching", "Caching"],
    ),
    ModeDescription(
        mode=PerformanceMode.QUALITY,
        description="Adds vector-similarity routing and detailed responses",
        use_case="Complex queries, detailed analysis",
        features=["Pattern matching", "Vector similarity fallback", "Long-form responses"],
    ),
]


def parse_mode(value: Union[str, PerformanceMode, None]) -> PerformanceMode:
    """Convert a mode name into a PerformanceMode, raising ValidationError if unknown."""
    if isinstance(value, PerformanceMode):
        return value
    try:
        return PerformanceMode(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(m.value for m in PerformanceMode)
        raise ValidationError(f"Invalid performance mode: {value!r} (expected one of: {valid})")


class PerformanceModeController:
    """Owns the single active PerformanceModeConfig."""

    def __init__(self, mode: Union[str, PerformanceMode] = PerformanceMode.BALANCED) -> None:
        self._config = MODE_CONFIGS[parse_mode(mode)]

    @property
    def mode(self) -> PerformanceMode:
        return self._config.mode

    @property
    def config(self) -> PerformanceModeConfig:
        """The active config. Immutable, so callers may keep it as a snapshot."""
        return self._config

    def set_mode(self, mode: Union[str, PerformanceMode]) -> PerformanceModeConfig:
        """Switch the active mode. Does not touch the cache."""
        new_mode = parse_mode(mode)
        old_mode = self._config.mode
        self._config = MODE_CONFIGS[new_mode]
        if new_mode != old_mode:
            logger.info(f"Performance mode switched from {old_mode.value} to {new_mode.value}")
        return self._config

    def describe(self) -> List[ModeDescription]:
        return list(MODE_DESCRIPTIONS)
