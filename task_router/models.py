"""
Pydantic models for the task router.

Defines intents, performance modes, classification results and the
payloads returned to callers of the Agent.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Intent(str, Enum):
    """Routing decision for a task."""

    TOOL = "tool"
    GENERAL = "general"


class PerformanceMode(str, Enum):
    """Named configurations trading classification recall for latency."""

    FAST = "fast"
    BALANCED = "balanced"
    QUALITY = "quality"


class ClassificationResult(BaseModel):
    """Result of classifying a task string."""

    intent: Intent
    tool_name: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class PerformanceModeConfig(BaseModel):
    """Strategy parameters bound to a performance mode."""

    model_config = ConfigDict(frozen=True)

    mode: PerformanceMode
    use_vector_scoring: bool
    max_response_tokens: int = Field(gt=0)


class CacheStats(BaseModel):
    """Counters reported by the CacheManager."""

    hits: int = 0
    misses: int = 0
    keys: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class TaskResult(BaseModel):
    """Result of Agent.process_task."""

    result: str
    cached: bool
    processing_time: float = Field(description="Elapsed milliseconds")
    performance_mode: PerformanceMode


class ToolInfo(BaseModel):
    name: str
    description: str


class AgentStatus(BaseModel):
    initialized: bool
    performance_mode: PerformanceMode
    tools_count: int
    vector_scoring: bool
    cache: CacheStats


class ModeDescription(BaseModel):
    mode: PerformanceMode
    description: str
    use_case: str
    features: List[str] = Field(default_factory=list)
