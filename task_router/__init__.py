"""
Task router.

Routes a free-text task to a registered capability provider or to a
built-in general responder, memoizing responses per performance mode.

Usage:
    from task_router import Agent
    from task_router.tools import PokemonTool

    agent = Agent(tools=[PokemonTool()])
    await agent.initialize()
    result = await agent.process_task("Tell me about Pikachu")
    print(result.result, result.cached, result.processing_time)
"""

from .agent import Agent
from .cache import CacheManager, cache_key
from .classifier import IntentClassifier
from .dispatcher import ToolDispatcher
from .errors import (
    ExecutionError,
    NotFoundError,
    TaskRouterError,
    UninitializedError,
    ValidationError,
)
from .models import (
    AgentStatus,
    CacheStats,
    ClassificationResult,
    Intent,
    PerformanceMode,
    PerformanceModeConfig,
    TaskResult,
    ToolInfo,
)
from .modes import PerformanceModeController
from .preprocessor import preprocess
from .providers import CapabilityProvider

__all__ = [
    "Agent",
    "AgentStatus",
    "CacheManager",
    "CacheStats",
    "CapabilityProvider",
    "ClassificationResult",
    "ExecutionError",
    "Intent",
    "IntentClassifier",
    "NotFoundError",
    "PerformanceMode",
    "PerformanceModeConfig",
    "PerformanceModeController",
    "TaskResult",
    "TaskRouterError",
    "ToolDispatcher",
    "ToolInfo",
    "UninitializedError",
    "ValidationError",
    "cache_key",
    "preprocess",
]
