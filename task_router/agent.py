"""
Agent orchestrating preprocessing, classification, caching and dispatch.

    agent = Agent(tools=[PokemonTool()])
    await agent.initialize()
    result = await agent.process_task("Tell me about Pikachu")

Every Agent owns its cache, mode controller and providers; nothing is
shared between instances.
"""

import asyncio
import functools
import logging
import os
import time
from typing import Any, Dict, Iterable, List, Optional, Union

from .cache import CacheManager, cache_key
from .classifier import IntentClassifier
from .dispatcher import ToolDispatcher
from .errors import ExecutionError, TaskRouterError, UninitializedError, ValidationError
from .models import (
    AgentStatus,
    ModeDescription,
    PerformanceMode,
    PerformanceModeConfig,
    TaskResult,
    ToolInfo,
)
from .modes import PerformanceModeController
from .providers import CapabilityProvider

logger = logging.getLogger("task-router")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def _get_config() -> Dict[str, Any]:
    return {
        "performance_mode": os.getenv("TASK_ROUTER_PERFORMANCE_MODE", "balanced"),
        "cache_ttl": int(os.getenv("TASK_ROUTER_CACHE_TTL", "1800")),
        "cache_max_entries": int(os.getenv("TASK_ROUTER_CACHE_MAX_ENTRIES", "1000")),
        "tool_timeout": float(os.getenv("TASK_ROUTER_TOOL_TIMEOUT", "10")),
        "vector_threshold": float(os.getenv("TASK_ROUTER_VECTOR_THRESHOLD", "0.35")),
        "coalesce": os.getenv("TASK_ROUTER_COALESCE", "true").lower() == "true",
        "cache_sweep_interval": float(os.getenv("TASK_ROUTER_CACHE_SWEEP_INTERVAL", "0")),
    }


def _failure_message(error: ExecutionError) -> str:
    return (
        f"I encountered an error while using the {error.tool_name} tool: {error.detail}. "
        "Please try rephrasing your request."
    )


class Agent:
    """Routes free-text tasks to capability providers or the general responder."""

    def __init__(
        self,
        tools: Iterable[CapabilityProvider] = (),
        performance_mode: Union[str, PerformanceMode, None] = None,
        cache: Optional[CacheManager] = None,
        cache_ttl: Optional[int] = None,
        tool_timeout: Optional[float] = None,
        vector_threshold: Optional[float] = None,
        coalesce: Optional[bool] = None,
        sweep_interval: Optional[float] = None,
    ) -> None:
        cfg = _get_config()
        self.cache_ttl = cache_ttl if cache_ttl is not None else cfg["cache_ttl"]
        self.cache = cache if cache is not None else CacheManager(
            default_ttl=self.cache_ttl, max_entries=cfg["cache_max_entries"]
        )
        self.modes = PerformanceModeController(performance_mode or cfg["performance_mode"])
        self.dispatcher = ToolDispatcher(
            tools, timeout=tool_timeout if tool_timeout is not None else cfg["tool_timeout"]
        )
        self.vector_threshold = vector_threshold if vector_threshold is not None else cfg["vector_threshold"]
        self.coalesce = coalesce if coalesce is not None else cfg["coalesce"]
        # Seconds between expired-entry sweeps; 0 disables the background sweeper
        self.sweep_interval = sweep_interval if sweep_interval is not None else cfg["cache_sweep_interval"]
        self.classifier: Optional[IntentClassifier] = None
        self.is_initialized = False
        self._pending: Dict[str, asyncio.Future] = {}
        self._sweeper: Optional[asyncio.Future] = None

    @property
    def tools(self) -> List[CapabilityProvider]:
        return self.dispatcher.providers

    @property
    def performance_mode(self) -> PerformanceMode:
        return self.modes.mode

    async def initialize(self) -> None:
        """Resolve provider patterns and similarity anchors. Safe to call twice."""
        if self.is_initialized:
            return
        logger.info("Initializing agent...")
        try:
            self.classifier = IntentClassifier(self.tools, threshold=self.vector_threshold)
        except Exception as e:
            logger.error(f"Agent initialization failed: {e}")
            raise
        self.is_initialized = True
        logger.info(
            f"Agent initialized in {self.performance_mode.value} mode with {len(self.tools)} tools"
        )

        if self.sweep_interval > 0 and self._sweeper is None:
            self._sweeper = asyncio.ensure_future(self.cache.run_sweeper(self.sweep_interval))
            logger.info(f"Cache sweeper started (every {self.sweep_interval}s)")

    async def close(self) -> None:
        """Stop the background cache sweeper, if running."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        logger.info("Cache sweeper stopped")

    def set_performance_mode(self, mode: Union[str, PerformanceMode]) -> None:
        """Switch modes. Takes effect on the next process_task call."""
        self.modes.set_mode(mode)

    async def process_task(
        self, query: Optional[str], mode: Union[str, PerformanceMode, None] = None
    ) -> TaskResult:
        """
        Answer a task, serving repeated tasks from the mode-scoped cache.

        Raises:
            UninitializedError: initialize() has not run.
            ValidationError: query is missing or blank, or mode is unknown.
            NotFoundError: the classifier chose a tool that is not registered.
        """
        if not self.is_initialized:
            raise UninitializedError()
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Task parameter is required")
        if mode is not None:
            self.set_performance_mode(mode)

        snapshot = self.modes.config
        start = time.perf_counter()
        logger.info(f"Processing task: {query[:50]}...")

        key = cache_key(query, snapshot.mode)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Returning cached response ({snapshot.mode.value} mode)")
            return self._result(cached, True, start, snapshot)

        try:
            if self.coalesce:
                result = await self._coalesced(query, key, snapshot)
            else:
                result = await self._compute(query, key, snapshot)
        except TaskRouterError:
            raise
        except Exception as e:
            logger.error(f"Task processing failed: {e}", exc_info=True)
            raise

        task_result = self._result(result, False, start, snapshot)
        logger.info(f"Task completed in {task_result.processing_time}ms")
        return task_result

    async def _coalesced(self, query: str, key: str, snapshot: PerformanceModeConfig) -> str:
        """Share one in-flight computation between identical concurrent tasks."""
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._compute(query, key, snapshot))
            self._pending[key] = task
            task.add_done_callback(functools.partial(self._release, key))
        else:
            logger.debug(f"Joining in-flight computation for {key}")
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Future) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]

    async def _compute(self, query: str, key: str, snapshot: PerformanceModeConfig) -> str:
        classification = self.classifier.classify(query, snapshot)
        logger.info(
            f"Intent classification: {classification.intent.value}"
            f" tool={classification.tool_name} confidence={classification.confidence}"
        )

        try:
            result = await self.dispatcher.dispatch(classification, query, snapshot)
        except ExecutionError as e:
            # Failures are reported to the caller but never cached
            return _failure_message(e)

        self.cache.set(key, result, self.cache_ttl)
        return result

    @staticmethod
    def _result(result: str, cached: bool, start: float, snapshot: PerformanceModeConfig) -> TaskResult:
        return TaskResult(
            result=result,
            cached=cached,
            processing_time=round((time.perf_counter() - start) * 1000, 3),
            performance_mode=snapshot.mode,
        )

    def get_tools_info(self) -> List[ToolInfo]:
        return self.dispatcher.tools_info()

    def get_status(self) -> AgentStatus:
        return AgentStatus(
            initialized=self.is_initialized,
            performance_mode=self.performance_mode,
            tools_count=len(self.tools),
            vector_scoring=self.modes.config.use_vector_scoring,
            cache=self.cache.stats(),
        )

    def get_performance_modes(self) -> List[ModeDescription]:
        return self.modes.describe()
