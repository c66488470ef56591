#!/usr/bin/env python3
"""
Task Router MCP Server.

Exposes the Agent over MCP: `run_task(task="...")` routes free text to a
capability provider or the general responder, and a few management tools
report status and manage the response cache.

Port: 8890 (configurable via TASK_ROUTER_MCP_PORT)
Transport: SSE
"""

import logging
import os
import sys
from typing import Any, Dict, List, Optional

from fastmcp import FastMCP

# Entry-point module: absolute imports, as when run as a script
from task_router.agent import Agent
from task_router.errors import TaskRouterError
from task_router.tools import PokemonTool

logger = logging.getLogger("task-router.mcp")

# Configuration
MCP_ENABLED = os.getenv("TASK_ROUTER_MCP_ENABLED", "false").lower() == "true"
MCP_PORT = int(os.getenv("TASK_ROUTER_MCP_PORT", "8890"))
MCP_HOST = os.getenv("TASK_ROUTER_MCP_HOST", "0.0.0.0")
LOG_LEVEL = os.getenv("TASK_ROUTER_LOG_LEVEL", "INFO").upper()
SWEEP_INTERVAL = float(os.getenv("TASK_ROUTER_CACHE_SWEEP_INTERVAL", "60"))

mcp = FastMCP(name="task-router")

agent = Agent(tools=[PokemonTool()], sweep_interval=SWEEP_INTERVAL)


async def _ready_agent() -> Agent:
    if not agent.is_initialized:
        await agent.initialize()
    return agent


def _error_payload(error: TaskRouterError) -> Dict[str, Any]:
    return {"error": str(error), "status_code": error.status_code}


@mcp.tool()
async def run_task(task: str, mode: Optional[str] = None) -> Dict[str, Any]:
    """
    Answer a free-text task.

    The task is routed to a registered tool (for example Pokemon lookups)
    when it names one, otherwise a general response is composed. Repeated
    tasks are served from a cache scoped to the performance mode.

    Args:
        task: Natural language request.
        mode: Optional performance mode for this and later calls:
            "fast", "balanced" or "quality".

    Returns:
        {"result", "cached", "processing_time", "performance_mode"} on
        success, or {"error", "status_code"} on failure.
    """
    logger.info(f"Tool called: run_task(task='{(task or '')[:80]}...')")
    try:
        ready = await _ready_agent()
        result = await ready.process_task(task, mode=mode)
    except TaskRouterError as e:
        logger.warning(f"run_task rejected: {e}")
        return _error_payload(e)
    return result.model_dump(mode="json")


@mcp.tool()
async def list_tools() -> List[Dict[str, str]]:
    """List registered tools with their descriptions."""
    ready = await _ready_agent()
    return [info.model_dump() for info in ready.get_tools_info()]


@mcp.tool()
async def agent_status() -> Dict[str, Any]:
    """Report initialization, active mode, tool count and cache counters."""
    ready = await _ready_agent()
    status = ready.get_status()
    payload = status.model_dump(mode="json")
    payload["cache"]["hit_rate"] = round(status.cache.hit_rate, 4)
    return payload


@mcp.tool()
async def cache_stats() -> Dict[str, Any]:
    """Response cache counters and keys."""
    stats = agent.cache.stats()
    return {
        **stats.model_dump(),
        "hit_rate": round(stats.hit_rate, 4),
        "cached_keys": agent.cache.keys(),
    }


@mcp.tool()
async def clear_cache() -> Dict[str, str]:
    """Drop every cached response and reset the counters."""
    agent.cache.clear()
    logger.info("Response cache cleared")
    return {"message": "Cache cleared successfully"}


@mcp.tool()
async def performance_modes() -> Dict[str, Any]:
    """Describe the available performance modes and the active one."""
    return {
        "current_mode": agent.performance_mode.value,
        "available_modes": [m.model_dump(mode="json") for m in agent.get_performance_modes()],
    }


def main():
    """Main entry point."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not MCP_ENABLED:
        logger.warning("=" * 60)
        logger.warning("Task Router MCP Server is DISABLED")
        logger.warning("To enable: export TASK_ROUTER_MCP_ENABLED=true")
        logger.warning("=" * 60)
        sys.exit(0)

    logger.info("=" * 60)
    logger.info("Starting FastMCP Task Router Server")
    logger.info(f"Host: {MCP_HOST}")
    logger.info(f"Port: {MCP_PORT}")
    logger.info(f"Performance mode: {agent.performance_mode.value}")
    logger.info(f"Cache sweep interval: {agent.sweep_interval}s")
    logger.info("=" * 60)

    mcp.run(transport="sse", host=MCP_HOST, port=MCP_PORT)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
