"""
Tests for the tool dispatcher.

Uses in-process fake providers (no network).
"""

import asyncio

import pytest

from task_router.dispatcher import ToolDispatcher, limit_tokens
from task_router.errors import ExecutionError, NotFoundError, ValidationError
from task_router.models import ClassificationResult, Intent, PerformanceMode
from task_router.modes import MODE_CONFIGS
from task_router.providers import CapabilityProvider


class EchoTool(CapabilityProvider):
    name = "echo"
    description = "Echoes the query"

    def __init__(self):
        self.calls = []

    async def execute(self, query, mode=None):
        self.calls.append((query, mode))
        return f"echo: {query}"


class FailingTool(CapabilityProvider):
    name = "failing"

    def __init__(self, error):
        self.error = error

    async def execute(self, query, mode=None):
        raise self.error


class SlowTool(CapabilityProvider):
    name = "slow"

    async def execute(self, query, mode=None):
        await asyncio.sleep(1)
        return "too late"


class WordyTool(CapabilityProvider):
    name = "wordy"

    async def execute(self, query, mode=None):
        return " ".join(f"w{i}" for i in range(300))


def _tool(name):
    return ClassificationResult(intent=Intent.TOOL, tool_name=name, confidence=0.9)


GENERAL = ClassificationResult(intent=Intent.GENERAL)


class TestLimitTokens:

    def test_truncates(self):
        assert limit_tokens("one two three four", 2) == "one two..."

    def test_keeps_short_text(self):
        assert limit_tokens("one two", 2) == "one two"
        assert limit_tokens("", 5) == ""

    def test_keeps_layout_before_cut(self):
        assert limit_tokens("a\nb  c d", 3) == "a\nb  c..."


class TestRegistration:

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            ToolDispatcher([EchoTool(), EchoTool()])

    def test_nameless_provider_rejected(self):
        class Nameless(CapabilityProvider):
            async def execute(self, query, mode=None):
                return ""

        with pytest.raises(ValidationError):
            ToolDispatcher([Nameless()])

    def test_tools_info(self):
        info = ToolDispatcher([EchoTool(), WordyTool()]).tools_info()
        assert [(i.name, i.description) for i in info] == [
            ("echo", "Echoes the query"),
            ("wordy", "No description available"),
        ]


class TestDispatch:

    @pytest.mark.asyncio
    async def test_tool_intent(self):
        echo = EchoTool()
        config = MODE_CONFIGS[PerformanceMode.BALANCED]
        result = await ToolDispatcher([echo]).dispatch(_tool("echo"), "hi", config)
        assert result == "echo: hi"
        assert echo.calls == [("hi", config)]

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        with pytest.raises(NotFoundError, match="tool missing not found"):
            await ToolDispatcher([EchoTool()]).dispatch(_tool("missing"), "hi")

    @pytest.mark.asyncio
    async def test_general_intent_uses_responder(self):
        echo = EchoTool()
        result = await ToolDispatcher([echo]).dispatch(GENERAL, "hello")
        assert "echo" in result
        assert echo.calls == []

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self):
        dispatcher = ToolDispatcher([FailingTool(RuntimeError("backend unavailable"))])
        with pytest.raises(ExecutionError) as exc_info:
            await dispatcher.dispatch(_tool("failing"), "hi")
        assert exc_info.value.tool_name == "failing"
        assert exc_info.value.detail == "backend unavailable"
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_execution_error_gets_tool_name(self):
        dispatcher = ToolDispatcher([FailingTool(ExecutionError("Pokemon 'zzz' not found"))])
        with pytest.raises(ExecutionError) as exc_info:
            await dispatcher.dispatch(_tool("failing"), "zzz")
        assert exc_info.value.tool_name == "failing"
        assert exc_info.value.detail == "Pokemon 'zzz' not found"

    @pytest.mark.asyncio
    async def test_timeout(self):
        dispatcher = ToolDispatcher([SlowTool()], timeout=0.01)
        with pytest.raises(ExecutionError, match="timed out"):
            await dispatcher.dispatch(_tool("slow"), "hi")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode,limit", [
        (PerformanceMode.FAST, 100),
        (PerformanceMode.BALANCED, 200),
        (PerformanceMode.QUALITY, 500),
    ])
    async def test_response_limited_by_mode(self, mode, limit):
        result = await ToolDispatcher([WordyTool()]).dispatch(_tool("wordy"), "go", MODE_CONFIGS[mode])
        if limit < 300:
            assert result.endswith("...")
            assert len(result.split()) == limit
        else:
            assert len(result.split()) == 300
