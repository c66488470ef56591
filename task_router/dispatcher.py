"""
Resolves a classification to a capability provider and invokes it.

Provider calls run as asyncio tasks bounded by a timeout; any provider
failure surfaces as ExecutionError. General intents go to the built-in
responder. Responses are capped at the mode's max_response_tokens.
"""

import asyncio
import logging
import re
from typing import Dict, Iterable, List, Optional

from .errors import ExecutionError, NotFoundError, ValidationError
from .models import ClassificationResult, Intent, PerformanceModeConfig, ToolInfo
from .providers import CapabilityProvider
from .responder import GeneralResponder

logger = logging.getLogger("task-router.dispatcher")

DEFAULT_TIMEOUT = 10.0

_WORD = re.compile(r"\S+")


def limit_tokens(text: str, max_tokens: int) -> str:
    """Cut text after max_tokens whitespace-separated tokens, keeping layout."""
    end = None
    for count, match in enumerate(_WORD.finditer(text), start=1):
        if count == max_tokens:
            end = match.end()
        elif count > max_tokens:
            return text[:end].rstrip() + "..."
    return text


class ToolDispatcher:
    """Owns the registered providers and the general responder."""

    def __init__(
        self,
        providers: Iterable[CapabilityProvider],
        timeout: float = DEFAULT_TIMEOUT,
        responder: Optional[GeneralResponder] = None,
    ) -> None:
        self._providers: Dict[str, CapabilityProvider] = {}
        for provider in providers:
            if not provider.name:
                raise ValidationError(f"Provider must have a name: {provider.__class__.__name__}")
            if provider.name in self._providers:
                raise ValidationError(f"Duplicate provider name: {provider.name}")
            self._providers[provider.name] = provider
            logger.debug(f"Registered provider {provider.name}")

        self.timeout = timeout
        self.responder = responder or GeneralResponder(list(self._providers))

    @property
    def providers(self) -> List[CapabilityProvider]:
        """Providers in registration order."""
        return list(self._providers.values())

    def get(self, name: str) -> Optional[CapabilityProvider]:
        return self._providers.get(name)

    def tools_info(self) -> List[ToolInfo]:
        return [
            ToolInfo(name=p.name, description=p.description or "No description available")
            for p in self._providers.values()
        ]

    async def dispatch(
        self,
        result: ClassificationResult,
        query: str,
        config: Optional[PerformanceModeConfig] = None,
    ) -> str:
        if result.intent == Intent.TOOL:
            output = await self._execute(result.tool_name, query, config)
        else:
            output = self.responder.respond(query, config)

        if config is not None:
            output = limit_tokens(output, config.max_response_tokens)
        return output

    async def _execute(
        self, tool_name: Optional[str], query: str, config: Optional[PerformanceModeConfig]
    ) -> str:
        provider = self._providers.get(tool_name or "")
        if provider is None:
            raise NotFoundError(f"tool {tool_name} not found")

        logger.info(f"Executing task with tool: {tool_name}")
        task = asyncio.ensure_future(provider.execute(query, config))
        try:
            return await asyncio.wait_for(task, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Tool {tool_name} timed out after {self.timeout}s")
            raise ExecutionError(f"timed out after {self.timeout}s", tool_name=tool_name)
        except ExecutionError as e:
            if e.tool_name is None:
                e.tool_name = tool_name
            logger.error(f"Tool {tool_name} failed: {e.detail}")
            raise
        except Exception as e:
            logger.error(f"Tool {tool_name} raised unexpectedly: {e}", exc_info=True)
            raise ExecutionError(str(e) or e.__class__.__name__, tool_name=tool_name) from e
