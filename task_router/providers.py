"""
Capability provider contract.

A provider is a named, self-contained responder registered with the Agent.
Its name, aliases and keywords are declarative metadata: the classifier
derives match patterns and similarity anchors from them, so adding a
provider needs no classifier change.

Example:
    class WeatherTool(CapabilityProvider):
        name = "weather"
        description = "Current weather for a city"
        aliases = ("forecast",)
        keywords = ("rain", "temperature", "humidity")

        async def execute(self, query, mode=None):
            return "Sunny"
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from .models import PerformanceModeConfig


class CapabilityProvider(ABC):
    """Base class for tools the Agent can route tasks to."""

    # Unique identifier, also matched as a pattern
    name: str = ""

    description: str = ""

    # Synonyms and entity names that route straight to this provider
    aliases: Sequence[str] = ()

    # Representative terms for the similarity anchor (not matched as patterns)
    keywords: Sequence[str] = ()

    @abstractmethod
    async def execute(self, query: str, mode: Optional[PerformanceModeConfig] = None) -> str:
        """
        Answer the query.

        Raises:
            ExecutionError: input is invalid or the upstream source failed.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
