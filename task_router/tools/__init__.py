"""Built-in capability providers."""

from .pokemon import PokemonTool

__all__ = ["PokemonTool"]
