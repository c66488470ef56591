"""
Pokemon lookup provider backed by PokeAPI.

Extracts a species name from the task, fetches /pokemon/{name} and
/pokemon-species/{id}, and formats the answer for the active performance
mode. A query that names two or more species alongside a comparison cue
(vs, versus, against, matchup, compare) gets a side-by-side matchup of up
to three of them. Lookups are memoized per species with a TTL,
independently of the Agent's response cache.
"""

import logging
import os
import re
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import BaseModel, Field

from ..errors import ExecutionError
from ..models import PerformanceMode, PerformanceModeConfig
from ..providers import CapabilityProvider

logger = logging.getLogger("task-router.tools.pokemon")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def _get_config() -> Dict[str, Any]:
    return {
        "pokeapi_url": os.getenv("POKEAPI_URL", "https://pokeapi.co/api/v2"),
        "cache_ttl": int(os.getenv("POKEAPI_CACHE_TTL", "3600")),
        "timeout": float(os.getenv("POKEAPI_TIMEOUT", "10")),
    }


KNOWN_SPECIES = (
    "pikachu", "charizard", "bulbasaur", "squirtle", "charmander",
    "blastoise", "venusaur", "caterpie", "weedle", "pidgey",
    "rattata", "spearow", "ekans", "sandshrew", "nidoran",
    "clefairy", "vulpix", "jigglypuff", "zubat", "oddish",
    "venonat", "diglett", "meowth", "psyduck", "mankey",
    "growlithe", "poliwag", "abra", "machop", "bellsprout",
    "tentacool", "geodude", "ponyta", "slowpoke", "magnemite",
    "grimer", "shellder", "gastly", "onix", "drowzee",
    "krabby", "voltorb", "exeggcute", "cubone", "hitmonlee",
    "hitmonchan", "lickitung", "koffing", "rhyhorn", "chansey",
    "tangela", "kangaskhan", "horsea", "goldeen", "staryu",
    "scyther", "jynx", "electabuzz", "magmar", "pinsir",
    "tauros", "magikarp", "gyarados", "lapras", "eevee",
    "vaporeon", "jolteon", "flareon", "porygon", "omanyte",
    "kabuto", "aerodactyl", "snorlax", "articuno", "zapdos",
    "moltres", "dratini", "dragonair", "dragonite", "mewtwo",
    "mew", "lugia", "lucario", "gengar", "alakazam",
)

_EXCLUDED_WORDS = frozenset({
    "the", "what", "how", "where", "when", "why", "is", "are",
    "can", "does", "egg", "group", "pokemon", "pokémon", "info",
    "about", "stats", "evolution", "tell", "me", "good", "best",
    "first", "last", "some", "any", "all", "type", "types", "this",
    "that", "battle", "legendary",
})

_NAME_PATTERNS = [
    re.compile(r"(?:about|info|information about|details about|stats for|data on)\s+([a-z]+)"),
    re.compile(r"pok[eé]mon\s+([a-z]+)"),
    re.compile(r"^([a-z]+)\s+(?:pok[eé]mon|stats|evolution|info)"),
    re.compile(r"([a-z]+)(?:'s|\s+stats|\s+abilities|\s+type)"),
    re.compile(r"does\s+([a-z]+)\s+(?:belong|evolve)"),
    re.compile(r"\b([a-z]+)\s+(?:belong\s+to|evolve|evolution)"),
    re.compile(r"what\s+(?:is|are)\s+([a-z]+)"),
]

_SPECIES_PATTERN = re.compile(r"\b(" + "|".join(sorted(KNOWN_SPECIES, key=len, reverse=True)) + r")\b")

_COMPARISON_CUE = re.compile(r"\b(?:vs|versus|against|matchup|compare)\b")

MAX_MATCHUP = 3

_STAT_LABELS = {
    "hp": "HP",
    "attack": "Attack",
    "defense": "Defense",
    "special-attack": "Sp. Attack",
    "special-defense": "Sp. Defense",
    "speed": "Speed",
}


def extract_pokemon_name(query: str) -> Optional[str]:
    """Best-effort species name from a free-text query, or None."""
    text = query.lower().strip()
    if not text:
        return None

    words = text.split()
    if len(words) == 1:
        word = re.sub(r"[^a-z\-]", "", words[0])
        return word if word and word not in _EXCLUDED_WORDS else None

    match = _SPECIES_PATTERN.search(text)
    if match:
        return match.group(1)

    for pattern in _NAME_PATTERNS:
        match = pattern.search(text)
        if match:
            candidate = match.group(1)
            if candidate not in _EXCLUDED_WORDS and len(candidate) > 2:
                return candidate
    return None


def extract_pokemon_names(query: str) -> List[str]:
    """Every known species named in the query, in order of first mention."""
    names: List[str] = []
    for match in _SPECIES_PATTERN.finditer(query.lower()):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names


def is_matchup_query(query: str) -> bool:
    return bool(_COMPARISON_CUE.search(query.lower()))


def _title(value: str) -> str:
    return " ".join(part.capitalize() for part in value.split("-"))


class PokemonInfo(BaseModel):
    """Flattened PokeAPI record for one species."""

    name: str
    id: int
    height: float = Field(description="Meters")
    weight: float = Field(description="Kilograms")
    types: List[str] = Field(default_factory=list)
    abilities: List[str] = Field(default_factory=list)
    base_stats: Dict[str, int] = Field(default_factory=dict)
    description: str = "Description not available"
    egg_groups: List[str] = Field(default_factory=list)
    generation: str = "Unknown"
    habitat: str = "Unknown"
    capture_rate: Optional[int] = None

    @property
    def total_stats(self) -> int:
        return sum(self.base_stats.values())

    @property
    def type_text(self) -> str:
        return "/".join(t.capitalize() for t in self.types) or "Unknown"


class PokemonTool(CapabilityProvider):
    """Looks up Pokemon species data from PokeAPI."""

    name = "pokemon_info"
    description = "Pokemon stats, types, abilities and species details"
    aliases = ("pokemon", "pokémon", "pokedex") + KNOWN_SPECIES
    keywords = (
        "stats", "abilities", "evolution", "evolve", "species", "egg",
        "generation", "habitat", "trainer", "battle", "capture", "legendary",
    )

    def __init__(
        self,
        base_url: Optional[str] = None,
        cache_ttl: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> None:
        cfg = _get_config()
        self.base_url = (base_url or cfg["pokeapi_url"]).rstrip("/")
        self.cache_ttl = cache_ttl if cache_ttl is not None else cfg["cache_ttl"]
        self.timeout = timeout if timeout is not None else cfg["timeout"]
        self._cache: Dict[str, Tuple[float, PokemonInfo]] = {}

    def clear_cache(self) -> None:
        self._cache.clear()

    def _get_cached(self, key: str) -> Optional[PokemonInfo]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        ts, info = entry
        if time.time() - ts > self.cache_ttl:
            del self._cache[key]
            return None
        return info

    def _set_cached(self, key: str, info: PokemonInfo) -> None:
        self._cache[key] = (time.time(), info)

    async def execute(self, query: str, mode: Optional[PerformanceModeConfig] = None) -> str:
        performance_mode = mode.mode if mode is not None else PerformanceMode.BALANCED
        logger.info(f"Pokemon tool executing query: {query[:50]}")

        names = extract_pokemon_names(query)
        if len(names) >= 2 and is_matchup_query(query):
            return await self._matchup(names[:MAX_MATCHUP], performance_mode)

        name = extract_pokemon_name(query)
        if name is None:
            return self._no_match_response(query, performance_mode)

        info = await self.get_pokemon_info(name)
        if performance_mode == PerformanceMode.FAST:
            return self._format_fast(info)
        if performance_mode == PerformanceMode.QUALITY:
            return self._format_quality(info)
        return self._format_balanced(info, query)

    async def get_pokemon_info(self, name: str) -> PokemonInfo:
        """
        Fetch one species, using the memo when fresh.

        Raises:
            ExecutionError: unknown species or PokeAPI unreachable.
        """
        clean = re.sub(r"\s+", "-", name.lower().strip())
        key = f"pokemon_{clean}"
        cached = self._get_cached(key)
        if cached is not None:
            logger.info(f"Returning cached data for {clean}")
            return cached

        logger.info(f"Fetching Pokemon data for: {clean}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(f"{self.base_url}/pokemon/{clean}")
                if resp.status_code == 404:
                    raise ExecutionError(f"Pokemon '{clean}' not found")
                if resp.status_code != 200:
                    raise ExecutionError(f"PokeAPI returned HTTP {resp.status_code}")
                data = resp.json()

                species: Dict[str, Any] = {}
                species_resp = await client.get(f"{self.base_url}/pokemon-species/{data['id']}")
                if species_resp.status_code == 200:
                    species = species_resp.json()
                else:
                    logger.warning(
                        f"Species lookup for {clean} returned HTTP {species_resp.status_code}"
                    )
        except httpx.HTTPError as e:
            logger.error(f"PokeAPI request failed: {e}")
            raise ExecutionError(f"Failed to fetch Pokemon data: {e}")

        info = self._parse(data, species)
        self._set_cached(key, info)
        logger.info(f"Successfully fetched data for {clean}")
        return info

    async def _matchup(self, names: List[str], performance_mode: PerformanceMode) -> str:
        """
        Compare up to MAX_MATCHUP species side by side. Species that fail to
        resolve are skipped.

        Raises:
            ExecutionError: fewer than two species resolved.
        """
        logger.info(f"Handling matchup: {' vs '.join(names)}")
        resolved: List[PokemonInfo] = []
        for name in names:
            try:
                resolved.append(await self.get_pokemon_info(name))
            except ExecutionError as e:
                logger.warning(f"Skipping {name} in matchup: {e.detail}")

        if len(resolved) < 2:
            raise ExecutionError(f"Unable to fetch data for matchup {' vs '.join(names)}")
        return self._format_matchup(resolved, performance_mode)

    @staticmethod
    def _parse(data: Dict[str, Any], species: Dict[str, Any]) -> PokemonInfo:
        flavor = next(
            (
                entry["flavor_text"]
                for entry in species.get("flavor_text_entries", [])
                if entry.get("language", {}).get("name") == "en"
            ),
            None,
        )
        return PokemonInfo(
            name=_title(data["name"]),
            id=data["id"],
            height=data.get("height", 0) / 10,
            weight=data.get("weight", 0) / 10,
            types=[t["type"]["name"] for t in data.get("types", [])],
            abilities=[a["ability"]["name"] for a in data.get("abilities", [])],
            base_stats={s["stat"]["name"]: s["base_stat"] for s in data.get("stats", [])},
            description=" ".join(flavor.split()) if flavor else "Description not available",
            egg_groups=[g["name"] for g in species.get("egg_groups", [])],
            generation=(species.get("generation") or {}).get("name", "Unknown"),
            habitat=(species.get("habitat") or {}).get("name", "Unknown"),
            capture_rate=species.get("capture_rate"),
        )

    # -----------------------------------------------------------------------
    # Formatting
    # -----------------------------------------------------------------------

    @staticmethod
    def _no_match_response(query: str, performance_mode: PerformanceMode) -> str:
        if performance_mode == PerformanceMode.FAST:
            return "Please specify a Pokemon name (e.g. 'Pikachu', 'Charizard')."
        if performance_mode == PerformanceMode.QUALITY:
            return (
                f'I analyzed your query "{query}" but could not identify a specific Pokemon to research. '
                "Please name one, such as Pikachu, Charizard or Mewtwo, and I can cover its base stats, "
                "types, abilities, breeding groups and habitat."
            )
        return (
            "I couldn't identify a specific Pokemon name in your query. Could you tell me which "
            "Pokemon you'd like to know about, for example 'Pikachu' or 'Charizard'?"
        )

    @staticmethod
    def _format_fast(info: PokemonInfo) -> str:
        stats = info.base_stats
        return (
            f"{info.name} (#{info.id}) - {info.type_text} type\n"
            f"Stats: HP {stats.get('hp', '?')}, Atk {stats.get('attack', '?')}, "
            f"Def {stats.get('defense', '?')}, Total: {info.total_stats}\n"
            f"Abilities: {', '.join(info.abilities)}"
        )

    @staticmethod
    def _format_balanced(info: PokemonInfo, query: str) -> str:
        lowered = query.lower()
        if "stat" in lowered or "battle" in lowered:
            intro = f"Let me break down {info.name}'s battle capabilities for you."
        elif "evol" in lowered:
            intro = f"Here's what you need to know about {info.name}."
        else:
            intro = "Here's an overview."

        lines = [
            f"{info.name} is Pokemon #{info.id} ({info.type_text} type). {intro}",
            "",
            f"It stands {info.height}m tall and weighs {info.weight}kg.",
            f"Abilities: {', '.join(_title(a) for a in info.abilities)}.",
            f"Base stat total: {info.total_stats}",
        ]
        for stat, label in _STAT_LABELS.items():
            if stat in info.base_stats:
                lines.append(f"- {label}: {info.base_stats[stat]}")
        return "\n".join(lines)

    @staticmethod
    def _format_quality(info: PokemonInfo) -> str:
        lines = [
            f"**{info.name}** (#{info.id}), {info.type_text} type",
            "",
            info.description,
            "",
            "**Profile:**",
            f"- Height: {info.height}m, Weight: {info.weight}kg",
            f"- Generation: {_title(info.generation)}",
            f"- Habitat: {_title(info.habitat)}",
            f"- Egg groups: {', '.join(_title(g) for g in info.egg_groups) or 'Unknown'}",
        ]
        if info.capture_rate is not None:
            lines.append(f"- Capture rate: {info.capture_rate}")

        lines += ["", "**Abilities:** " + ", ".join(_title(a) for a in info.abilities), "", "**Base stats:**"]
        for stat, label in _STAT_LABELS.items():
            if stat in info.base_stats:
                lines.append(f"- {label}: {info.base_stats[stat]}")
        lines.append(f"- Total: {info.total_stats}")

        if info.base_stats:
            strongest = max(info.base_stats, key=info.base_stats.get)
            lines += [
                "",
                f"{info.name}'s strongest stat is {_STAT_LABELS.get(strongest, _title(strongest))} "
                f"({info.base_stats[strongest]}).",
            ]
        return "\n".join(lines)

    @staticmethod
    def _format_matchup(roster: List[PokemonInfo], performance_mode: PerformanceMode) -> str:
        title = " vs ".join(info.name for info in roster)
        strongest = max(roster, key=lambda info: info.total_stats)
        fastest = max(roster, key=lambda info: info.base_stats.get("speed", 0))

        if performance_mode == PerformanceMode.FAST:
            lines = [title]
            for info in roster:
                lines.append(
                    f"{info.name}: {info.type_text}, Total {info.total_stats}, "
                    f"Speed {info.base_stats.get('speed', '?')}"
                )
            lines.append(f"Higher total: {strongest.name}")
            return "\n".join(lines)

        lines = [f"**{title}**", ""]
        if performance_mode == PerformanceMode.QUALITY:
            for info in roster:
                lines += [
                    f"**{info.name}** (#{info.id}), {info.type_text} type",
                    f"- Base stat total: {info.total_stats}",
                ]
                if info.base_stats:
                    top = max(info.base_stats, key=info.base_stats.get)
                    lines.append(f"- Strongest stat: {_STAT_LABELS.get(top, _title(top))} ({info.base_stats[top]})")
                lines += [
                    f"- Abilities: {', '.join(_title(a) for a in info.abilities)}",
                    "",
                ]
            lines.append("**Base stats:**")

        for stat, label in _STAT_LABELS.items():
            values = " vs ".join(str(info.base_stats.get(stat, "?")) for info in roster)
            lines.append(f"- {label}: {values}")
        lines.append(f"- Total: {' vs '.join(str(info.total_stats) for info in roster)}")
        lines += [
            "",
            f"{strongest.name} has the highest base stat total ({strongest.total_stats}), "
            f"and {fastest.name} is the fastest ({fastest.base_stats.get('speed', '?')} Speed).",
        ]
        return "\n".join(lines)
