"""
Tests for the similarity fallback strategies.
"""

import pytest

from task_router.preprocessor import preprocess
from task_router.providers import CapabilityProvider
from task_router.scoring import STOP_WORDS, NullScorer, VectorScorer


class _Provider(CapabilityProvider):
    def __init__(self, name, keywords=(), description=""):
        self.name = name
        self.keywords = keywords
        self.description = description

    async def execute(self, query, mode=None):
        return self.name


@pytest.fixture
def weather():
    return _Provider("weather_lookup", keywords=("rain", "temperature", "forecast"))


class TestNullScorer:

    def test_never_matches(self):
        assert NullScorer().best_match(preprocess("rain and temperature")) is None


class TestVectorScorer:
    """Cosine similarity against provider anchors."""

    def test_related_phrasing_scores_above_threshold(self, weather):
        scorer = VectorScorer([weather])
        tokens = preprocess("Will it rain tomorrow, and how hot is the temperature?")
        # rain + temperature shared; tomorrow + hot unknown: 2 / (2 * sqrt(5))
        assert scorer.scores(tokens)["weather_lookup"] == pytest.approx(0.4472, abs=1e-3)
        assert scorer.best_match(tokens) == ("weather_lookup", 0.4472)

    def test_unrelated_phrasing_is_rejected(self, weather):
        scorer = VectorScorer([weather])
        assert scorer.best_match(preprocess("write me a poem about the sea")) is None

    def test_stop_words_only(self, weather):
        scorer = VectorScorer([weather])
        assert scorer.best_match(preprocess("what is it")) is None

    def test_scores_at_or_below_threshold_rejected(self, weather):
        scorer = VectorScorer([weather], threshold=0.4473)
        tokens = preprocess("rain tomorrow hot temperature")
        assert scorer.best_match(tokens) is None

    def test_best_provider_wins(self, weather):
        music = _Provider("music_player", keywords=("song", "album", "playlist"))
        scorer = VectorScorer([weather, music])
        assert scorer.best_match(preprocess("play a song from that album"))[0] == "music_player"

    def test_ties_go_to_earliest_provider(self):
        alpha = _Provider("alpha", keywords=("rain",))
        beta = _Provider("beta", keywords=("rain",))
        assert VectorScorer([alpha, beta]).best_match(["rain"])[0] == "alpha"
        assert VectorScorer([beta, alpha]).best_match(["rain"])[0] == "beta"

    def test_aliases_do_not_dilute_anchor(self, weather):
        crowded = _Provider("weather_lookup", keywords=("rain", "temperature", "forecast"))
        crowded.aliases = tuple(f"city{i}" for i in range(80))
        tokens = preprocess("Will it rain tomorrow, and how hot is the temperature?")
        assert VectorScorer([crowded]).scores(tokens) == VectorScorer([weather]).scores(tokens)

    def test_no_providers(self):
        assert VectorScorer([]).best_match(preprocess("rain")) is None

    def test_stop_words_are_stemmed(self):
        assert "is" in STOP_WORDS
        assert preprocess("please")[0] in STOP_WORDS
