"""
Tests for text normalization, tokenization and Porter stemming.
"""

import pytest
from nltk.stem.porter import PorterStemmer

from task_router.preprocessor import normalize, preprocess, stem, tokenize


class TestTokenize:
    """Lowercasing, punctuation stripping and word splitting."""

    def test_basic_sentence(self):
        assert tokenize("Tell me about Pikachu!") == ["tell", "me", "about", "pikachu"]

    def test_apostrophes_are_removed_not_split(self):
        assert tokenize("Don't stop") == ["dont", "stop"]
        assert tokenize("Pikachu’s stats") == ["pikachus", "stats"]

    def test_punctuation_becomes_boundary(self):
        assert tokenize("pokemon-info,weather/forecast") == ["pokemon", "info", "weather", "forecast"]

    def test_underscores_are_kept(self):
        assert tokenize("pokemon_info") == ["pokemon_info"]

    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
    def test_empty_input_yields_empty_sequence(self, text):
        assert tokenize(text) == []
        assert preprocess(text) == []

    def test_only_punctuation(self):
        assert preprocess("?!...") == []


class TestNormalize:
    """Normalization used for cache keys."""

    def test_case_and_whitespace(self):
        assert normalize("  Tell   ME\nabout  Pikachu ") == "tell me about pikachu"

    def test_none(self):
        assert normalize(None) == ""


class TestStem:
    """Porter stemmer reductions."""

    @pytest.mark.parametrize("word,expected", [
        ("caresses", "caress"),
        ("ponies", "poni"),
        ("cats", "cat"),
        ("hopping", "hop"),
        ("running", "run"),
        ("happy", "happi"),
        ("relational", "relat"),
        ("motoring", "motor"),
        ("agreed", "agre"),
        ("generalization", "gener"),
        ("abilities", "abil"),
        ("pikachus", "pikachu"),
        ("pikachu", "pikachu"),
    ])
    def test_known_stems(self, word, expected):
        assert stem(word) == expected

    @pytest.mark.parametrize("word", ["is", "me", "ai", "a"])
    def test_short_tokens_unchanged(self, word):
        assert stem(word) == word

    def test_inflections_share_stem(self):
        assert stem("evolves") == stem("evolve")
        assert stem("connected") == stem("connecting") == stem("connection")

    @pytest.mark.parametrize("word", [
        "sensational", "conditional", "hopefulness", "electrical", "adjustable",
        "irritant", "replacement", "adoption", "homologous", "effective",
        "controlling", "rolling", "filing", "legendary", "trainers",
    ])
    def test_follows_original_porter_algorithm(self, word):
        reference = PorterStemmer(mode=PorterStemmer.ORIGINAL_ALGORITHM)
        assert stem(word) == reference.stem(word)


class TestPreprocess:
    """The full pipeline."""

    def test_order_preserved(self):
        assert preprocess("Running cats hopping") == ["run", "cat", "hop"]

    def test_deterministic(self):
        text = "What are Charizard's abilities in battle?"
        assert preprocess(text) == preprocess(text)
