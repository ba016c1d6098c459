"""Unit tests for lexical sentiment scoring."""

import pytest

from tg_reporter.sentiment import (
    LexicalScorer,
    classify_score,
    load_lexicon,
    tokenize,
)


TEST_LEXICON = {
    "good": 2.0,
    "great": 3.0,
    "bad": -2.0,
    "awful": -3.0,
    "help": 2.0,
}


def make_scorer(**kwargs) -> LexicalScorer:
    """Scorer with a small fixed English lexicon."""
    return LexicalScorer(lexicons={"english": TEST_LEXICON}, **kwargs)


class TestTokenize:
    """Tests for tokenize function."""

    def test_lowercases_and_splits_on_punctuation(self):
        assert tokenize("Hello, World! It's 2024") == ["hello", "world", "it", "s", "2024"]

    def test_cyrillic_words(self):
        assert tokenize("Поиск ЖИЛЬЯ, срочно!") == ["поиск", "жилья", "срочно"]

    def test_empty(self):
        assert tokenize("") == []
        assert tokenize("  ...  ") == []


class TestClassifyScore:
    """Tests for the fixed thresholds."""

    @pytest.mark.parametrize("score,label", [
        (0.21, "positive"),
        (0.2, "neutral"),
        (0.0, "neutral"),
        (-0.2, "neutral"),
        (-0.21, "negative"),
    ])
    def test_thresholds(self, score, label):
        assert classify_score(score) == label


class TestLexicalScorer:
    """Tests for LexicalScorer class."""

    def test_average_of_token_valences(self):
        """Test that the score is the mean valence over all tokens."""
        scorer = make_scorer()

        # good (2.0) + three unknown words, over 4 tokens
        assert scorer.score("good day for us", "POL") == pytest.approx(0.5)

    def test_empty_body_scores_zero(self):
        scorer = make_scorer()
        assert scorer.score("", "POL") == 0.0
        assert scorer.classify("", "POL") == "neutral"

    def test_classification(self):
        scorer = make_scorer()

        assert scorer.classify("great news", "POL") == "positive"
        assert scorer.classify("awful news", "POL") == "negative"
        assert scorer.classify("plain news today", "POL") == "neutral"

    def test_stem_fallback(self):
        """Test that inflected forms hit their base lexicon entry."""
        scorer = make_scorer()

        assert scorer.score("helped", "POL") == pytest.approx(2.0)

    def test_adding_strong_positive_token_does_not_lower_score(self):
        scorer = make_scorer()
        base = scorer.score("good bad day", "POL")

        assert scorer.score("good bad day great", "POL") >= base

    def test_deterministic(self):
        scorer = make_scorer()
        text = "good and bad and great"

        assert scorer.score(text, "POL") == scorer.score(text, "POL")

    def test_language_table_selects_lexicon(self):
        """Test that the region's language picks its lexicon."""
        scorer = LexicalScorer(
            language_table={"RUS": "russian"},
            lexicons={"english": TEST_LEXICON, "russian": {"хорошо": 2.0}},
        )

        assert scorer.language_for("RUS") == "russian"
        assert scorer.language_for("POL") == "english"
        assert scorer.classify("хорошо", "RUS") == "positive"
        assert scorer.classify("хорошо", "POL") == "neutral"

    def test_unknown_language_falls_back_to_default(self):
        scorer = make_scorer(language_table={"XXX": "klingon"})

        assert scorer.language_for("XXX") == "english"


class TestBundledLexicons:
    """Tests against the real lexicons."""

    def test_english_lexicon_from_vader(self):
        lexicon = load_lexicon("english")

        assert lexicon["great"] > 0
        assert lexicon["terrible"] < 0

    def test_russian_lexicon_file(self):
        lexicon = load_lexicon("russian")

        assert lexicon["спасибо"] > 0
        assert lexicon["ужасно"] < 0

    def test_english_scoring(self):
        scorer = LexicalScorer()

        assert scorer.classify("housing is great here", "DEU") == "positive"
        assert scorer.classify("this is terrible", "DEU") == "negative"

    def test_russian_scoring(self):
        scorer = LexicalScorer(language_table={"POL": "russian"})

        assert scorer.classify("спасибо", "POL") == "positive"
        assert scorer.classify("это ужасно", "POL") == "negative"
