"""Lexicon-based sentiment scoring for TG Reporter.

A message's polarity is the average lexicon valence of its tokens. Tokens
missing from the lexicon are retried by stem, so inflected forms ("helped",
"помощи") still hit their base entry. Which lexicon and stemmer are used
depends on the region's language, looked up in the configured table.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from nltk.stem.snowball import SnowballStemmer
from nltk.tokenize import RegexpTokenizer
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from .config import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES, resolve_language

logger = logging.getLogger(__name__)


POSITIVE_THRESHOLD = 0.2
NEGATIVE_THRESHOLD = -0.2

LEXICON_DIR = Path(__file__).parent / "lexicons"

_tokenizer = RegexpTokenizer(r"\w+")


def tokenize(text: str) -> list[str]:
    """Split text into lowercase word tokens."""
    if not text:
        return []
    return _tokenizer.tokenize(text.lower())


def classify_score(score: float) -> str:
    """Map a polarity score to positive, negative or neutral."""
    if score > POSITIVE_THRESHOLD:
        return "positive"
    if score < NEGATIVE_THRESHOLD:
        return "negative"
    return "neutral"


def load_lexicon(language: str) -> dict[str, float]:
    """
    Load the word valence table for a language.

    English uses the VADER lexicon shipped with vaderSentiment; other
    languages are read from the package's ``lexicons`` folder.
    """
    if language == "english":
        return dict(SentimentIntensityAnalyzer().lexicon)

    path = LEXICON_DIR / f"{language}.json"
    with open(path, "r", encoding="utf-8") as f:
        return {word.lower(): float(value) for word, value in json.load(f).items()}


@dataclass
class LanguageProfile:
    """Lexicon and stemmer for one language."""

    language: str
    lexicon: dict[str, float]
    stemmed: dict[str, float]
    stemmer: SnowballStemmer

    @classmethod
    def build(cls, language: str, lexicon: dict[str, float]) -> "LanguageProfile":
        stemmer = SnowballStemmer(language)
        stemmed = {}
        for word, value in lexicon.items():
            # First entry wins so the index does not depend on later duplicates
            stemmed.setdefault(stemmer.stem(word), value)
        return cls(language=language, lexicon=lexicon, stemmed=stemmed, stemmer=stemmer)

    def valence(self, token: str) -> float:
        value = self.lexicon.get(token)
        if value is None:
            value = self.stemmed.get(self.stemmer.stem(token), 0.0)
        return value


class LexicalScorer:
    """Scores message bodies and buckets them into sentiment labels."""

    def __init__(
        self,
        language_table: Optional[Mapping[str, str]] = None,
        default_language: str = DEFAULT_LANGUAGE,
        lexicons: Optional[Mapping[str, dict[str, float]]] = None,
    ):
        """
        Initialize scorer.

        Args:
            language_table: Region code -> language name
            default_language: Language for regions missing from the table
            lexicons: Optional language -> lexicon overrides
        """
        self.language_table = dict(language_table or {})
        self.default_language = default_language
        self._lexicon_overrides = dict(lexicons or {})
        self._profiles: dict[str, LanguageProfile] = {}

    def language_for(self, region: str) -> str:
        return resolve_language(
            self.language_table.get(region),
            default=self.default_language,
            supported=set(SUPPORTED_LANGUAGES) | set(self._lexicon_overrides),
        )

    def profile(self, language: str) -> LanguageProfile:
        if language not in self._profiles:
            lexicon = self._lexicon_overrides.get(language)
            if lexicon is None:
                lexicon = load_lexicon(language)
            logger.debug(f"Loaded {len(lexicon)} lexicon entries for {language}")
            self._profiles[language] = LanguageProfile.build(language, lexicon)
        return self._profiles[language]

    def score(self, body: str, region: str) -> float:
        """Average token valence of a message body; 0.0 for no tokens."""
        tokens = tokenize(body)
        if not tokens:
            return 0.0
        profile = self.profile(self.language_for(region))
        return sum(profile.valence(token) for token in tokens) / len(tokens)

    def classify(self, body: str, region: str) -> str:
        """Label a message body as positive, negative or neutral."""
        return classify_score(self.score(body, region))
