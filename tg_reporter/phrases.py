"""Bigram frequency extraction for TG Reporter."""

from collections import Counter
from typing import Sequence

from .models import PhraseEntry


TOP_PHRASES = 20


class PhraseExtractor:
    """Accumulates adjacent-token pairs across messages.

    Bigrams never span two messages. Ranking is by descending count with
    ties kept in first-seen order.
    """

    def __init__(self, limit: int = TOP_PHRASES):
        self.limit = limit
        self.counts: Counter[str] = Counter()

    def add(self, tokens: Sequence[str]):
        """Count the bigrams of one message's lowercase tokens."""
        for first, second in zip(tokens, tokens[1:]):
            self.counts[f"{first} {second}"] += 1

    def top(self) -> list[PhraseEntry]:
        """Highest-count phrases, at most ``limit`` of them."""
        # Counter keeps insertion order, and sorted() is stable
        ranked = sorted(self.counts.items(), key=lambda item: -item[1])
        return [PhraseEntry(phrase=phrase, count=count) for phrase, count in ranked[: self.limit]]
