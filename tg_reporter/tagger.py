"""Keyword taxonomy matching for TG Reporter."""

from typing import Iterable, Mapping


def normalize_taxonomy(taxonomy: Mapping[str, Iterable[str]]) -> dict[str, list[str]]:
    """Lowercase every keyword and drop empty ones, keeping category order."""
    return {
        category: [k.lower() for k in keywords if k]
        for category, keywords in taxonomy.items()
    }


def matches_any(lowered_body: str, keywords: Iterable[str]) -> bool:
    """True if any keyword is a substring of the body.

    Both sides must already be lowercase; see ``normalize_taxonomy``.
    """
    return any(keyword and keyword in lowered_body for keyword in keywords)


class TagMatcher:
    """Counts, per category, how many messages mention any of its keywords.

    A category is counted at most once per message no matter how many of its
    keywords appear. Each matcher owns its counters; create one per run.
    """

    def __init__(self, taxonomy: Mapping[str, Iterable[str]]):
        self.taxonomy = normalize_taxonomy(taxonomy)
        self.counts: dict[str, int] = {category: 0 for category in self.taxonomy}

    def match(self, lowered_body: str) -> list[str]:
        """Categories whose keywords occur in the body."""
        return [
            category
            for category, keywords in self.taxonomy.items()
            if matches_any(lowered_body, keywords)
        ]

    def add(self, lowered_body: str) -> list[str]:
        """Match a message and increment the counters of its categories."""
        matched = self.match(lowered_body)
        for category in matched:
            self.counts[category] += 1
        return matched
