"""Data models for TG Reporter."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional
import json


SENTIMENT_LABELS = ("positive", "negative", "neutral")


@dataclass(frozen=True)
class MessageRecord:
    """A single chat message ingested for one region."""

    id: str
    timestamp: datetime
    body: str
    group: str
    region: str

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "body": self.body,
            "group": self.group,
            "region": self.region,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MessageRecord":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            body=data["body"],
            group=data["group"],
            region=data["region"],
        )


@dataclass
class SentimentTally:
    """Positive/negative/neutral counts over messages with a body."""

    positive: int = 0
    negative: int = 0
    neutral: int = 0

    def add(self, label: str):
        """Count one message under the given label."""
        if label not in SENTIMENT_LABELS:
            raise ValueError(f"Unknown sentiment label: {label}")
        setattr(self, label, getattr(self, label) + 1)

    @property
    def total(self) -> int:
        return self.positive + self.negative + self.neutral

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SentimentTally":
        """Create from dictionary."""
        return cls(**data)


@dataclass(frozen=True)
class PhraseEntry:
    """A bigram and how many times it was seen."""

    phrase: str
    count: int

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return asdict(self)


@dataclass
class WeeklyBucket:
    """Message volume and theme hits for one Sunday-aligned week."""

    total: int = 0
    theme_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            "total": self.total,
            "themeCounts": dict(self.theme_counts),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WeeklyBucket":
        """Create from dictionary."""
        return cls(
            total=data["total"],
            theme_counts=dict(data.get("themeCounts", {})),
        )


@dataclass(frozen=True)
class AnalysisArtifact:
    """Aggregate analysis result for one region.

    Keys of ``theme_count`` and ``needs_count`` are exactly the configured
    categories; ``weekly_trends`` keys are the observed week starts in
    ascending order.
    """

    message_count: int
    sentiments: SentimentTally
    theme_count: dict[str, int]
    needs_count: dict[str, int]
    top_phrases: list[PhraseEntry]
    weekly_trends: dict[str, WeeklyBucket]

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary matching the on-disk schema."""
        return {
            "messageCount": self.message_count,
            "sentiments": self.sentiments.to_dict(),
            "themeCount": dict(self.theme_count),
            "needsCount": dict(self.needs_count),
            "topPhrases": [p.to_dict() for p in self.top_phrases],
            "weeklyTrends": {
                week: self.weekly_trends[week].to_dict()
                for week in sorted(self.weekly_trends)
            },
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict) -> "AnalysisArtifact":
        """Create from dictionary."""
        return cls(
            message_count=data["messageCount"],
            sentiments=SentimentTally.from_dict(data["sentiments"]),
            theme_count=dict(data["themeCount"]),
            needs_count=dict(data["needsCount"]),
            top_phrases=[
                PhraseEntry(phrase=p["phrase"], count=p["count"])
                for p in data.get("topPhrases", [])
            ],
            weekly_trends={
                week: WeeklyBucket.from_dict(bucket)
                for week, bucket in sorted(data.get("weeklyTrends", {}).items())
            },
        )


@dataclass
class ParseStats:
    """Counters collected while parsing one region's source text."""

    total_lines: int = 0
    parsed_records: int = 0
    skipped_empty: int = 0
    malformed_rows: int = 0
    timestamp_fallbacks: int = 0

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return asdict(self)


@dataclass
class AnalysisRun:
    """Artifact plus the run-specific parse counters that are kept out of it."""

    region: str
    artifact: AnalysisArtifact
    stats: ParseStats
    artifact_path: Optional[str] = None
