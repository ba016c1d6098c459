"""Weekly time bucketing for TG Reporter."""

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Mapping

from .models import WeeklyBucket
from .tagger import TagMatcher


def week_start_key(timestamp: datetime) -> str:
    """
    ISO date of the Sunday that starts the timestamp's week, in UTC.

    Example: 2024-06-12 (Wednesday) -> "2024-06-09"; a Sunday maps to itself.
    Days before the first Sunday of year 1 are keyed by ``date.min``.
    """
    if timestamp.tzinfo is not None:
        try:
            timestamp = timestamp.astimezone(timezone.utc)
        except OverflowError:
            pass
    day = timestamp.date()
    # date.weekday() is Monday=0; shift so Sunday=0
    days_since_sunday = (day.weekday() + 1) % 7
    if day.toordinal() - days_since_sunday < date.min.toordinal():
        return date.min.isoformat()
    return (day - timedelta(days=days_since_sunday)).isoformat()


class TimeBucketer:
    """Groups messages into weeks and counts theme hits per week."""

    def __init__(self, themes: Mapping[str, Iterable[str]]):
        self.themes = TagMatcher(themes)
        self.buckets: dict[str, WeeklyBucket] = {}

    def add(self, timestamp: datetime, lowered_body: str) -> str:
        """Place one message in its week and return the week key."""
        key = week_start_key(timestamp)
        bucket = self.buckets.get(key)
        if bucket is None:
            bucket = WeeklyBucket(theme_counts=dict.fromkeys(self.themes.taxonomy, 0))
            self.buckets[key] = bucket

        bucket.total += 1
        for category in self.themes.match(lowered_body):
            bucket.theme_counts[category] += 1
        return key

    def result(self) -> dict[str, WeeklyBucket]:
        """Buckets ordered by week key."""
        return {key: self.buckets[key] for key in sorted(self.buckets)}
