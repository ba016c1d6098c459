"""Message analysis pipeline for TG Reporter.

Runs sentiment scoring, theme and need tagging, bigram extraction and weekly
bucketing over one region's messages and assembles the analysis artifact.
"""

import logging
from typing import Iterable, Mapping, Optional, Sequence

from .models import AnalysisArtifact, AnalysisRun, MessageRecord, SentimentTally
from .parser import RecordParser
from .phrases import PhraseExtractor, TOP_PHRASES
from .sentiment import LexicalScorer, tokenize
from .sources import RegionSource, SourceNotFoundError
from .storage import ArtifactStore, NoAnalysisDataError
from .tagger import TagMatcher
from .trends import TimeBucketer

logger = logging.getLogger(__name__)


class MessageAnalyzer:
    """Builds an AnalysisArtifact from a region's message records."""

    def __init__(
        self,
        themes: Mapping[str, Iterable[str]],
        needs_and_pains: Mapping[str, Iterable[str]],
        scorer: Optional[LexicalScorer] = None,
        phrase_limit: int = TOP_PHRASES,
    ):
        """
        Initialize analyzer.

        Args:
            themes: Theme category -> keywords
            needs_and_pains: Need/pain category -> keywords
            scorer: Sentiment scorer (defaults to one with no language table)
            phrase_limit: How many top phrases to keep
        """
        self.themes = themes
        self.needs_and_pains = needs_and_pains
        self.scorer = scorer or LexicalScorer()
        self.phrase_limit = phrase_limit

    def analyze(self, records: Sequence[MessageRecord], region: str) -> AnalysisArtifact:
        """
        Analyze a batch of records in a single pass.

        Records with an empty body are counted in ``message_count`` and in
        their week's total but are skipped by scoring, tagging and phrases.
        """
        sentiments = SentimentTally()
        theme_matcher = TagMatcher(self.themes)
        needs_matcher = TagMatcher(self.needs_and_pains)
        phrases = PhraseExtractor(limit=self.phrase_limit)
        weeks = TimeBucketer(self.themes)

        for record in records:
            lowered = record.body.lower()
            weeks.add(record.timestamp, lowered)

            if not record.body:
                continue

            sentiments.add(self.scorer.classify(record.body, region))
            theme_matcher.add(lowered)
            needs_matcher.add(lowered)
            phrases.add(tokenize(record.body))

        return AnalysisArtifact(
            message_count=len(records),
            sentiments=sentiments,
            theme_count=theme_matcher.counts,
            needs_count=needs_matcher.counts,
            top_phrases=phrases.top(),
            weekly_trends=weeks.result(),
        )


def analyze_region(
    region: str,
    source: RegionSource,
    store: ArtifactStore,
    themes: Mapping[str, Iterable[str]],
    needs_and_pains: Mapping[str, Iterable[str]],
    scorer: Optional[LexicalScorer] = None,
    parser: Optional[RecordParser] = None,
) -> AnalysisRun:
    """
    Parse, analyze and persist one region's messages.

    Raises:
        NoAnalysisDataError: If the region has no source file
        PersistenceError: If the artifact cannot be written
    """
    logger.info(f"Starting NLP analysis for {region}")

    try:
        raw_text = source.get_source_text(region)
    except SourceNotFoundError as e:
        raise NoAnalysisDataError(region, f"source file {e.path} not found") from e

    parser = parser or RecordParser()
    records = parser.parse(raw_text, region)

    analyzer = MessageAnalyzer(themes, needs_and_pains, scorer=scorer)
    artifact = analyzer.analyze(records, region)

    path = store.save(region, artifact)
    logger.info(f"NLP analysis for {region} completed and saved")

    return AnalysisRun(
        region=region,
        artifact=artifact,
        stats=parser.stats,
        artifact_path=str(path),
    )
