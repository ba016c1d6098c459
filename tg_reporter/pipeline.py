"""End-to-end orchestration for TG Reporter.

Wires analysis, chart rendering and report generation together for one
region or for every active region (the body of a scheduled refresh).
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .analyzer import analyze_region
from .cache import ContentCache
from .charts import CHART_TYPES, ChartRenderer
from .config import Config
from .llm_client import DeepSeekClient, create_llm_client
from .models import AnalysisRun
from .report_generator import ReportGenerator
from .sentiment import LexicalScorer
from .sources import RegionSource
from .storage import ArtifactStore

logger = logging.getLogger(__name__)


REPORT_TYPES = {"report", "report_only", "new_report"}
CHART_REQUEST_TYPES = {"charts", "charts_only", "new_charts"}
FULL_TYPES = {"full", "full_report"}
FORCE_TYPES = {"new_report", "new_charts"}


@dataclass
class ContentResult:
    """What a content request produced."""

    report: Optional[str] = None
    charts: dict[str, Path] = field(default_factory=dict)


class ReporterService:
    """Runs the per-region pipeline stages against one configuration."""

    def __init__(
        self,
        config: Config,
        llm: Optional[DeepSeekClient] = None,
        cache: Optional[ContentCache] = None,
    ):
        self.config = config
        self.config.paths.ensure()
        self.source = RegionSource(config.paths)
        self.store = ArtifactStore(config.paths)
        self.cache = cache or ContentCache(config.paths.cache, config.cache_ttl)
        self.scorer = LexicalScorer(config.languages)
        self.charts = ChartRenderer(config.paths)
        self._llm = llm
        self._reports: Optional[ReportGenerator] = None

    @property
    def reports(self) -> ReportGenerator:
        # The LLM client needs an API key, so it is only built when a report is requested
        if self._reports is None:
            if self._llm is None:
                self._llm = create_llm_client(self.config.llm)
            self._reports = ReportGenerator(self._llm, self.config, cache=self.cache)
        return self._reports

    def analyze(self, region: str) -> AnalysisRun:
        """Analyze a configured region and persist its artifact."""
        self.config.get_region(region)
        return analyze_region(
            region,
            source=self.source,
            store=self.store,
            themes=self.config.themes,
            needs_and_pains=self.config.needs_and_pains,
            scorer=self.scorer,
        )

    def render_charts(self, region: str) -> dict[str, Path]:
        self.config.get_region(region)
        return self.charts.render(region)

    def existing_charts(self, region: str) -> dict[str, Path]:
        """Chart files already on disk for a region."""
        paths = {t: self.charts.chart_path(t, region) for t in CHART_TYPES}
        return {t: p for t, p in paths.items() if p.exists()}

    def generate_report(self, region: str, force_new: bool = False) -> str:
        return self.reports.generate_report(region, force_new=force_new)

    def process_region(self, region: str) -> bool:
        """
        Analyze, chart and report one region.

        Failures are logged and reported as False so other regions still run.
        """
        try:
            self.analyze(region)
            self.render_charts(region)
            self.generate_report(region, force_new=True)
        except Exception as e:
            logger.error(f"Error in processing pipeline for {region}: {e}")
            return False

        logger.info(f"Complete processing for {region} finished")
        return True

    def refresh_all(self) -> dict[str, bool]:
        """Process every active region; returns region -> success."""
        logger.info("Running full refresh")
        return {region: self.process_region(region) for region in self.config.active_regions()}

    def generate_content(self, content_type: str, region: str) -> ContentResult:
        """
        Produce the content a user asked for.

        ``report`` and ``charts`` reuse cached/saved output; ``new_report`` and
        ``new_charts`` regenerate it; ``full`` returns both.

        Raises:
            ValueError: For an unknown region or content type
        """
        self.config.get_region(region)
        if content_type not in REPORT_TYPES | CHART_REQUEST_TYPES | FULL_TYPES:
            raise ValueError(f"Invalid report type: {content_type}")

        force = content_type in FORCE_TYPES
        result = ContentResult()

        if content_type in REPORT_TYPES or content_type in FULL_TYPES:
            result.report = self.generate_report(region, force_new=force)

        if content_type in CHART_REQUEST_TYPES or content_type in FULL_TYPES:
            charts = {} if force else self.existing_charts(region)
            if len(charts) < len(CHART_TYPES):
                charts = self.render_charts(region)
            result.charts = charts

        return result
