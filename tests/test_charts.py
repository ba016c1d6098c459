"""Unit tests for ChartRenderer."""

import pytest

from tg_reporter.charts import CHART_TYPES, ChartRenderer
from tg_reporter.config import PathConfig
from tg_reporter.models import AnalysisArtifact, SentimentTally, WeeklyBucket
from tg_reporter.storage import ArtifactStore, NoAnalysisDataError


PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def make_artifact() -> AnalysisArtifact:
    return AnalysisArtifact(
        message_count=5,
        sentiments=SentimentTally(positive=2, negative=1, neutral=2),
        theme_count={"Жильё": 3, "Работа": 1},
        needs_count={"Поиск жилья": 2},
        top_phrases=[],
        weekly_trends={
            "2024-06-09": WeeklyBucket(total=3, theme_counts={"Жильё": 2, "Работа": 0}),
            "2024-06-16": WeeklyBucket(total=2, theme_counts={"Жильё": 1, "Работа": 1}),
        },
    )


class TestChartRenderer:
    """Tests for ChartRenderer class."""

    def setup_method(self):
        self.artifact = make_artifact()

    def test_render_writes_all_charts(self, tmp_path):
        paths = PathConfig.from_data_dir(str(tmp_path)).ensure()
        ArtifactStore(paths).save("POL", self.artifact)

        charts = ChartRenderer(paths).render("POL")

        assert tuple(charts) == CHART_TYPES
        for chart_type, path in charts.items():
            assert path == paths.charts / f"{chart_type}_POL.png"
            assert path.read_bytes().startswith(PNG_SIGNATURE)

    def test_render_empty_artifact(self, tmp_path):
        """Test that a region with no messages still gets charts."""
        paths = PathConfig.from_data_dir(str(tmp_path))
        empty = AnalysisArtifact(0, SentimentTally(), {}, {}, [], {})

        charts = ChartRenderer(paths).render_artifact(empty, "POL")

        assert all(path.exists() for path in charts.values())

    def test_render_missing_artifact(self, tmp_path):
        paths = PathConfig.from_data_dir(str(tmp_path)).ensure()

        with pytest.raises(NoAnalysisDataError):
            ChartRenderer(paths).render("POL")
