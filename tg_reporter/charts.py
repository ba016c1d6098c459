"""Chart rendering for TG Reporter.

Draws the four summary charts of a region's analysis artifact as PNG files
with matplotlib's non-interactive backend.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from .config import PathConfig
from .models import AnalysisArtifact
from .storage import ArtifactStore

logger = logging.getLogger(__name__)


CHART_TYPES = ("sentiment", "themes", "needs", "trends")

SENTIMENT_COLORS = ["#4CAF50", "#F44336", "#9E9E9E"]
THEME_COLOR = "#2196F3"
NEEDS_COLOR = "#FF9800"
TRENDS_COLOR = "#673AB7"


class ChartError(Exception):
    """Raised when a chart cannot be rendered or saved."""
    pass


@dataclass
class ChartStyle:
    """Figure size and label settings."""

    width: float = 8
    height: float = 4
    dpi: int = 100
    sentiment_labels: tuple = ("Позитивные", "Негативные", "Нейтральные")
    themes_title: str = "Темы"
    needs_title: str = "Потребности и проблемы"
    trends_title: str = "Сообщения по неделям"


class ChartRenderer:
    """Renders analysis artifacts to PNG charts."""

    def __init__(self, paths: PathConfig, style: Optional[ChartStyle] = None):
        self.paths = paths
        self.store = ArtifactStore(paths)
        self.style = style or ChartStyle()

    def chart_path(self, chart_type: str, region: str) -> Path:
        return self.paths.charts / f"{chart_type}_{region}.png"

    def render(self, region: str) -> dict[str, Path]:
        """
        Render all charts for a region from its saved artifact.

        Raises:
            NoAnalysisDataError: If the region has not been analyzed
            ChartError: If drawing or saving fails
        """
        logger.info(f"Generating charts for {region}")
        artifact = self.store.load(region)
        charts = self.render_artifact(artifact, region)
        logger.info(f"Charts for {region} generated successfully")
        return charts

    def render_artifact(self, artifact: AnalysisArtifact, region: str) -> dict[str, Path]:
        """Render all charts for an in-memory artifact."""
        self.paths.charts.mkdir(parents=True, exist_ok=True)
        return {
            "sentiment": self._render_sentiment(artifact, region),
            "themes": self._render_bar(
                artifact.theme_count, self.style.themes_title, THEME_COLOR,
                self.chart_path("themes", region),
            ),
            "needs": self._render_bar(
                artifact.needs_count, self.style.needs_title, NEEDS_COLOR,
                self.chart_path("needs", region),
            ),
            "trends": self._render_trends(artifact, region),
        }

    def _new_figure(self):
        return plt.subplots(figsize=(self.style.width, self.style.height), dpi=self.style.dpi)

    def _save(self, fig, path: Path) -> Path:
        try:
            fig.tight_layout()
            fig.savefig(path, format="png", facecolor="white")
        except (OSError, ValueError) as e:
            raise ChartError(f"Failed to save chart {path}: {e}") from e
        finally:
            plt.close(fig)
        return path

    def _render_sentiment(self, artifact: AnalysisArtifact, region: str) -> Path:
        fig, ax = self._new_figure()
        values = [
            artifact.sentiments.positive,
            artifact.sentiments.negative,
            artifact.sentiments.neutral,
        ]
        if sum(values) > 0:
            ax.pie(values, labels=self.style.sentiment_labels, colors=SENTIMENT_COLORS,
                   autopct="%1.0f%%", startangle=90)
            ax.axis("equal")
        else:
            ax.text(0.5, 0.5, "Нет данных", ha="center", va="center")
            ax.axis("off")
        return self._save(fig, self.chart_path("sentiment", region))

    def _render_bar(self, counts: dict[str, int], title: str, color: str, path: Path) -> Path:
        fig, ax = self._new_figure()
        ax.set_title(title)
        if not counts:
            ax.text(0.5, 0.5, "Нет данных", ha="center", va="center")
            ax.axis("off")
            return self._save(fig, path)

        labels = list(counts.keys())
        ax.bar(range(len(labels)), list(counts.values()), color=color, label=title)
        ax.set_xticks(range(len(labels)))
        ax.set_xticklabels(labels, rotation=30, ha="right")
        ax.legend()
        return self._save(fig, path)

    def _render_trends(self, artifact: AnalysisArtifact, region: str) -> Path:
        fig, ax = self._new_figure()
        weeks = sorted(artifact.weekly_trends)
        totals = [artifact.weekly_trends[week].total for week in weeks]
        ax.plot(weeks, totals, color=TRENDS_COLOR, marker="o", label=self.style.trends_title)
        ax.set_title(self.style.trends_title)
        ax.tick_params(axis="x", rotation=30)
        ax.legend()
        return self._save(fig, self.chart_path("trends", region))
