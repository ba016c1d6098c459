"""Artifact persistence for TG Reporter."""

import json
import logging
from pathlib import Path

from .config import PathConfig
from .models import AnalysisArtifact

logger = logging.getLogger(__name__)


class NoAnalysisDataError(Exception):
    """Raised when a region has no data to analyze or report on."""

    def __init__(self, region: str, detail: str = ""):
        self.region = region
        message = f"No analysis data for {region}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class PersistenceError(Exception):
    """Raised when an analysis artifact cannot be written."""

    def __init__(self, region: str, path: Path, reason: str):
        self.region = region
        self.path = path
        super().__init__(f"Failed to save analysis for {region} to {path}: {reason}")


class ArtifactStore:
    """Stores one analysis artifact per region as JSON."""

    def __init__(self, paths: PathConfig):
        self.paths = paths

    def artifact_path(self, region: str) -> Path:
        return self.paths.analyzed / f"analysis_{region}.json"

    def exists(self, region: str) -> bool:
        return self.artifact_path(region).exists()

    def save(self, region: str, artifact: AnalysisArtifact) -> Path:
        """
        Write the artifact, replacing any previous one for the region.

        Raises:
            PersistenceError: If the file cannot be written
        """
        path = self.artifact_path(region)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(artifact.to_json())
        except OSError as e:
            raise PersistenceError(region, path, str(e)) from e

        logger.debug(f"Wrote analysis artifact to {path}")
        return path

    def load(self, region: str) -> AnalysisArtifact:
        """
        Read a region's artifact.

        Raises:
            NoAnalysisDataError: If no artifact exists for the region
        """
        path = self.artifact_path(region)
        if not path.exists():
            raise NoAnalysisDataError(region, "No analysis data found. Please run analysis first.")

        with open(path, "r", encoding="utf-8") as f:
            return AnalysisArtifact.from_dict(json.load(f))
