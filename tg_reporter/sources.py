"""Region source files for TG Reporter.

Each region's collected messages live in ``raw/messages_{REGION}.csv``. The
collector writes them with ``write_messages_csv``; the analysis pipeline reads
them back through ``RegionSource``.
"""

import csv
import logging
from pathlib import Path
from typing import Iterable

from .config import PathConfig
from .models import MessageRecord

logger = logging.getLogger(__name__)


CSV_HEADER = ["ID", "Date", "Text", "Group", "Geo"]


class SourceNotFoundError(Exception):
    """Raised when a region has no source file to analyze."""

    def __init__(self, region: str, path: Path):
        self.region = region
        self.path = path
        super().__init__(f"No data found for {region}: {path} does not exist")


class RegionSource:
    """Reads raw message CSV text for a region."""

    def __init__(self, paths: PathConfig):
        self.paths = paths

    def source_path(self, region: str) -> Path:
        return self.paths.raw / f"messages_{region}.csv"

    def exists(self, region: str) -> bool:
        return self.source_path(region).exists()

    def get_source_text(self, region: str) -> str:
        """
        Return the raw CSV text for a region.

        Raises:
            SourceNotFoundError: If the region's source file is absent
        """
        path = self.source_path(region)
        if not path.exists():
            raise SourceNotFoundError(region, path)

        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()


def write_messages_csv(path: Path, records: Iterable[MessageRecord]) -> int:
    """
    Write collected messages in the format the parser reads back.

    Records with an empty body are not written, matching what the collector keeps.

    Returns:
        Number of rows written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    written = 0
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for record in records:
            if not record.body:
                continue
            writer.writerow([
                record.id,
                record.timestamp.isoformat(),
                record.body,
                record.group,
                record.region,
            ])
            written += 1

    logger.info(f"Saved {written} messages to {path}")
    return written
