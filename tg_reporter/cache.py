"""File-based TTL cache for generated content."""

import json
import logging
import time
from pathlib import Path
from typing import Any, Optional

from .config import DEFAULT_CACHE_TTL

logger = logging.getLogger(__name__)


class ContentCache:
    """Caches generated content per (type, region) as small JSON files.

    Freshness is judged by file modification time. Cache problems are logged
    and treated as misses; they never fail the caller.
    """

    def __init__(self, cache_dir: Path, ttl_seconds: int = DEFAULT_CACHE_TTL):
        self.cache_dir = Path(cache_dir)
        self.ttl_seconds = ttl_seconds

    def path_for(self, content_type: str, region: str) -> Path:
        return self.cache_dir / f"{content_type}_{region}.json"

    def get(self, content_type: str, region: str) -> Optional[Any]:
        """Return cached content if present and younger than the TTL."""
        path = self.path_for(content_type, region)
        if not path.exists():
            return None

        try:
            age = time.time() - path.stat().st_mtime
            if age >= self.ttl_seconds:
                logger.debug(f"Cache expired for {content_type}/{region} ({age:.0f}s old)")
                return None
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)["content"]
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Cache check error for {path}: {e}")
            return None

    def set(self, content_type: str, region: str, content: Any):
        """Store content; failures are logged, not raised."""
        path = self.path_for(content_type, region)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(
                    {"content": content, "timestamp": int(time.time() * 1000)},
                    f,
                    ensure_ascii=False,
                )
        except (OSError, TypeError) as e:
            logger.error(f"Cache update error for {path}: {e}")

    def clear(self, region: Optional[str] = None) -> int:
        """Delete cached entries, optionally only those of one region."""
        if not self.cache_dir.exists():
            return 0
        pattern = f"*_{region}.json" if region else "*.json"
        removed = 0
        for path in self.cache_dir.glob(pattern):
            path.unlink()
            removed += 1
        return removed
