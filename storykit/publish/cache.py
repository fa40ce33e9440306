from __future__ import annotations

import json
import re
from pathlib import Path

from loguru import logger


class UploadCache:
    """Key to etag record of uploads, persisted between runs.

    Lets create-only publishes skip remote lookups for files already sent.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.entries: dict[str, str] = {}
        self._dirty = False

    @classmethod
    def for_bucket(cls, cache_dir: Path, bucket: str) -> "UploadCache":
        safe = re.sub(r"[^A-Za-z0-9._-]+", "-", bucket)
        cache = cls(cache_dir / f".storykit-cache-{safe}.json")
        cache.load()
        return cache

    def load(self) -> None:
        if not self.path.exists():
            self.entries = {}
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable upload cache {}", self.path)
            data = {}
        self.entries = {str(key): str(value) for key, value in data.items()} if isinstance(data, dict) else {}

    def hit(self, key: str, etag: str) -> bool:
        return self.entries.get(key) == etag

    def record(self, key: str, etag: str) -> None:
        if self.entries.get(key) != etag:
            self.entries[key] = etag
            self._dirty = True

    def save(self) -> None:
        if not self._dirty:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.entries, indent=2, sort_keys=True), encoding="utf-8")
        self._dirty = False


__all__ = ["UploadCache"]
