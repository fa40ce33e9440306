from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Iterable

from storykit.storage import RemoteObject

META_DIR = ".storykit-meta"


class LocalStorage:
    """Directory-backed object store; keys map to files under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / key.lstrip("/")

    def _meta_path(self, key: str) -> Path:
        return self.root / META_DIR / f"{key.lstrip('/')}.json"

    def head(self, key: str) -> RemoteObject | None:
        path = self._path(key)
        if not path.is_file():
            return None
        data = path.read_bytes()
        return RemoteObject(key=key, etag=hashlib.md5(data).hexdigest(), size=len(data))

    def put(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        content_encoding: str | None = None,
        acl: str | None = None,
    ) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(body)
        meta = self._meta_path(key)
        meta.parent.mkdir(parents=True, exist_ok=True)
        meta.write_text(
            json.dumps({"content_type": content_type, "content_encoding": content_encoding, "acl": acl}),
            encoding="utf-8",
        )

    def metadata(self, key: str) -> dict[str, str | None]:
        meta = self._meta_path(key)
        if not meta.exists():
            return {}
        return json.loads(meta.read_text(encoding="utf-8"))

    def list_keys(self, prefix: str) -> list[str]:
        keys: list[str] = []
        for path in self.root.rglob("*"):
            if not path.is_file():
                continue
            relative = path.relative_to(self.root)
            if relative.parts and relative.parts[0] == META_DIR:
                continue
            key = relative.as_posix()
            if key.startswith(prefix):
                keys.append(key)
        return sorted(keys)

    def delete(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._path(key).unlink(missing_ok=True)
            self._meta_path(key).unlink(missing_ok=True)

    def describe(self) -> str:
        return str(self.root)


__all__ = ["LocalStorage"]
