"""Storage abstraction (S3 buckets or a local directory)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

from storykit.settings import RemoteStoreSettings


@dataclass(frozen=True)
class RemoteObject:
    key: str
    etag: str  # hex MD5 of the stored body
    size: int


class ObjectStorage(Protocol):
    def head(self, key: str) -> RemoteObject | None:
        ...

    def put(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        content_encoding: str | None = None,
        acl: str | None = None,
    ) -> None:
        ...

    def list_keys(self, prefix: str) -> list[str]:
        ...

    def delete(self, keys: Iterable[str]) -> None:
        ...

    def describe(self) -> str:  # human-readable location, used in logs
        ...


def build_storage(store: RemoteStoreSettings, local_root: Path | None = None) -> ObjectStorage:
    """Return a LocalStorage rooted at ``local_root`` if given, else an S3Storage."""
    if local_root is not None:
        from storykit.storage.local import LocalStorage

        return LocalStorage(local_root)

    from storykit.storage.s3 import S3Storage

    return S3Storage.from_settings(store)


__all__ = ["ObjectStorage", "RemoteObject", "build_storage"]
