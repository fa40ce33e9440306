"""Upload and mirror-sync against an ObjectStorage backend."""

from __future__ import annotations

from typing import Iterable, Iterator

from loguru import logger

from storykit.publish.cache import UploadCache
from storykit.publish.files import Upload
from storykit.publish.reporter import PublishEvent
from storykit.storage import ObjectStorage


class Publisher:
    """Push prepared uploads to a store.

    Uploads run one at a time; a transport error propagates out of the
    iterator and ends the batch. Objects already written stay written.
    """

    def __init__(self, storage: ObjectStorage, *, simulate: bool = False, acl: str | None = None) -> None:
        self.storage = storage
        self.simulate = simulate
        self.acl = acl

    def publish(
        self,
        uploads: Iterable[Upload],
        *,
        create_only: bool = False,
        cache: UploadCache | None = None,
    ) -> Iterator[PublishEvent]:
        for upload in uploads:
            if cache is not None and cache.hit(upload.key, upload.etag):
                yield PublishEvent(upload.key, "cache")
                continue

            remote = self.storage.head(upload.key)
            if remote is not None:
                if create_only:
                    # never overwrite a published asset
                    yield PublishEvent(upload.key, "exists")
                    continue
                if remote.etag == upload.etag:
                    if cache is not None:
                        cache.record(upload.key, upload.etag)
                    yield PublishEvent(upload.key, "skip")
                    continue

            state = "update" if remote is not None else "create"
            if not self.simulate:
                self.storage.put(
                    upload.key,
                    upload.body,
                    content_type=upload.content_type,
                    content_encoding=upload.content_encoding,
                    acl=self.acl,
                )
                if cache is not None:
                    cache.record(upload.key, upload.etag)
            yield PublishEvent(upload.key, state)

    def sync(self, prefix: str, keep_keys: Iterable[str]) -> Iterator[PublishEvent]:
        """Delete remote objects under ``prefix`` that are not in ``keep_keys``."""
        if not prefix:
            raise ValueError("Refusing to sync an empty prefix")
        keep = set(keep_keys)
        stale = [key for key in self.storage.list_keys(prefix) if key not in keep]
        if not stale:
            return
        logger.debug("Removing {} stale object(s) under {}", len(stale), prefix)
        if not self.simulate:
            self.storage.delete(stale)
        for key in stale:
            yield PublishEvent(key, "delete")


__all__ = ["Publisher"]
