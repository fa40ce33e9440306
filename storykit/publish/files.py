"""Local file selection and upload preparation."""

from __future__ import annotations

import gzip
import hashlib
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class LocalFile:
    path: Path
    relative: str  # POSIX path relative to the collection root


@dataclass(frozen=True)
class Upload:
    key: str
    body: bytes
    etag: str
    content_type: str
    content_encoding: str | None = None
    source: Path | None = None


def _normalize_exts(exts: Iterable[str] | None) -> set[str]:
    return {ext.lower().lstrip(".") for ext in exts or ()}


def _extension(path: Path) -> str:
    return path.suffix.lower().lstrip(".")


def collect_files(
    root: Path,
    include_ext: Iterable[str] | None = None,
    exclude_ext: Iterable[str] | None = None,
) -> list[LocalFile]:
    """Walk ``root`` and return the files to publish, sorted by relative path.

    ``include_ext`` of None selects every file; ``exclude_ext`` always wins.
    """
    include = _normalize_exts(include_ext) if include_ext is not None else None
    exclude = _normalize_exts(exclude_ext)
    files: list[LocalFile] = []
    for path in root.rglob("*"):
        if not path.is_file():
            continue
        ext = _extension(path)
        if ext in exclude:
            continue
        if include is not None and ext not in include:
            continue
        files.append(LocalFile(path=path, relative=path.relative_to(root).as_posix()))
    files.sort(key=lambda item: item.relative)
    return files


def guess_content_type(path: Path) -> str:
    content_type, _ = mimetypes.guess_type(path.name)
    if content_type is None:
        return DEFAULT_CONTENT_TYPE
    if content_type.startswith("text/") or content_type in ("application/json", "application/javascript"):
        return f"{content_type}; charset=utf-8"
    return content_type


def prepare_upload(local_file: LocalFile, key: str, gzip_ext: Iterable[str] | None = None) -> Upload:
    body = local_file.path.read_bytes()
    encoding = None
    if _extension(local_file.path) in _normalize_exts(gzip_ext):
        # mtime=0 keeps the compressed bytes, and so the etag, stable across runs
        body = gzip.compress(body, mtime=0)
        encoding = "gzip"
    return Upload(
        key=key,
        body=body,
        etag=hashlib.md5(body).hexdigest(),
        content_type=guess_content_type(local_file.path),
        content_encoding=encoding,
        source=local_file.path,
    )


__all__ = ["LocalFile", "Upload", "collect_files", "guess_content_type", "prepare_upload"]
