"""Publish path derivation.

Both buckets lay projects out by initial year, month and project slug::

    <root>/<year>/<month>/<slug>/

The same prefix is used as the remote object prefix and as the sync
prefix, so a story is always mirrored into exactly one folder.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from storykit.settings import Settings

_WHITESPACE_RE = re.compile(r"\s+")


def slugify_project_name(name: str) -> str:
    """Turn a human-readable project name into a path segment.

    Examples:
        >>> slugify_project_name("My   Cool  Story")
        'my-cool-story'
        >>> slugify_project_name("Election Night 2024")
        'election-night-2024'
    """
    return _WHITESPACE_RE.sub("-", name.strip()).lower()


def publish_prefix(root: str, year: str, month: str, name: str) -> str:
    parts = [segment for segment in (root.strip("/"), str(year), str(month), slugify_project_name(name)) if segment]
    return "/".join(parts) + "/"


def object_key(prefix: str, relative_path: str | PurePosixPath) -> str:
    relative = str(PurePosixPath(relative_path)).lstrip("/")
    return f"{prefix}{relative}"


def bucket_url(region: str | None, bucket: str, prefix: str = "") -> str:
    host = f"s3-{region}.amazonaws.com" if region else "s3.amazonaws.com"
    return f"http://{host}/{bucket}/{prefix}"


@dataclass(frozen=True)
class ProjectPaths:
    story_prefix: str
    assets_prefix: str
    hosted_base: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProjectPaths":
        date = settings.project_init_date
        year, month = str(date.year or ""), str(date.month or "")
        story_prefix = publish_prefix(settings.publish.story_root, year, month, settings.project_name)
        assets_prefix = publish_prefix(settings.publish.assets_root, year, month, settings.project_name)
        domain = settings.asset_path.domain.rstrip("/")
        hosted_base = f"{domain}/{story_prefix.rstrip('/')}"
        return cls(story_prefix=story_prefix, assets_prefix=assets_prefix, hosted_base=hosted_base)


__all__ = ["ProjectPaths", "bucket_url", "object_key", "publish_prefix", "slugify_project_name"]
