"""
Asset cache-busting and hosted path rewriting.

Production builds run, in order:

1. ``rewrite_asset_path``: ``assets/*.html`` -> ``.tmp/assets`` with image
   sources pointing at the hosted story folder.
2. ``md5_assets``: hashed copies of ``assets/*`` images into ``.tmp/assets``
   and the staged markup updated to the hashed names.
3. ``copy_assets``: ``.tmp/assets`` -> ``<dest>/assets``.
"""

from __future__ import annotations

import hashlib
import re
import shutil
from pathlib import Path

from bs4 import BeautifulSoup
from loguru import logger

from storykit.exceptions import AssetError
from storykit.paths import ProjectPaths
from storykit.settings import Settings

IMAGE_EXTENSIONS = (".jpg", ".png", ".gif", ".svg")
IMAGE_ATTRIBUTES = ("src", "data-src")
DEFAULT_HASH_LENGTH = 10
_ABSOLUTE_URL_RE = re.compile(r"^([a-z][a-z0-9+.-]*:|//|#)", re.IGNORECASE)


def _source_dir(settings: Settings, source_dir: Path | None) -> Path:
    return source_dir or settings.root / "assets"


def _staging_dir(settings: Settings, staging_dir: Path | None) -> Path:
    return staging_dir or settings.root / ".tmp" / "assets"


def content_hash(data: bytes, length: int = DEFAULT_HASH_LENGTH) -> str:
    return hashlib.md5(data).hexdigest()[:length]


def hashed_name(path: Path, digest: str) -> str:
    return f"{path.stem}_{digest}{path.suffix}"


def replace_references(text: str, renames: dict[str, str]) -> str:
    """Replace whole file-name references in ``text`` using ``renames``."""
    if not renames:
        return text
    names = sorted(renames, key=len, reverse=True)
    pattern = re.compile(r"(?<![\w.-])(" + "|".join(re.escape(name) for name in names) + r")(?![\w-]|\.\w)")
    return pattern.sub(lambda match: renames[match.group(1)], text)


def md5_assets(
    settings: Settings,
    *,
    source_dir: Path | None = None,
    staging_dir: Path | None = None,
    hash_length: int = DEFAULT_HASH_LENGTH,
) -> dict[str, str]:
    """Write content-hashed copies of images and point staged markup at them.

    Returns:
        Mapping of original file name to hashed file name.
    """
    source = _source_dir(settings, source_dir)
    staging = _staging_dir(settings, staging_dir)
    if not source.is_dir():
        raise AssetError(f"Assets directory not found: {source}", {"path": str(source)})
    staging.mkdir(parents=True, exist_ok=True)

    renames: dict[str, str] = {}
    for image in sorted(source.iterdir()):
        if not image.is_file() or image.suffix.lower() not in IMAGE_EXTENSIONS:
            continue
        data = image.read_bytes()
        target = hashed_name(image, content_hash(data, hash_length))
        (staging / target).write_bytes(data)
        renames[image.name] = target
        logger.debug("{} -> {}", image.name, target)

    markup_files = sorted(staging.glob("*.html"))
    for markup in markup_files:
        original = markup.read_text(encoding="utf-8")
        updated = replace_references(original, renames)
        if updated != original:
            markup.write_text(updated, encoding="utf-8")
            logger.debug("Updated image references in {}", markup.name)

    logger.info("Hashed {} image(s), checked {} markup file(s)", len(renames), len(markup_files))
    return renames


def copy_assets(settings: Settings, *, staging_dir: Path | None = None) -> list[Path]:
    staging = _staging_dir(settings, staging_dir)
    if not staging.is_dir():
        raise AssetError(f"Staging directory not found: {staging}", {"path": str(staging)})
    target = settings.dest_dir / "assets"
    shutil.copytree(staging, target, dirs_exist_ok=True)
    copied = sorted(target / path.relative_to(staging) for path in staging.rglob("*") if path.is_file())
    logger.info("Copied {} file(s) to {}", len(copied), target)
    return copied


def rewrite_image_sources(html: str, base_url: str) -> str:
    """Prefix relative image sources in ``html`` with ``base_url``.

    The markup is re-serialized with the html5 formatter: named entities and
    void tags such as ``<br>`` are kept, and non-ASCII text is written as
    named entities where one exists.
    """
    soup = BeautifulSoup(html, "html.parser")
    base = base_url.rstrip("/")
    for img in soup.find_all("img"):
        for attribute in IMAGE_ATTRIBUTES:
            value = img.get(attribute)
            if not value or _ABSOLUTE_URL_RE.match(value):
                continue
            relative = value[2:] if value.startswith("./") else value.lstrip("/")
            img[attribute] = f"{base}/{relative}"
    return soup.decode(formatter="html5")


def rewrite_asset_path(
    settings: Settings,
    *,
    source_dir: Path | None = None,
    staging_dir: Path | None = None,
) -> list[Path]:
    """Point relative image sources in ``assets/*.html`` at the hosted story folder."""
    source = _source_dir(settings, source_dir)
    staging = _staging_dir(settings, staging_dir)
    if not source.is_dir():
        raise AssetError(f"Assets directory not found: {source}", {"path": str(source)})
    staging.mkdir(parents=True, exist_ok=True)

    base_url = ProjectPaths.from_settings(settings).hosted_base
    written: list[Path] = []
    for markup in sorted(source.glob("*.html")):
        target = staging / markup.name
        target.write_text(rewrite_image_sources(markup.read_text(encoding="utf-8"), base_url), encoding="utf-8")
        written.append(target)

    logger.info("Rewrote image paths in {} file(s) to {}", len(written), base_url)
    return written


__all__ = [
    "content_hash",
    "copy_assets",
    "hashed_name",
    "md5_assets",
    "replace_references",
    "rewrite_asset_path",
    "rewrite_image_sources",
]
