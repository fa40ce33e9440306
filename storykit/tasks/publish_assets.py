"""Publish ``cdnassets/`` to the generic asset bucket."""

from __future__ import annotations

from loguru import logger

from storykit.exceptions import PublishError
from storykit.paths import ProjectPaths, object_key
from storykit.publish.cache import UploadCache
from storykit.publish.files import collect_files, prepare_upload
from storykit.publish.publisher import Publisher
from storykit.publish.reporter import PublishReport
from storykit.settings import Settings
from storykit.storage import ObjectStorage
from storykit.validate.preflight import require_project_date

ASSET_EXTENSIONS = (
    "jpg", "png", "gif", "mp3", "ogg", "flac", "mp4", "mov", "avi",
    "webm", "zip", "rar", "webp", "txt", "csv", "json", "pdf",
)
GZIP_EXTENSIONS = ("txt", "csv", "json", "js", "css")


def publish_assets(
    settings: Settings,
    storage: ObjectStorage,
    *,
    cache: UploadCache | None = None,
    published_url: str | None = None,
) -> PublishReport:
    """Upload new assets create-only; objects already in the bucket are left untouched.

    Raises:
        ProjectDateError: projectInitDate is missing or malformed. Nothing is uploaded.
        PublishError: The assets directory does not exist.
    """
    require_project_date(settings)

    source = settings.root / settings.publish.assets_dir
    if not source.is_dir():
        raise PublishError(f"Assets directory not found: {source}", {"path": str(source)})

    prefix = ProjectPaths.from_settings(settings).assets_prefix
    uploads = (
        prepare_upload(item, object_key(prefix, item.relative), GZIP_EXTENSIONS)
        for item in collect_files(source, ASSET_EXTENSIONS)
    )

    publisher = Publisher(storage, simulate=settings.publish.simulate, acl=settings.publish.acl)
    report = PublishReport(target=storage.describe(), simulate=settings.publish.simulate)
    try:
        report.consume(publisher.publish(uploads, create_only=True, cache=cache))
    finally:
        if cache is not None and not settings.publish.simulate:
            cache.save()

    report.log_summary()
    if published_url is None:
        published_url = f"{storage.describe()}/{settings.publish.assets_root}/"
    logger.success("Published to: {}", published_url)
    return report


__all__ = ["ASSET_EXTENSIONS", "GZIP_EXTENSIONS", "publish_assets"]
