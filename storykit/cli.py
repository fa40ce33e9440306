"""Command line entry point: ``storykit <task>``."""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path
from typing import Callable

from loguru import logger

from storykit.exceptions import StorykitError
from storykit.logging_config import setup_logging
from storykit.paths import ProjectPaths, bucket_url
from storykit.publish.cache import UploadCache
from storykit.settings import RemoteStoreSettings, Settings
from storykit.storage import ObjectStorage, build_storage
from storykit.tasks.cachebust import copy_assets, md5_assets, rewrite_asset_path
from storykit.tasks.metadata import combine_json
from storykit.tasks.publish_assets import publish_assets
from storykit.tasks.publish_story import publish_story


def _storage(store: RemoteStoreSettings, args: argparse.Namespace) -> ObjectStorage:
    return build_storage(store, Path(args.local_target) if args.local_target else None)


def local_cache_name(target: Path) -> str:
    """One upload cache per local target directory."""
    digest = hashlib.sha1(str(target.resolve()).encode("utf-8")).hexdigest()[:12]
    return f"local-{target.resolve().name}-{digest}"


def _publish_assets(settings: Settings, args: argparse.Namespace) -> None:
    store = settings.assets_store
    storage = _storage(store, args)
    cache_dir = settings.root / settings.publish.cache_dir
    if args.local_target:
        cache = UploadCache.for_bucket(cache_dir, local_cache_name(Path(args.local_target)))
        url = None
    else:
        cache = UploadCache.for_bucket(cache_dir, store.bucket)
        url = bucket_url(store.region, store.bucket, f"{settings.publish.assets_root}/")
    publish_assets(settings, storage, cache=cache, published_url=url)


def _publish_story(settings: Settings, args: argparse.Namespace) -> None:
    store = settings.story_store
    storage = _storage(store, args)
    url = None
    if not args.local_target:
        url = bucket_url(store.region, store.bucket, ProjectPaths.from_settings(settings).story_prefix)
    publish_story(settings, storage, published_url=url)


def _md5_assets(settings: Settings, args: argparse.Namespace) -> None:
    md5_assets(settings)


def _copy_assets(settings: Settings, args: argparse.Namespace) -> None:
    copy_assets(settings)


def _rewrite_asset_path(settings: Settings, args: argparse.Namespace) -> None:
    rewrite_asset_path(settings)


def _combine_json(settings: Settings, args: argparse.Namespace) -> None:
    combine_json(settings)


TASKS: dict[str, tuple[Callable[[Settings, argparse.Namespace], None], str]] = {
    "publish-assets": (_publish_assets, "Push ./cdnassets to the generic asset bucket (create-only)"),
    "publish-story": (_publish_story, "Check, confirm and mirror the generated site to the story bucket"),
    "md5-assets": (_md5_assets, "Add content hashes to image names and update staged markup"),
    "copy-assets": (_copy_assets, "Copy hashed assets from .tmp/assets into <dest>/assets"),
    "rewrite-asset-path": (_rewrite_asset_path, "Point image paths in assets/*.html at the hosted story"),
    "combine-json": (_combine_json, "Merge embed.json and styles/main.json into remoteData.json"),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storykit", description="Build and publish tasks for storytelling microsites")
    parser.add_argument("--config", type=Path, help="Project configuration (default: $STORYKIT_CONFIG or config.yml)")
    parser.add_argument("--log-level", default="INFO", help="Log level (default: INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="task", required=True, metavar="TASK")
    for name, (handler, help_text) in TASKS.items():
        sub = subparsers.add_parser(name, help=help_text)
        sub.set_defaults(handler=handler)
        if name.startswith("publish-"):
            sub.add_argument("--local-target", help="Publish into this directory instead of S3")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level.upper(), json_format=args.json_logs, log_file=args.log_file)

    try:
        settings = Settings.load(args.config)
        args.handler(settings, args)
    except (StorykitError, FileNotFoundError) as exc:
        logger.error("{}: {}", args.task, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
