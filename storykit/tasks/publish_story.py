"""Publish the generated site (``dest``) to the story bucket."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from loguru import logger

from storykit.exceptions import PublishError
from storykit.paths import ProjectPaths, object_key
from storykit.publish.files import collect_files, prepare_upload
from storykit.publish.publisher import Publisher
from storykit.publish.reporter import PublishReport
from storykit.settings import Settings
from storykit.storage import ObjectStorage
from storykit.validate.preflight import run_preflight

# ai2html sources and previews stay local
EXCLUDED_EXTENSIONS = ("ai", "html", "jsx")
CONFIRM_QUESTION = "Publish to production?"


def ask_confirmation(question: str, input_func: Callable[[str], str] | None = None) -> bool:
    read = input_func or input
    try:
        answer = read(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def publish_story(
    settings: Settings,
    storage: ObjectStorage,
    *,
    cwd: Path | None = None,
    confirm: Callable[[str], bool] = ask_confirmation,
    published_url: str | None = None,
) -> PublishReport:
    """Upload ``dest`` to the story prefix, then delete remote files no longer present locally.

    Args:
        settings: Loaded project settings.
        storage: Store for the story bucket.
        cwd: Directory whose git working tree must be clean. Defaults to the project root.
        confirm: Called with the question; a falsy answer aborts before any remote call.
        published_url: URL logged on completion.

    Returns:
        PublishReport with one event per uploaded, skipped or deleted object.
        Empty when the operator declines.

    Raises:
        PreflightError: The workspace is dirty or projectInitDate is malformed.
        PublishError: The destination directory does not exist.
    """
    run_preflight(settings, cwd or settings.root)

    source = settings.dest_dir
    if not source.is_dir():
        raise PublishError(f"Destination directory not found: {source}", {"path": str(source)})

    report = PublishReport(target=storage.describe(), simulate=settings.publish.simulate)
    if not confirm(CONFIRM_QUESTION):
        logger.warning("Publish cancelled, nothing was uploaded")
        return report

    prefix = ProjectPaths.from_settings(settings).story_prefix
    files = collect_files(source, exclude_ext=EXCLUDED_EXTENSIONS)
    keys = [object_key(prefix, item.relative) for item in files]
    uploads = (prepare_upload(item, key) for item, key in zip(files, keys))

    publisher = Publisher(storage, simulate=settings.publish.simulate, acl=settings.publish.acl)
    report.consume(publisher.publish(uploads))
    report.consume(publisher.sync(prefix, keys))

    report.log_summary()
    logger.success("Published to: {}", published_url or f"{storage.describe()}/{prefix}")
    return report


__all__ = ["CONFIRM_QUESTION", "EXCLUDED_EXTENSIONS", "ask_confirmation", "publish_story"]
