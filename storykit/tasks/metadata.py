"""Combine build metadata into the single payload consumed by embeds."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from storykit.exceptions import MetadataError
from storykit.settings import Settings

OUTPUT_NAME = "remoteData.json"


def read_json(path: Path) -> Any:
    if not path.is_file():
        raise MetadataError(f"Metadata file not found: {path}", {"path": str(path)})
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise MetadataError(f"Malformed JSON in {path}: {exc}", {"path": str(path)}) from exc


def combine_json(settings: Settings, *, output_name: str = OUTPUT_NAME) -> Path:
    """Merge ``embed.json`` (markup and model) and ``styles/main.json`` into one file.

    Returns:
        Path of the written payload, ``<dest>/remoteData.json`` by default.
    """
    dest = settings.dest_dir
    payload = {
        "embed": read_json(dest / "embed.json"),
        "styles": read_json(dest / "styles" / "main.json"),
    }
    target = dest / output_name
    target.write_text(json.dumps(payload, separators=(",", ":")), encoding="utf-8")
    logger.info("Combined metadata written to {}", target)
    return target


__all__ = ["OUTPUT_NAME", "combine_json", "read_json"]
