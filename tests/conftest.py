from __future__ import annotations

import hashlib
import subprocess
import sys
from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ClientError
from loguru import logger

from storykit.settings import Settings


class FakeS3Client:
    """In-memory stand-in for the handful of boto3 S3 calls storykit makes."""

    def __init__(self) -> None:
        self.objects: dict[str, dict[str, Any]] = {}
        self.calls: list[str] = []

    def head_object(self, Bucket: str, Key: str) -> dict[str, Any]:
        self.calls.append("head_object")
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")
        obj = self.objects[Key]
        return {"ETag": f'"{obj["ETag"]}"', "ContentLength": len(obj["Body"])}

    def put_object(self, Bucket: str, Key: str, Body: bytes, **kwargs: Any) -> dict[str, Any]:
        self.calls.append("put_object")
        etag = hashlib.md5(Body).hexdigest()
        self.objects[Key] = {"Body": Body, "ETag": etag, **kwargs}
        return {"ETag": f'"{etag}"'}

    def delete_objects(self, Bucket: str, Delete: dict[str, Any]) -> dict[str, Any]:
        self.calls.append("delete_objects")
        for item in Delete["Objects"]:
            self.objects.pop(item["Key"], None)
        return {}

    def get_paginator(self, name: str) -> "FakeS3Client":
        assert name == "list_objects_v2"
        return self

    def paginate(self, Bucket: str, Prefix: str):
        self.calls.append("list_objects_v2")
        keys = sorted(key for key in self.objects if key.startswith(Prefix))
        yield {"Contents": [{"Key": key} for key in keys[:2]]}
        if len(keys) > 2:
            yield {"Contents": [{"Key": key} for key in keys[2:]]}

    @property
    def writes(self) -> int:
        return sum(1 for call in self.calls if call in ("put_object", "delete_objects"))


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def make_settings(tmp_path: Path):
    def factory(**overrides: Any) -> Settings:
        payload: dict[str, Any] = {
            "projectName": "My Cool Story",
            "dest": "www",
            "assetPath": {"domain": "https://media.example.com"},
            "projectInitDate": {"year": "2017", "month": "01"},
            "root": tmp_path,
        }
        publish = overrides.pop("publish", {})
        payload.update(overrides)
        payload["publish"] = {"acl": None, **publish}
        return Settings(**payload)

    return factory


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def clean_git(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    """Make ``git status --porcelain`` report a clean tree."""
    commands: list[list[str]] = []

    def fake_run(cmd, **kwargs):
        commands.append(list(cmd))
        return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")

    monkeypatch.setattr("storykit.validate.preflight.subprocess.run", fake_run)
    return commands


@pytest.fixture(autouse=True)
def _restore_logging():
    """The CLI replaces loguru sinks; give every test the default one back."""
    yield
    logger.remove()
    logger.add(sys.stderr)
