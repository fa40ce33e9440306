from __future__ import annotations

from typing import Any, Iterable, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from storykit.settings import RemoteStoreSettings
from storykit.storage import RemoteObject

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}
_DELETE_BATCH = 1000


class S3Storage:
    def __init__(
        self,
        bucket: str,
        region: Optional[str] = None,
        *,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        timeout: float = 300.0,
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        if client is None:
            session = boto3.session.Session(
                region_name=region,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
            )
            client = session.client(
                "s3",
                config=Config(
                    connect_timeout=timeout,
                    read_timeout=timeout,
                    retries={"mode": "standard"},
                ),
            )
        self.client = client

    @classmethod
    def from_settings(cls, store: RemoteStoreSettings) -> "S3Storage":
        return cls(
            store.bucket,
            store.region,
            access_key_id=store.access_key_id,
            secret_access_key=store.secret_access_key,
            timeout=store.timeout_seconds,
        )

    def head(self, key: str) -> RemoteObject | None:
        try:
            response = self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if str(exc.response.get("Error", {}).get("Code")) in _MISSING_CODES:
                return None
            raise
        return RemoteObject(
            key=key,
            etag=str(response.get("ETag", "")).strip('"'),
            size=int(response.get("ContentLength", 0)),
        )

    def put(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        content_encoding: str | None = None,
        acl: str | None = None,
    ) -> None:
        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": body,
            "ContentType": content_type,
        }
        if content_encoding:
            params["ContentEncoding"] = content_encoding
        if acl:
            params["ACL"] = acl
        self.client.put_object(**params)

    def list_keys(self, prefix: str) -> list[str]:
        keys: list[str] = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return sorted(keys)

    def delete(self, keys: Iterable[str]) -> None:
        pending = list(keys)
        for start in range(0, len(pending), _DELETE_BATCH):
            batch = pending[start : start + _DELETE_BATCH]
            self.client.delete_objects(
                Bucket=self.bucket,
                Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
            )

    def describe(self) -> str:
        return f"s3://{self.bucket}"


__all__ = ["S3Storage"]
