"""
Upload storage abstraction: local disk and S3-compatible object storage.
"""

from __future__ import annotations

import logging
import os
import shutil
import time
import uuid
from dataclasses import dataclass
from typing import BinaryIO, Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from clubhub.errors import UploadError

logger = logging.getLogger(__name__)


class UploadStorage(Protocol):
    """Where uploaded bytes end up. Returns a URL the client can fetch."""

    def save(
        self, stream: BinaryIO, filename: str, content_type: Optional[str] = None
    ) -> str:
        ...


def timestamped_name(filename: str) -> str:
    """Build a unique object name from the current time, keeping the extension."""
    _, ext = os.path.splitext(filename or "")
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext.lower()}"


@dataclass
class LocalDiskStorage:
    """Writes uploads to a directory that the app serves as static files."""

    upload_dir: str
    url_prefix: str = "/uploads"

    def __post_init__(self):
        os.makedirs(self.upload_dir, exist_ok=True)

    def save(
        self, stream: BinaryIO, filename: str, content_type: Optional[str] = None
    ) -> str:
        name = timestamped_name(filename)
        dest = os.path.join(self.upload_dir, name)
        try:
            with open(dest, "wb") as f:
                shutil.copyfileobj(stream, f)
        except OSError as exc:
            logger.exception("Failed to write upload to %s", dest)
            if os.path.exists(dest):
                os.remove(dest)
            raise UploadError(f"Upload failed: {exc}") from exc
        return f"{self.url_prefix.rstrip('/')}/{name}"


@dataclass
class ObjectStorage:
    """
    S3-compatible object storage client. Objects are written once and
    addressed by a permanent public URL.
    """

    bucket: str
    region: str = ""
    endpoint: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    public_base_url: Optional[str] = None
    key_prefix: str = "uploads"

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def url_for(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint:
            scheme, sep, host = self.endpoint.partition("://")
            if not sep:
                scheme, host = "https", self.endpoint
            return f"{scheme}://{self.bucket}.{host.rstrip('/')}/{key}"
        region = self.region or "us-east-1"
        return f"https://{self.bucket}.s3.{region}.amazonaws.com/{key}"

    def save(
        self, stream: BinaryIO, filename: str, content_type: Optional[str] = None
    ) -> str:
        name = timestamped_name(filename)
        key = f"{self.key_prefix.strip('/')}/{name}" if self.key_prefix else name
        extra_args = {"ContentType": content_type} if content_type else None
        try:
            self._client.upload_fileobj(
                stream, self.bucket, key, ExtraArgs=extra_args
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("Failed to upload %s to bucket %s", key, self.bucket)
            raise UploadError(f"Upload failed: {exc}") from exc
        return self.url_for(key)
