"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from clubhub.config import get_settings
from clubhub.db import DbClient, InMemoryDbClient, SqlDbClient
from clubhub.storage import LocalDiskStorage, ObjectStorage, UploadStorage

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_upload_storage: UploadStorage | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton store client so records persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlDbClient(settings.database_url)
    logger.info("Store client: %s", _db_client.__class__.__name__)
    return _db_client


def get_upload_storage() -> UploadStorage:
    """
    Return the upload strategy chosen by settings. The s3 backend requires a
    bucket; the local backend writes under ``upload_dir``.
    """
    global _upload_storage
    if _upload_storage:
        return _upload_storage

    settings = get_settings()
    if settings.storage_backend == "s3":
        if not settings.s3_bucket:
            raise ValueError("S3_BUCKET is required when STORAGE_BACKEND=s3")
        _upload_storage = ObjectStorage(
            bucket=settings.s3_bucket,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            public_base_url=settings.s3_public_base_url,
        )
    else:
        _upload_storage = LocalDiskStorage(
            upload_dir=settings.upload_dir,
            url_prefix=settings.uploads_url_prefix,
        )
    logger.info("Upload storage: %s", _upload_storage.__class__.__name__)
    return _upload_storage
