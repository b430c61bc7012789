# This project was developed with assistance from AI tools.
"""Blob storage for uploaded application documents.

Two backends share one async interface: local disk (the default, files are
referenced as ``/uploads/<filename>``) and S3-compatible object storage via
boto3. Blocking I/O runs in the default thread-pool executor. The module
exposes a singleton initialised at app startup via ``init_storage_service()``.

Callers treat the returned reference as an opaque handle.
"""

import asyncio
import logging
import os
import uuid
from functools import partial
from pathlib import Path
from typing import Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from ..core.config import Settings

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/png",
}

ALLOWED_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png")


def build_object_key(channel: str, filename: str) -> str:
    """Build a collision-free object name: ``{channel}-{uuid}{ext}``.

    Only the extension of the client filename is kept, which rules out path
    traversal through crafted names.
    """
    ext = os.path.splitext(os.path.basename(filename or ""))[1].lower()
    safe_channel = "".join(c if c.isalnum() or c in "-_" else "_" for c in channel) or "file"
    return f"{safe_channel}-{uuid.uuid4().hex}{ext}"


class StorageService(Protocol):
    async def upload_file(self, file_data: bytes, object_key: str, content_type: str) -> str:
        """Store bytes and return the reference recorded on the document."""
        ...

    async def delete_file(self, reference: str) -> None:
        """Remove a previously stored blob."""
        ...


class LocalStorageService:
    """Writes uploads into a directory served under a URL prefix."""

    def __init__(self, upload_dir: str, url_prefix: str = "/uploads"):
        self._root = Path(upload_dir)
        self._prefix = url_prefix.rstrip("/")
        self._root.mkdir(parents=True, exist_ok=True)

    async def upload_file(self, file_data: bytes, object_key: str, content_type: str) -> str:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, (self._root / object_key).write_bytes, file_data)
        return f"{self._prefix}/{object_key}"

    async def delete_file(self, reference: str) -> None:
        name = os.path.basename(reference)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, partial((self._root / name).unlink, missing_ok=True))


class S3StorageService:
    """Thin wrapper around a boto3 S3 client."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        region: str = "us-east-1",
    ):
        self._bucket = bucket
        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=BotoConfig(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
            ),
        )
        self._ensure_bucket()

    def _ensure_bucket(self) -> None:
        """Create the bucket if it doesn't already exist (dev convenience)."""
        try:
            self._client.head_bucket(Bucket=self._bucket)
        except ClientError:
            logger.info("Creating S3 bucket: %s", self._bucket)
            self._client.create_bucket(Bucket=self._bucket)

    async def upload_file(self, file_data: bytes, object_key: str, content_type: str) -> str:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None,
            partial(
                self._client.put_object,
                Bucket=self._bucket,
                Key=object_key,
                Body=file_data,
                ContentType=content_type,
            ),
        )
        return f"s3://{self._bucket}/{object_key}"

    async def delete_file(self, reference: str) -> None:
        key = reference.removeprefix(f"s3://{self._bucket}/")
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None,
            partial(self._client.delete_object, Bucket=self._bucket, Key=key),
        )


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_service: StorageService | None = None


def init_storage_service(cfg: Settings) -> StorageService:
    """Initialise the singleton (called once from app lifespan)."""
    global _service  # noqa: PLW0603
    if cfg.STORAGE_BACKEND == "s3":
        _service = S3StorageService(
            endpoint=cfg.S3_ENDPOINT,
            access_key=cfg.S3_ACCESS_KEY,
            secret_key=cfg.S3_SECRET_KEY,
            bucket=cfg.S3_BUCKET,
            region=cfg.S3_REGION,
        )
        logger.info("StorageService initialised (backend=s3, bucket=%s)", cfg.S3_BUCKET)
    elif cfg.STORAGE_BACKEND == "local":
        _service = LocalStorageService(cfg.UPLOAD_DIR, cfg.UPLOAD_URL_PREFIX)
        logger.info("StorageService initialised (backend=local, dir=%s)", cfg.UPLOAD_DIR)
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND: {cfg.STORAGE_BACKEND!r}")
    return _service


def get_storage_service() -> StorageService:
    """Return the initialised StorageService singleton."""
    if _service is None:
        raise RuntimeError("StorageService not initialised -- call init_storage_service() first")
    return _service
