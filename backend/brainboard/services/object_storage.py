"""
Brainboard Backend: Object Storage Backends
===========================================

What:  Abstract blob store plus the two concrete backends: S3 (boto3) and a
       local directory (aiofiles) served back through GET /files/{key}.
How:   Callers only see `put`, `delete` and `key_from_url`. Backend-specific
       failures are translated into ObjectStorageError so routes map them to
       500 without knowing which backend is configured.

Key Layout:
    images/{board_id}/{uuid4}{ext}     card images
    thumbnails/{board_id}{ext}         board thumbnails
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import aiofiles
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from brainboard.config import Settings
from brainboard.exceptions import InvalidInputError, NotFoundError, ObjectStorageError

logger = logging.getLogger(__name__)


class ObjectStorage(ABC):
    """
    Abstract interface for blob storage.

    Contract:
        - put() stores bytes under a key and returns the public URL
        - delete() removes a key; deleting a missing key is not an error
        - All backend errors are wrapped in ObjectStorageError
    """

    @abstractmethod
    async def put(self, key: str, content: bytes, content_type: Optional[str] = None) -> str:
        """
        Store `content` under `key`.

        Returns:
            The URL clients use to fetch the object.

        Raises:
            ObjectStorageError: the backend rejected the write
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Remove `key`.

        Raises:
            ObjectStorageError: the backend rejected the delete
        """
        ...

    @staticmethod
    def key_from_url(url: str, prefix: str) -> Optional[str]:
        """
        Recovers a storage key from a stored public URL.

        The key starts at the last occurrence of `prefix` (e.g. "images/")
        inside the URL, which holds for every URL shape either backend produces.
        Returns None when the prefix does not occur.
        """
        if not url:
            return None
        idx = url.rfind(prefix)
        if idx < 0:
            return None
        return url[idx:]


class S3ObjectStorage(ObjectStorage):
    """
    Stores objects in one S3 bucket.

    boto3 is synchronous; every call runs in a worker thread through
    asyncio.to_thread so the event loop keeps serving other requests.
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url.rstrip("/") if endpoint_url else None
        self.client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=self.endpoint_url,
        )
        logger.info("S3ObjectStorage initialized: bucket=%s region=%s", bucket, region)

    def url_for(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def put(self, key: str, content: bytes, content_type: Optional[str] = None) -> str:
        extra = {"ContentType": content_type} if content_type else {}
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=content,
                **extra,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 upload failed for key %s: %s", key, str(e), exc_info=True)
            raise ObjectStorageError(
                message="Failed to upload file",
                context={"key": key, "bucket": self.bucket, "error": str(e)},
            )

        logger.info("Stored s3://%s/%s (%d bytes)", self.bucket, key, len(content))
        return self.url_for(key)

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise ObjectStorageError(
                message="Failed to delete file",
                context={"key": key, "bucket": self.bucket, "error": str(e)},
            )
        logger.info("Deleted s3://%s/%s", self.bucket, key)


class LocalObjectStorage(ObjectStorage):
    """
    Stores objects as files below `root`.

    URLs point at `{public_base_url}/files/{key}`, which routes/files.py
    serves. Keys are resolved against the root and rejected if they escape it.
    """

    def __init__(self, root: str, public_base_url: str):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")
        logger.info("LocalObjectStorage initialized with root=%s", self.root)

    def path_for(self, key: str) -> Path:
        """Absolute path of `key`; raises InvalidInputError for keys outside the root."""
        candidate = (self.root / key).resolve()
        if candidate == self.root or self.root not in candidate.parents:
            raise InvalidInputError(message="Invalid file key", field="key", context={"key": key})
        return candidate

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/files/{key}"

    async def put(self, key: str, content: bytes, content_type: Optional[str] = None) -> str:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", path, str(e))
            raise ObjectStorageError(
                message="Failed to upload file",
                context={"path": str(path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", key, len(content))
        return self.url_for(key)

    async def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            if path.exists():
                os.remove(path)
                logger.info("Deleted file: %s", key)
            else:
                logger.debug("Delete: file already gone: %s", key)
        except OSError as e:
            raise ObjectStorageError(
                message="Failed to delete file",
                context={"path": str(path), "os_error": str(e)},
            )

    async def read(self, key: str) -> bytes:
        """Returns the stored bytes; NotFoundError if nothing is stored under `key`."""
        path = self.path_for(key)
        if not path.is_file():
            raise NotFoundError(resource="file", message="File not found")
        async with aiofiles.open(path, "rb") as f:
            return await f.read()


def build_object_storage(settings: Settings) -> ObjectStorage:
    """Creates the backend selected by settings.storage_backend."""
    if settings.storage_backend == "s3":
        return S3ObjectStorage(
            bucket=settings.s3_bucket,
            region=settings.aws_region,
            endpoint_url=settings.s3_endpoint_url,
        )
    return LocalObjectStorage(root=settings.storage_root, public_base_url=settings.public_base_url)
