import logging
import os
import re
from pathlib import Path
from typing import Iterable, List, Optional
from urllib.parse import unquote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from campusconnect.config.settings import settings

logger = logging.getLogger(__name__)

LOCAL_MOUNT_PATH = "/files"


class StorageError(Exception):
    """Raised when an object could not be stored or removed."""


def safe_file_name(name: str) -> str:
    """Strip directory parts and characters that do not belong in an object key."""
    base = os.path.basename(name or "").strip() or "file"
    return re.sub(r"[^A-Za-z0-9._-]", "_", base)


class ObjectStorage:
    """Binary object store for notice attachments, result files and fee receipts.

    Objects live in S3 buckets, or under a local directory when running with
    STORAGE_MODE=local.
    """

    def __init__(self, mode: Optional[str] = None, local_root: Optional[str] = None,
                 public_base_url: Optional[str] = None):
        self.mode = (mode or settings.STORAGE_MODE).lower()
        self.local_root = Path(local_root or settings.STORAGE_LOCAL_ROOT)
        self.public_base_url = (public_base_url if public_base_url is not None
                                else settings.STORAGE_PUBLIC_BASE_URL).rstrip("/")
        self.s3 = None

        if self.mode == "local":
            logger.info(f"Using local object storage under {self.local_root}")
            return

        try:
            boto3_config = Config(
                region_name=settings.AWS_REGION,
                retries={'max_attempts': 2, 'mode': 'adaptive'},
                read_timeout=30,
                connect_timeout=5
            )
            if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                self.s3 = boto3.client(
                    's3',
                    aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                    config=boto3_config
                )
            else:
                self.s3 = boto3.client('s3', config=boto3_config)
            logger.info(f"S3 client initialized (region {settings.AWS_REGION})")
        except (BotoCoreError, ClientError) as e:
            logger.error(f"AWS client error during storage initialization: {e}")
            self.s3 = None

    def _local_target(self, bucket: str, path: str) -> Path:
        root = (self.local_root / bucket).resolve()
        target = (root / path).resolve()
        if root not in target.parents:
            raise StorageError(f"Path {path!r} is outside bucket {bucket}")
        return target

    def upload(self, bucket: str, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        """Store ``content`` at ``bucket/path`` and return the stored path."""
        if self.mode == "local":
            target = self._local_target(bucket, path)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)
            except OSError as e:
                raise StorageError(f"Could not write {bucket}/{path}: {e}") from e
            return path

        if self.s3 is None:
            raise StorageError("Object storage is not available")
        extra = {'ContentType': content_type} if content_type else {}
        try:
            self.s3.put_object(Bucket=bucket, Key=path, Body=content, **extra)
        except NoCredentialsError as e:
            raise StorageError("AWS credentials not found") from e
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Upload of {bucket}/{path} failed: {e}") from e
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{bucket}/{path}"
        if self.mode == "local":
            return f"{LOCAL_MOUNT_PATH}/{bucket}/{path}"
        return f"https://{bucket}.s3.{settings.AWS_REGION}.amazonaws.com/{path}"

    def path_from_public_url(self, bucket: str, url: str) -> Optional[str]:
        """Recover the object path from a URL produced by ``get_public_url``.

        Returns None for URLs that do not point into ``bucket``.
        """
        for prefix in (
            f"{self.public_base_url}/{bucket}/" if self.public_base_url else None,
            f"{LOCAL_MOUNT_PATH}/{bucket}/",
            f"https://{bucket}.s3.{settings.AWS_REGION}.amazonaws.com/",
        ):
            if prefix and url.startswith(prefix):
                return unquote(url[len(prefix):])
        return None

    def remove(self, bucket: str, paths: Iterable[str]) -> List[str]:
        """Delete objects by path; returns the paths that were removed."""
        paths = [p for p in paths if p]
        if not paths:
            return []

        if self.mode == "local":
            removed = []
            for path in paths:
                target = self._local_target(bucket, path)
                try:
                    target.unlink()
                    removed.append(path)
                except FileNotFoundError:
                    continue
                except OSError as e:
                    raise StorageError(f"Could not delete {bucket}/{path}: {e}") from e
            return removed

        if self.s3 is None:
            raise StorageError("Object storage is not available")
        try:
            self.s3.delete_objects(
                Bucket=bucket,
                Delete={'Objects': [{'Key': path} for path in paths]}
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Delete from {bucket} failed: {e}") from e
        return paths


_storage: Optional[ObjectStorage] = None

def get_storage() -> ObjectStorage:
    """FastAPI dependency provider for object storage."""
    global _storage
    if _storage is None:
        _storage = ObjectStorage()
    return _storage
