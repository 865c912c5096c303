"""S3-compatible object storage service helpers."""

import json
from io import BytesIO
from typing import Any, BinaryIO, Protocol

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from src.core.config import settings
from src.core.errors import NotFoundError, StorageError
from src.core.logging import get_logger
from src.core.schemas import StoredFilePublic

MISSING_OBJECT_CODES = frozenset({"404", "NoSuchKey", "NoSuchBucket", "NotFound"})
logger = get_logger(__name__)


class ObjectStore(Protocol):
    """Object storage operations needed by the analysis service."""

    def fetch(self, object_key: str) -> bytes: ...

    def store(self, object_key: str, payload: dict[str, object]) -> str | None: ...

    def put(self, object_key: str, data: BinaryIO, length: int, content_type: str) -> str | None: ...

    def exists(self, object_key: str) -> bool: ...

    def list_files(self) -> list[StoredFilePublic]: ...


def build_s3_client() -> BaseClient:
    """Build an S3 client for the configured MinIO/S3 endpoint."""
    return boto3.client(
        "s3",
        endpoint_url=settings.s3_endpoint_url,
        aws_access_key_id=settings.s3_access_key,
        aws_secret_access_key=settings.s3_secret_key,
        region_name=settings.s3_region,
        config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
    )


def error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def ensure_bucket(client: BaseClient, bucket: str) -> None:
    """Create bucket when it does not already exist."""
    try:
        client.head_bucket(Bucket=bucket)
    except ClientError as exc:
        if error_code(exc) not in MISSING_OBJECT_CODES:
            raise
        client.create_bucket(Bucket=bucket)
        logger.info("storage.bucket.created", bucket=bucket)


def upload_object(
    client: BaseClient,
    bucket: str,
    object_key: str,
    data: BinaryIO,
    length: int,
    content_type: str,
) -> str | None:
    """Upload a stream as an object and return storage ETag."""
    result = client.put_object(
        Bucket=bucket,
        Key=object_key,
        Body=data,
        ContentLength=length,
        ContentType=content_type,
    )
    logger.info(
        "storage.object.uploaded",
        bucket=bucket,
        object_key=object_key,
        size_bytes=length,
        content_type=content_type,
    )
    return result.get("ETag")


def download_object(client: BaseClient, bucket: str, object_key: str) -> bytes:
    """Download object payload bytes and close the streaming body."""
    response = client.get_object(Bucket=bucket, Key=object_key)
    body = response["Body"]
    try:
        payload: bytes = body.read()
        logger.info(
            "storage.object.downloaded",
            bucket=bucket,
            object_key=object_key,
            size_bytes=len(payload),
        )
        return payload
    finally:
        body.close()


def upload_json_object(
    client: BaseClient,
    bucket: str,
    object_key: str,
    payload: dict[str, object],
) -> str | None:
    """Serialize a JSON payload and upload it as an object."""
    body = json.dumps(payload, separators=(",", ":"), default=str).encode("utf-8")
    return upload_object(
        client=client,
        bucket=bucket,
        object_key=object_key,
        data=BytesIO(body),
        length=len(body),
        content_type="application/json",
    )


def stat_content_type(client: BaseClient, bucket: str, object_key: str) -> str | None:
    """Return the stored Content-Type, or None when the object vanished meanwhile."""
    try:
        response = client.head_object(Bucket=bucket, Key=object_key)
    except ClientError as exc:
        if error_code(exc) in MISSING_OBJECT_CODES:
            return None
        raise
    return response.get("ContentType")


def _to_stored_file(item: dict[str, Any], content_type: str | None) -> StoredFilePublic:
    return StoredFilePublic(
        name=item["Key"],
        size_bytes=item.get("Size"),
        content_type=content_type,
        last_modified=item.get("LastModified"),
    )


class S3ObjectStore:
    """ObjectStore backed by one S3 bucket.

    Client failures surface as ``NotFoundError`` for missing objects and
    ``StorageError`` for everything else.
    """

    def __init__(self, client: BaseClient, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    def _failure(self, operation: str, object_key: str | None, exc: Exception) -> StorageError:
        logger.exception(
            f"storage.{operation}.failed",
            bucket=self.bucket,
            object_key=object_key,
            exc_info=exc,
        )
        return StorageError(f"Storage {operation} failed for {object_key or self.bucket}: {exc}")

    def fetch(self, object_key: str) -> bytes:
        try:
            return download_object(self.client, self.bucket, object_key)
        except ClientError as exc:
            if error_code(exc) in MISSING_OBJECT_CODES:
                raise NotFoundError(f"File not found: {object_key}") from exc
            raise self._failure("fetch", object_key, exc) from exc
        except (BotoCoreError, OSError) as exc:
            raise self._failure("fetch", object_key, exc) from exc

    def store(self, object_key: str, payload: dict[str, object]) -> str | None:
        try:
            ensure_bucket(self.client, self.bucket)
            return upload_json_object(self.client, self.bucket, object_key, payload)
        except (ClientError, BotoCoreError, OSError) as exc:
            raise self._failure("store", object_key, exc) from exc

    def put(self, object_key: str, data: BinaryIO, length: int, content_type: str) -> str | None:
        try:
            ensure_bucket(self.client, self.bucket)
            return upload_object(self.client, self.bucket, object_key, data, length, content_type)
        except (ClientError, BotoCoreError, OSError) as exc:
            raise self._failure("put", object_key, exc) from exc

    def exists(self, object_key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=object_key)
        except ClientError as exc:
            if error_code(exc) in MISSING_OBJECT_CODES:
                return False
            raise self._failure("stat", object_key, exc) from exc
        except (BotoCoreError, OSError) as exc:
            raise self._failure("stat", object_key, exc) from exc
        return True

    def list_files(self) -> list[StoredFilePublic]:
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            return [
                _to_stored_file(item, stat_content_type(self.client, self.bucket, item["Key"]))
                for page in paginator.paginate(Bucket=self.bucket)
                for item in page.get("Contents", [])
            ]
        except ClientError as exc:
            if error_code(exc) == "NoSuchBucket":
                return []
            raise self._failure("list", None, exc) from exc
        except (BotoCoreError, OSError) as exc:
            raise self._failure("list", None, exc) from exc
