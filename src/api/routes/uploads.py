"""Upload API routes for storing and listing raw product files."""

import asyncio
import time
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, File, UploadFile, status

from src.api.dependencies import T_ObjectStore
from src.core.errors import MissingFilenameError, UnsupportedMediaTypeError
from src.core.logging import get_logger
from src.core.schemas import FileUploadPublic, StoredFileList
from src.utils.checksum import compute_sha256_and_size

router = APIRouter(prefix="/upload", tags=["upload"])
logger = get_logger(__name__)

ALLOWED_CONTENT_TYPES = {"text/csv", "application/vnd.ms-excel", "text/plain"}


def build_object_key(filename: str, uploaded_at_ms: int | None = None) -> str:
    """Prefix the bare filename with the upload time in epoch milliseconds."""
    if uploaded_at_ms is None:
        uploaded_at_ms = time.time_ns() // 1_000_000
    return f"{uploaded_at_ms}-{Path(filename).name}"


@router.post("", response_model=FileUploadPublic, status_code=status.HTTP_201_CREATED)
async def upload_file(
    store: T_ObjectStore,
    file: Annotated[UploadFile, File(...)],
) -> FileUploadPublic:
    """Store an uploaded CSV file under a timestamped object name."""
    content_type = file.content_type or ""
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise UnsupportedMediaTypeError()

    if not file.filename:
        raise MissingFilenameError()

    checksum_sha256, size_bytes = await compute_sha256_and_size(file)
    object_key = build_object_key(file.filename)
    logger.info(
        "upload.received",
        object_key=object_key,
        content_type=content_type,
        size_bytes=size_bytes,
    )

    await asyncio.to_thread(store.put, object_key, file.file, size_bytes, content_type)

    logger.info("upload.completed", object_key=object_key, checksum_sha256=checksum_sha256)
    return FileUploadPublic(
        file_name=object_key,
        content_type=content_type,
        size_bytes=size_bytes,
        checksum_sha256=checksum_sha256,
    )


@router.get("", response_model=StoredFileList)
async def list_files(store: T_ObjectStore) -> StoredFileList:
    files = await asyncio.to_thread(store.list_files)
    return StoredFileList(files=files)
