"""Checksum helpers for uploaded file streams."""

import hashlib
from typing import NamedTuple

from fastapi import UploadFile


class FileDigest(NamedTuple):
    checksum_sha256: str
    size_bytes: int


async def compute_sha256_and_size(
    upload_file: UploadFile,
    chunk_size: int = 1024 * 1024,
) -> FileDigest:
    """Hash an uploaded file in chunks and rewind it for the next reader."""
    hasher = hashlib.sha256()
    size_bytes = 0
    while chunk := await upload_file.read(chunk_size):
        hasher.update(chunk)
        size_bytes += len(chunk)
    await upload_file.seek(0)
    return FileDigest(hasher.hexdigest(), size_bytes)
