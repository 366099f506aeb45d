# ==============================================================================
# BLOB STORAGE - Uploaded Bytes on the Local Filesystem
# ==============================================================================
# Blobs live at STORAGE_DIR/<owner_id>/<uuid>; only the relative path is
# recorded in the database
# ==============================================================================

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Union

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from filevault.core.constants import StorageConstants
from filevault.core.exceptions import BadRequestError, FileTooLargeError
from filevault.utils.helpers import generate_uuid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredBlob:
    """Location and size of a blob written to disk."""

    storage_path: str
    size: int


class LocalBlobStore:
    """
    Writes and reads file contents under a root directory.

    Attributes:
        root: Directory every blob lives under
        max_bytes: Largest accepted blob

    Example:
        >>> blobs = LocalBlobStore(Path("./storage"), max_bytes=100 * 1024 * 1024)
        >>> stored = await blobs.save(user_id, upload)
        >>> blobs.resolve(stored.storage_path)
        PosixPath('storage/<user_id>/<uuid>')
    """

    def __init__(self, root: Union[str, Path], max_bytes: int) -> None:
        self.root = Path(root)
        self.max_bytes = max_bytes

    def resolve(self, storage_path: str) -> Path:
        """
        Absolute path of a stored blob.

        Raises:
            BadRequestError: If the path escapes the storage root
        """
        root = self.root.resolve()
        path = (root / storage_path).resolve()
        if root != path and root not in path.parents:
            raise BadRequestError(message="Invalid storage path")
        return path

    async def save(self, owner_id: str, upload: UploadFile) -> StoredBlob:
        """
        Stream an upload to a new blob owned by ``owner_id``.

        Args:
            owner_id: Owning user's ID, used as the directory name
            upload: Incoming multipart file

        Returns:
            StoredBlob with the relative path and byte size

        Raises:
            FileTooLargeError: If the upload exceeds ``max_bytes``; the
                partial blob is removed
        """
        storage_path = f"{owner_id}/{generate_uuid()}"
        path = self.resolve(storage_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        size = 0
        try:
            async with aiofiles.open(path, "wb") as f:
                while True:
                    chunk = await upload.read(StorageConstants.CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise FileTooLargeError(self.max_bytes)
                    await f.write(chunk)
        except (FileTooLargeError, OSError):
            await self._remove(path)
            raise

        logger.info(f"Stored blob {storage_path} ({size} bytes)")
        return StoredBlob(storage_path=storage_path, size=size)

    async def stream(self, storage_path: str) -> AsyncIterator[bytes]:
        """Yield a blob's contents in chunks."""
        async with aiofiles.open(self.resolve(storage_path), "rb") as f:
            while True:
                chunk = await f.read(StorageConstants.CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

    async def delete(self, storage_path: str) -> None:
        """Remove a blob; missing blobs are ignored."""
        await self._remove(self.resolve(storage_path))

    async def exists(self, storage_path: str) -> bool:
        """Check whether a blob is present on disk."""
        return await aiofiles.os.path.exists(self.resolve(storage_path))

    @staticmethod
    async def _remove(path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return
        logger.debug(f"Removed blob {os.fspath(path)}")
