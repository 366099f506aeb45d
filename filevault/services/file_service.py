# ==============================================================================
# FILE SERVICE - Uploads, Versions and Downloads
# ==============================================================================
# Blob bytes go to LocalBlobStore; metadata, versions and quota accounting
# are written in one transaction per upload
# ==============================================================================

from __future__ import annotations

import logging
import mimetypes
from typing import Any, List, Optional, Tuple

from fastapi import UploadFile

from filevault.core.constants import ErrorMessages, SharePermissions, StorageConstants
from filevault.core.exceptions import NotFoundError, QuotaExceededError
from filevault.database import RecordStore, Table, Transaction
from filevault.schemas.base import PaginatedResponse
from filevault.schemas.file import FileResponse, FileVersionResponse
from filevault.services.base_service import BaseService, is_expired
from filevault.storage import LocalBlobStore, StoredBlob
from filevault.utils.helpers import sanitize_filename

logger = logging.getLogger(__name__)


class FileService(BaseService[FileResponse]):
    """
    File upload, versioning and retrieval.

    Access rules:
        - The owner may do anything with a file.
        - A user named on an unexpired share of the file, or of the
          folder holding it, may read it; a ``write`` share also allows
          uploading new versions.
        - Everyone else gets 404, so file IDs are not disclosed.

    Storage accounting: every stored version counts against the owner's
    quota until its blob is removed.
    """

    table = Table.FILE
    response_schema = FileResponse
    not_found_message = ErrorMessages.FILE_NOT_FOUND

    def __init__(self, store: RecordStore, blobs: LocalBlobStore) -> None:
        super().__init__(store)
        self._blobs = blobs

    # ==========================================================================
    # UPLOAD
    # ==========================================================================

    async def upload(
        self,
        owner_id: str,
        upload: UploadFile,
        folder_id: Optional[str] = None,
    ) -> FileResponse:
        """
        Store a new file as version 1.

        Args:
            owner_id: Uploading user
            upload: Multipart file
            folder_id: Target folder; root level when None

        Returns:
            Created file metadata

        Raises:
            NotFoundError: If ``folder_id`` is not one of the owner's folders
            FileTooLargeError: If the upload exceeds the size limit
            QuotaExceededError: If the owner's quota cannot hold it
        """
        if folder_id is not None:
            folder = await self._store.find_first(
                Table.FOLDER,
                where={"id": folder_id, "owner_id": owner_id},
                select={"id": True},
            )
            if folder is None:
                raise NotFoundError(
                    message=ErrorMessages.FOLDER_NOT_FOUND,
                    resource_type=Table.FOLDER.value,
                    resource_id=folder_id,
                )

        name = sanitize_filename(upload.filename or "")
        stored = await self._blobs.save(owner_id, upload)
        try:
            async with self._store.transaction() as tx:
                await self._charge(tx, owner_id, stored)
                file = await tx.insert(
                    self.table,
                    {
                        "name": name,
                        "mime_type": _mime_type(upload, name),
                        "size": stored.size,
                        "storage_path": stored.storage_path,
                        "current_version": 1,
                        "owner_id": owner_id,
                        "folder_id": folder_id,
                    },
                )
                await tx.insert(
                    Table.FILE_VERSION,
                    {
                        "file_id": file.id,
                        "version": 1,
                        "size": stored.size,
                        "storage_path": stored.storage_path,
                    },
                )
        except Exception:
            await self._blobs.delete(stored.storage_path)
            raise

        logger.info(f"Uploaded file {file.id} ({stored.size} bytes) for {owner_id}")
        return self._to_response(file)

    async def add_version(
        self,
        user_id: str,
        file_id: str,
        upload: UploadFile,
    ) -> FileResponse:
        """
        Store a new version and make it current.

        Concurrent uploads racing for the same version number fail with
        ``ConstraintViolationError`` on the ``(file_id, version)`` key.
        """
        file = await self._get_accessible(user_id, file_id, SharePermissions.WRITE)
        version = file.current_version + 1

        stored = await self._blobs.save(file.owner_id, upload)
        try:
            async with self._store.transaction() as tx:
                await self._charge(tx, file.owner_id, stored)
                await tx.insert(
                    Table.FILE_VERSION,
                    {
                        "file_id": file.id,
                        "version": version,
                        "size": stored.size,
                        "storage_path": stored.storage_path,
                    },
                )
                file = await tx.update(
                    self.table,
                    where={"id": file.id},
                    data={
                        "current_version": version,
                        "size": stored.size,
                        "storage_path": stored.storage_path,
                        "mime_type": _mime_type(upload, file.name),
                    },
                )
        except Exception:
            await self._blobs.delete(stored.storage_path)
            raise

        logger.info(f"Stored version {version} of file {file.id}")
        return self._to_response(file)

    # ==========================================================================
    # READ
    # ==========================================================================

    async def list(
        self,
        owner_id: str,
        folder_id: Optional[str],
        page: int,
        page_size: int,
    ) -> PaginatedResponse[FileResponse]:
        """Live files directly in ``folder_id`` (root level when None)."""
        return await self._paginate(
            {"owner_id": owner_id, "folder_id": folder_id, "is_deleted": False},
            page,
            page_size,
        )

    async def get(self, user_id: str, file_id: str) -> FileResponse:
        file = await self._get_accessible(user_id, file_id, SharePermissions.READ)
        return self._to_response(file)

    async def list_versions(self, user_id: str, file_id: str) -> List[FileVersionResponse]:
        """All versions of a file, newest first."""
        await self._get_accessible(user_id, file_id, SharePermissions.READ)
        versions = await self._store.find_many(
            Table.FILE_VERSION,
            where={"file_id": file_id},
            order_by={"version": "desc"},
        )
        return [
            FileVersionResponse.model_validate(version, from_attributes=True)
            for version in versions
        ]

    async def open_download(
        self,
        user_id: str,
        file_id: str,
        version: Optional[int] = None,
    ) -> Tuple[Any, str]:
        """
        Locate the blob to send for a download.

        Returns:
            The file record and the storage path of the requested version
            (the current one by default)
        """
        file = await self._get_accessible(user_id, file_id, SharePermissions.READ)
        if version is None or version == file.current_version:
            return file, file.storage_path

        record = await self._store.find_unique(
            Table.FILE_VERSION,
            where={"file_id": file.id, "version": version},
            select={"storage_path": True},
        )
        if record is None:
            raise NotFoundError(
                message=f"Version {version} not found",
                resource_type=Table.FILE_VERSION.value,
                resource_id=version,
            )
        return file, record["storage_path"]

    def stream(self, storage_path: str):
        """Async iterator over a blob's bytes."""
        return self._blobs.stream(storage_path)

    # ==========================================================================
    # DELETE
    # ==========================================================================

    async def delete(self, owner_id: str, file_id: str) -> None:
        """
        Soft-delete a file.

        The row and its versions stay in place; the file disappears from
        listings and lookups.
        """
        await self._get_or_404({"id": file_id, "owner_id": owner_id, "is_deleted": False})
        await self._store.update(self.table, where={"id": file_id}, data={"is_deleted": True})
        logger.info(f"Soft-deleted file {file_id}")

    # ==========================================================================
    # INTERNAL HELPERS
    # ==========================================================================

    async def _get_accessible(self, user_id: str, file_id: str, permission: str) -> Any:
        file = await self._get_or_404({"id": file_id, "is_deleted": False})
        if file.owner_id == user_id:
            return file

        targets: List[dict] = [{"file_id": file.id}]
        if file.folder_id is not None:
            targets.append({"folder_id": file.folder_id})
        shares = await self._store.find_many(
            Table.SHARE,
            where={"shared_with_id": user_id, "OR": targets},
        )
        for share in shares:
            if is_expired(share.expires_at):
                continue
            if permission == SharePermissions.READ or share.permission == SharePermissions.WRITE:
                return file

        raise NotFoundError(
            message=self.not_found_message,
            resource_type=self.table.value,
            resource_id=file_id,
        )

    @staticmethod
    async def _charge(tx: Transaction, owner_id: str, stored: StoredBlob) -> None:
        """Add a blob's size to the owner's usage, enforcing the quota."""
        user = await tx.find_unique(
            Table.USER,
            where={"id": owner_id},
            select={"storage_quota": True, "storage_used": True},
        )
        if user is None:
            raise NotFoundError(
                message=ErrorMessages.USER_NOT_FOUND,
                resource_type=Table.USER.value,
                resource_id=owner_id,
            )
        available = user["storage_quota"] - user["storage_used"]
        if stored.size > available:
            raise QuotaExceededError(
                required_bytes=stored.size,
                available_bytes=max(available, 0),
            )
        await tx.update(
            Table.USER,
            where={"id": owner_id},
            data={"storage_used": {"increment": stored.size}},
        )


def _mime_type(upload: UploadFile, name: str) -> str:
    if upload.content_type and upload.content_type != StorageConstants.DEFAULT_MIME_TYPE:
        return upload.content_type
    guessed, _ = mimetypes.guess_type(name)
    return guessed or StorageConstants.DEFAULT_MIME_TYPE
