# ==============================================================================
# FOLDER SERVICE - Folder Tree Management
# ==============================================================================

from __future__ import annotations

import logging
from typing import List, Optional

from filevault.core.constants import ErrorMessages
from filevault.core.exceptions import BadRequestError
from filevault.database import RecordStore, Table
from filevault.schemas.base import PaginatedResponse
from filevault.schemas.folder import FolderCreate, FolderResponse, FolderUpdate
from filevault.services.base_service import BaseService
from filevault.storage import LocalBlobStore

logger = logging.getLogger(__name__)


class FolderService(BaseService[FolderResponse]):
    """
    Folder CRUD scoped to the folder's owner.

    Deleting a folder removes its whole subtree: the database cascades
    the rows, this service frees the blobs and the owner's used storage.
    """

    table = Table.FOLDER
    response_schema = FolderResponse
    not_found_message = ErrorMessages.FOLDER_NOT_FOUND

    def __init__(self, store: RecordStore, blobs: LocalBlobStore) -> None:
        super().__init__(store)
        self._blobs = blobs

    async def create(self, owner_id: str, schema: FolderCreate) -> FolderResponse:
        """
        Create a folder, at the root or under one of the owner's folders.

        Raises:
            NotFoundError: If ``parent_id`` is not one of the owner's folders
        """
        if schema.parent_id is not None:
            await self._get_or_404({"id": schema.parent_id, "owner_id": owner_id})

        folder = await self._store.insert(
            self.table,
            {"name": schema.name, "owner_id": owner_id, "parent_id": schema.parent_id},
        )
        return self._to_response(folder)

    async def list(
        self,
        owner_id: str,
        parent_id: Optional[str],
        page: int,
        page_size: int,
    ) -> PaginatedResponse[FolderResponse]:
        """Direct children of ``parent_id`` (root level when None), by name."""
        return await self._paginate(
            {"owner_id": owner_id, "parent_id": parent_id},
            page,
            page_size,
            order_by=[{"name": "asc"}, {"id": "asc"}],
        )

    async def get(self, owner_id: str, folder_id: str) -> FolderResponse:
        folder = await self._get_or_404({"id": folder_id, "owner_id": owner_id})
        return self._to_response(folder)

    async def update(
        self,
        owner_id: str,
        folder_id: str,
        schema: FolderUpdate,
    ) -> FolderResponse:
        """
        Rename and/or move a folder.

        An explicit ``parent_id: null`` moves the folder to the root.

        Raises:
            NotFoundError: If the folder or the new parent is not the owner's
            BadRequestError: If the move would create a cycle
        """
        await self._get_or_404({"id": folder_id, "owner_id": owner_id})
        data = schema.model_dump(exclude_unset=True)

        if "name" in data and data["name"] is None:
            del data["name"]
        new_parent = data.get("parent_id")
        if new_parent is not None:
            await self._get_or_404({"id": new_parent, "owner_id": owner_id})
            if new_parent == folder_id or new_parent in await self._descendant_ids(folder_id):
                raise BadRequestError(message="A folder cannot be moved into itself")

        folder = await self._store.update(self.table, where={"id": folder_id}, data=data)
        return self._to_response(folder)

    async def delete(self, owner_id: str, folder_id: str) -> None:
        """Delete a folder with every subfolder and file beneath it."""
        await self._get_or_404({"id": folder_id, "owner_id": owner_id})

        folder_ids = [folder_id] + await self._descendant_ids(folder_id)
        file_rows = await self._store.find_many(
            Table.FILE,
            where={"folder_id": {"in": folder_ids}},
            select={"id": True},
        )
        versions = await self._store.find_many(
            Table.FILE_VERSION,
            where={"file_id": {"in": [row["id"] for row in file_rows]}},
            select={"storage_path": True, "size": True},
        )
        freed = sum(version["size"] for version in versions)

        async with self._store.transaction() as tx:
            await tx.delete(self.table, where={"id": folder_id})
            if freed:
                await tx.update(
                    Table.USER,
                    where={"id": owner_id},
                    data={"storage_used": {"decrement": freed}},
                )

        for version in versions:
            await self._blobs.delete(version["storage_path"])
        logger.info(
            f"Deleted folder {folder_id} with {len(folder_ids) - 1} subfolders "
            f"and {len(file_rows)} files"
        )

    async def _descendant_ids(self, folder_id: str) -> List[str]:
        """IDs of every folder below ``folder_id``, breadth first."""
        found: List[str] = []
        frontier = [folder_id]
        while frontier:
            children = await self._store.find_many(
                self.table,
                where={"parent_id": {"in": frontier}},
                select={"id": True},
            )
            frontier = [child["id"] for child in children]
            found.extend(frontier)
        return found
