# ==============================================================================
# SHARE SERVICE - Share Links
# ==============================================================================

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from filevault.core.constants import ErrorMessages
from filevault.core.exceptions import AuthorizationError, NotFoundError
from filevault.core.security import generate_share_token
from filevault.database import Table
from filevault.schemas.base import PaginatedResponse
from filevault.schemas.file import FileResponse
from filevault.schemas.folder import FolderResponse
from filevault.schemas.share import ShareCreate, ShareResolution, ShareResponse
from filevault.services.base_service import BaseService, is_expired
from filevault.utils.helpers import utc_now

logger = logging.getLogger(__name__)


class ShareService(BaseService[ShareResponse]):
    """
    Create, list, revoke and resolve shares.

    A share targets one file or one folder. Without ``shared_with_id`` it
    is a public link: anyone holding the token can resolve it.
    """

    table = Table.SHARE
    response_schema = ShareResponse
    not_found_message = ErrorMessages.SHARE_NOT_FOUND

    async def create(self, user_id: str, schema: ShareCreate) -> ShareResponse:
        """
        Share one of the user's files or folders.

        Raises:
            NotFoundError: If the target or the recipient does not exist
        """
        if schema.file_id is not None:
            target, where = Table.FILE, {"id": schema.file_id, "is_deleted": False}
        else:
            target, where = Table.FOLDER, {"id": schema.folder_id}
        owned = await self._store.find_first(
            target,
            where={**where, "owner_id": user_id},
            select={"id": True},
        )
        if owned is None:
            raise NotFoundError(
                message=f"{target.value} not found",
                resource_type=target.value,
                resource_id=where["id"],
            )

        shared_with_id: Optional[str] = None
        if schema.shared_with_email is not None:
            recipient = await self._store.find_unique(
                Table.USER,
                where={"email": schema.shared_with_email.lower()},
                select={"id": True},
            )
            if recipient is None:
                raise NotFoundError(
                    message=ErrorMessages.USER_NOT_FOUND,
                    resource_type=Table.USER.value,
                )
            shared_with_id = recipient["id"]

        expires_at = None
        if schema.expires_in_hours is not None:
            expires_at = utc_now() + timedelta(hours=schema.expires_in_hours)

        share = await self._store.insert(
            self.table,
            {
                "token": generate_share_token(),
                "permission": schema.permission,
                "expires_at": expires_at,
                "file_id": schema.file_id,
                "folder_id": schema.folder_id,
                "shared_by_id": user_id,
                "shared_with_id": shared_with_id,
            },
        )
        logger.info(f"User {user_id} shared {target.value} {where['id']}")
        return self._to_response(share)

    async def list(
        self,
        user_id: str,
        page: int,
        page_size: int,
    ) -> PaginatedResponse[ShareResponse]:
        """Shares created by ``user_id``."""
        return await self._paginate({"shared_by_id": user_id}, page, page_size)

    async def revoke(self, user_id: str, share_id: str) -> None:
        """
        Delete one of the user's shares.

        Raises:
            RecordNotFoundError: If the user has no share with that ID
        """
        await self._store.delete(
            self.table,
            where={"id": share_id, "shared_by_id": user_id},
        )

    async def resolve(self, token: str, user_id: Optional[str]) -> ShareResolution:
        """
        Look up what a share token grants access to.

        Raises:
            NotFoundError: If the token is unknown or its target is gone
            AuthorizationError: If the share expired or names another user
        """
        share = await self._store.find_unique(self.table, where={"token": token})
        if share is None:
            raise NotFoundError(message=self.not_found_message, resource_type=self.table.value)
        if is_expired(share.expires_at):
            raise AuthorizationError(message=ErrorMessages.SHARE_EXPIRED)
        if share.shared_with_id is not None and share.shared_with_id != user_id:
            raise AuthorizationError(message=ErrorMessages.PERMISSION_DENIED)

        resolution = ShareResolution(share=self._to_response(share))
        if share.file_id is not None:
            file = await self._store.find_first(
                Table.FILE,
                where={"id": share.file_id, "is_deleted": False},
            )
            if file is None:
                raise NotFoundError(message=ErrorMessages.FILE_NOT_FOUND, resource_type="File")
            resolution.file = FileResponse.model_validate(file, from_attributes=True)
        else:
            folder = await self._store.find_unique(Table.FOLDER, where={"id": share.folder_id})
            resolution.folder = FolderResponse.model_validate(folder, from_attributes=True)
        return resolution
