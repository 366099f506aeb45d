# ==============================================================================
# FOLDERS ENDPOINTS - Folder Tree Routes
# ==============================================================================

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, status

from filevault.api.dependencies import (
    CurrentUserID,
    FolderServiceDep,
    PageDep,
    PerPageDep,
)
from filevault.core.constants import APIConstants, SuccessMessages
from filevault.schemas.base import APIResponse, PaginatedResponse
from filevault.schemas.folder import FolderCreate, FolderResponse, FolderUpdate

router = APIRouter(prefix="/folders", tags=["Folders"])


@router.post(
    "",
    response_model=APIResponse[FolderResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create folder",
)
async def create_folder(
    schema: FolderCreate,
    user_id: CurrentUserID,
    service: FolderServiceDep,
) -> APIResponse[FolderResponse]:
    folder = await service.create(user_id, schema)
    return APIResponse.ok(data=folder, message=SuccessMessages.FOLDER_CREATED)


@router.get(
    "",
    response_model=APIResponse[PaginatedResponse[FolderResponse]],
    summary="List folders",
    description="List the subfolders of `parent_id`, or root-level folders when omitted.",
)
async def list_folders(
    user_id: CurrentUserID,
    service: FolderServiceDep,
    parent_id: Optional[str] = None,
    page: PageDep = 1,
    per_page: PerPageDep = APIConstants.DEFAULT_PAGE_SIZE,
) -> APIResponse[PaginatedResponse[FolderResponse]]:
    folders = await service.list(user_id, parent_id, page, per_page)
    return APIResponse.ok(data=folders)


@router.get(
    "/{folder_id}",
    response_model=APIResponse[FolderResponse],
    summary="Get folder",
)
async def get_folder(
    folder_id: str,
    user_id: CurrentUserID,
    service: FolderServiceDep,
) -> APIResponse[FolderResponse]:
    folder = await service.get(user_id, folder_id)
    return APIResponse.ok(data=folder)


@router.patch(
    "/{folder_id}",
    response_model=APIResponse[FolderResponse],
    summary="Rename or move folder",
)
async def update_folder(
    folder_id: str,
    schema: FolderUpdate,
    user_id: CurrentUserID,
    service: FolderServiceDep,
) -> APIResponse[FolderResponse]:
    folder = await service.update(user_id, folder_id, schema)
    return APIResponse.ok(data=folder)


@router.delete(
    "/{folder_id}",
    response_model=APIResponse[None],
    summary="Delete folder",
    description="Delete a folder together with its subfolders and files.",
)
async def delete_folder(
    folder_id: str,
    user_id: CurrentUserID,
    service: FolderServiceDep,
) -> APIResponse[None]:
    await service.delete(user_id, folder_id)
    return APIResponse.ok(data=None, message=SuccessMessages.DELETED)
