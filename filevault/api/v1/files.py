# ==============================================================================
# FILES ENDPOINTS - Upload, Versions and Download Routes
# ==============================================================================

from __future__ import annotations

from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from filevault.api.dependencies import (
    CurrentUserID,
    FileServiceDep,
    PageDep,
    PerPageDep,
)
from filevault.core.constants import APIConstants, SuccessMessages
from filevault.schemas.base import APIResponse, PaginatedResponse
from filevault.schemas.file import FileResponse, FileVersionResponse

router = APIRouter(prefix="/files", tags=["Files"])


@router.post(
    "",
    response_model=APIResponse[FileResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Upload file",
    description="Multipart upload; the file is stored as version 1.",
)
async def upload_file(
    user_id: CurrentUserID,
    service: FileServiceDep,
    file: UploadFile = File(...),
    folder_id: Optional[str] = Form(None),
) -> APIResponse[FileResponse]:
    stored = await service.upload(user_id, file, folder_id=folder_id)
    return APIResponse.ok(data=stored, message=SuccessMessages.FILE_UPLOADED)


@router.get(
    "",
    response_model=APIResponse[PaginatedResponse[FileResponse]],
    summary="List files",
    description="List files in `folder_id`, or root-level files when omitted.",
)
async def list_files(
    user_id: CurrentUserID,
    service: FileServiceDep,
    folder_id: Optional[str] = None,
    page: PageDep = 1,
    per_page: PerPageDep = APIConstants.DEFAULT_PAGE_SIZE,
) -> APIResponse[PaginatedResponse[FileResponse]]:
    files = await service.list(user_id, folder_id, page, per_page)
    return APIResponse.ok(data=files)


@router.get(
    "/{file_id}",
    response_model=APIResponse[FileResponse],
    summary="Get file metadata",
)
async def get_file(
    file_id: str,
    user_id: CurrentUserID,
    service: FileServiceDep,
) -> APIResponse[FileResponse]:
    return APIResponse.ok(data=await service.get(user_id, file_id))


@router.get(
    "/{file_id}/download",
    response_class=StreamingResponse,
    summary="Download file",
    description="Stream the current version, or `version` when given.",
)
async def download_file(
    file_id: str,
    user_id: CurrentUserID,
    service: FileServiceDep,
    version: Optional[int] = Query(None, ge=1),
) -> StreamingResponse:
    file, storage_path = await service.open_download(user_id, file_id, version)
    return StreamingResponse(
        service.stream(storage_path),
        media_type=file.mime_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(file.name)}",
        },
    )


@router.post(
    "/{file_id}/versions",
    response_model=APIResponse[FileResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Upload new version",
)
async def upload_version(
    file_id: str,
    user_id: CurrentUserID,
    service: FileServiceDep,
    file: UploadFile = File(...),
) -> APIResponse[FileResponse]:
    updated = await service.add_version(user_id, file_id, file)
    return APIResponse.ok(data=updated, message=SuccessMessages.VERSION_UPLOADED)


@router.get(
    "/{file_id}/versions",
    response_model=APIResponse[List[FileVersionResponse]],
    summary="List versions",
)
async def list_versions(
    file_id: str,
    user_id: CurrentUserID,
    service: FileServiceDep,
) -> APIResponse[List[FileVersionResponse]]:
    return APIResponse.ok(data=await service.list_versions(user_id, file_id))


@router.delete(
    "/{file_id}",
    response_model=APIResponse[None],
    summary="Delete file",
    description="Soft delete: the file disappears from listings; its versions are kept.",
)
async def delete_file(
    file_id: str,
    user_id: CurrentUserID,
    service: FileServiceDep,
) -> APIResponse[None]:
    await service.delete(user_id, file_id)
    return APIResponse.ok(data=None, message=SuccessMessages.DELETED)
