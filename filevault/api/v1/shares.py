# ==============================================================================
# SHARES ENDPOINTS - Share Link Routes
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter, status

from filevault.api.dependencies import (
    CurrentUserID,
    OptionalUserID,
    PageDep,
    PerPageDep,
    ShareServiceDep,
)
from filevault.core.constants import APIConstants, SuccessMessages
from filevault.schemas.base import APIResponse, PaginatedResponse
from filevault.schemas.share import ShareCreate, ShareResolution, ShareResponse

router = APIRouter(prefix="/shares", tags=["Shares"])


@router.post(
    "",
    response_model=APIResponse[ShareResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create share",
    description="Share a file or folder publicly or with one registered user.",
)
async def create_share(
    schema: ShareCreate,
    user_id: CurrentUserID,
    service: ShareServiceDep,
) -> APIResponse[ShareResponse]:
    share = await service.create(user_id, schema)
    return APIResponse.ok(data=share, message=SuccessMessages.SHARE_CREATED)


@router.get(
    "",
    response_model=APIResponse[PaginatedResponse[ShareResponse]],
    summary="List my shares",
)
async def list_shares(
    user_id: CurrentUserID,
    service: ShareServiceDep,
    page: PageDep = 1,
    per_page: PerPageDep = APIConstants.DEFAULT_PAGE_SIZE,
) -> APIResponse[PaginatedResponse[ShareResponse]]:
    return APIResponse.ok(data=await service.list(user_id, page, per_page))


@router.delete(
    "/{share_id}",
    response_model=APIResponse[None],
    summary="Revoke share",
)
async def revoke_share(
    share_id: str,
    user_id: CurrentUserID,
    service: ShareServiceDep,
) -> APIResponse[None]:
    await service.revoke(user_id, share_id)
    return APIResponse.ok(data=None, message=SuccessMessages.DELETED)


@router.get(
    "/{token}/resolve",
    response_model=APIResponse[ShareResolution],
    summary="Resolve share token",
    description="Public links resolve anonymously; user-bound shares need that user's token.",
)
async def resolve_share(
    token: str,
    user_id: OptionalUserID,
    service: ShareServiceDep,
) -> APIResponse[ShareResolution]:
    return APIResponse.ok(data=await service.resolve(token, user_id))
