import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from bookverse.core.dependencies import get_current_user_id, get_follow_service, get_optional_user_id
from bookverse.core.exceptions import unwrap
from bookverse.models.schemas import ApiModel, PagedResult, UserSummary
from bookverse.services.follow_service import FollowService

router = APIRouter()


@router.post("/follows/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def follow_user(
    user_id: uuid.UUID,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    follow_service: FollowService = Depends(get_follow_service),
):
    unwrap(await follow_service.follow(caller_id, user_id))


@router.delete("/follows/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow_user(
    user_id: uuid.UUID,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    follow_service: FollowService = Depends(get_follow_service),
):
    unwrap(await follow_service.unfollow(caller_id, user_id))


@router.get("/follows/{user_id}/followers", response_model=PagedResult[UserSummary])
async def list_followers(
    user_id: uuid.UUID,
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1, le=100),
    follow_service: FollowService = Depends(get_follow_service),
):
    return unwrap(await follow_service.list_followers(user_id, page_number, page_size))


@router.get("/follows/{user_id}/following", response_model=PagedResult[UserSummary])
async def list_following(
    user_id: uuid.UUID,
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1, le=100),
    follow_service: FollowService = Depends(get_follow_service),
):
    return unwrap(await follow_service.list_following(user_id, page_number, page_size))


class FollowStatusResponse(ApiModel):
    user_id: uuid.UUID
    following: bool


@router.get("/follows/{user_id}", response_model=FollowStatusResponse)
async def get_follow_status(
    user_id: uuid.UUID,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    follow_service: FollowService = Depends(get_follow_service),
):
    """Whether the caller currently follows ``user_id``."""
    return FollowStatusResponse(user_id=user_id, following=await follow_service.is_following(caller_id, user_id))
