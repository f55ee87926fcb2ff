import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from bookverse.core.dependencies import get_optional_user_id, get_user_service
from bookverse.core.exceptions import unwrap
from bookverse.models.schemas import ApiModel, UserProfile, UserSummary
from bookverse.services.user_service import UserService

router = APIRouter()


class UpdateProfileRequest(ApiModel):
    display_name: Optional[str] = Field(default=None, max_length=128)
    avatar_url: Optional[str] = Field(default=None, max_length=512)
    bio: Optional[str] = None


@router.get("/users/{username}", response_model=UserProfile)
async def get_profile(
    username: str,
    user_service: UserService = Depends(get_user_service),
):
    return unwrap(await user_service.get_profile(username))


@router.put("/users/me", response_model=UserSummary)
async def update_profile(
    request: UpdateProfileRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    user_service: UserService = Depends(get_user_service),
):
    user = unwrap(
        await user_service.update_profile(
            caller_id,
            display_name=request.display_name,
            avatar_url=request.avatar_url,
            bio=request.bio,
        )
    )
    return UserSummary.from_model(user)
