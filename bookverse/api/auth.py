from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from bookverse.core.dependencies import get_auth_service, get_user_service
from bookverse.core.exceptions import unwrap
from bookverse.models.schemas import ApiModel, UserSummary
from bookverse.services.auth_service import AuthService
from bookverse.services.user_service import UserService

router = APIRouter()


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(ApiModel):
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=6)
    email: Optional[str] = None
    display_name: Optional[str] = None


class LoginResponse(ApiModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSummary


@router.post("/auth/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    user_service: UserService = Depends(get_user_service),
    auth_service: AuthService = Depends(get_auth_service),
):
    user = unwrap(
        await user_service.register(
            request.username,
            request.password,
            email=request.email,
            display_name=request.display_name,
        )
    )
    return LoginResponse(access_token=auth_service.issue_token(user), user=UserSummary.from_model(user))


@router.post("/auth/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    user_service: UserService = Depends(get_user_service),
    auth_service: AuthService = Depends(get_auth_service),
):
    user = unwrap(await user_service.authenticate(request.username, request.password))
    return LoginResponse(access_token=auth_service.issue_token(user), user=UserSummary.from_model(user))
