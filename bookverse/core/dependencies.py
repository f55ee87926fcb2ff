import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from .logging_config import user_id_var
from .settings import Settings
from bookverse.models.db import User
from bookverse.services.auth_service import AuthService
from bookverse.services.catalog_service import CatalogService
from bookverse.services.comment_service import CommentService
from bookverse.services.feed_service import FeedService
from bookverse.services.follow_service import FollowService
from bookverse.services.genre_service import GenreService
from bookverse.services.quote_service import QuoteService
from bookverse.services.reading_progress_service import ReadingProgressService
from bookverse.services.review_service import ReviewService
from bookverse.services.shelf_service import ShelfService
from bookverse.services.user_service import UserService


def _service(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{name.replace('_', ' ').capitalize()} unavailable")
    return service


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_service(request: Request) -> UserService:
    return _service(request, "user_service")


def get_auth_service(request: Request) -> AuthService:
    return _service(request, "auth_service")


def get_follow_service(request: Request) -> FollowService:
    return _service(request, "follow_service")


def get_catalog_service(request: Request) -> CatalogService:
    return _service(request, "catalog_service")


def get_genre_service(request: Request) -> GenreService:
    return _service(request, "genre_service")


def get_comment_service(request: Request) -> CommentService:
    return _service(request, "comment_service")


def get_shelf_service(request: Request) -> ShelfService:
    return _service(request, "shelf_service")


def get_review_service(request: Request) -> ReviewService:
    return _service(request, "review_service")


def get_quote_service(request: Request) -> QuoteService:
    return _service(request, "quote_service")


def get_reading_progress_service(request: Request) -> ReadingProgressService:
    return _service(request, "reading_progress_service")


def get_feed_service(request: Request) -> FeedService:
    return _service(request, "feed_service")


async def get_optional_user(
    authorization: str = Header(None, alias="Authorization"),
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    """
    Resolve the bearer token, if any.

    A missing header yields ``None`` so services can answer with their own
    ``Auth.Unauthorized`` error; a malformed or stale token is rejected here.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authorization header")

    try:
        user = await auth_service.resolve_user(token)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User inactive or not found")

    user_id_var.set(str(user.id))
    return user


async def get_optional_user_id(user: Optional[User] = Depends(get_optional_user)) -> Optional[uuid.UUID]:
    return user.id if user else None


async def get_current_user_id(user: Optional[User] = Depends(get_optional_user)) -> uuid.UUID:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user.id


def require_admin_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    if user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return user
