from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from bookverse.core.security import hash_password, verify_password
from bookverse.models.db import User, UserFollow
from bookverse.models.schemas import UserProfile
from bookverse.repositories import UnitOfWork
from bookverse.services.errors import AuthErrors, Result, UserErrors
from bookverse.services.follow_service import count_live_edges
from bookverse.services.shelf_service import ensure_default_shelves

logger = logging.getLogger(__name__)


def _normalize_username(value: str) -> str:
    return value.strip().lower()


def _normalize_email(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value.strip().lower() or None


class UserService:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def register(
        self,
        username: str,
        password: str,
        *,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
        role: str = "member",
    ) -> Result[User]:
        """Create the account together with its three default shelves."""
        normalized_username = _normalize_username(username)
        normalized_email = _normalize_email(email)

        async with UnitOfWork(self._session_factory) as uow:
            if await uow.users.exists(func.lower(User.username) == normalized_username):
                return Result.fail(UserErrors.UsernameTaken)
            if normalized_email and await uow.users.exists(User.email == normalized_email):
                return Result.fail(UserErrors.EmailAlreadyRegistered)

            user = User(
                id=uuid.uuid4(),
                username=normalized_username,
                email=normalized_email,
                display_name=display_name or username.strip(),
                password_hash=hash_password(password),
                role=role,
            )
            await uow.users.add(user)
            await ensure_default_shelves(uow, user.id)
            try:
                await uow.save_changes()
            except IntegrityError:
                # Lost a race against a concurrent registration
                logger.warning(f"Registration for {normalized_username} hit a uniqueness conflict")
                return Result.fail(UserErrors.UsernameTaken)

        logger.info(f"Registered user {user.id} ({normalized_username})")
        return Result.ok(user)

    async def authenticate(self, username: str, password: str) -> Result[User]:
        user = await self.get_user_by_username(username)
        if user is None or not user.is_active or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login for {username!r}")
            return Result.fail(AuthErrors.InvalidCredentials)
        return Result.ok(user)

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        async with UnitOfWork(self._session_factory) as uow:
            return await uow.users.get_by_id(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        async with UnitOfWork(self._session_factory) as uow:
            return await uow.users.get_single_or_none(User.username == _normalize_username(username))

    async def get_profile(self, username: str) -> Result[UserProfile]:
        async with UnitOfWork(self._session_factory) as uow:
            user = await uow.users.get_single_or_none(User.username == _normalize_username(username))
            if user is None:
                return Result.fail(UserErrors.not_found(username))
            followers = await count_live_edges(uow.session, UserFollow.following_id, UserFollow.follower_id, user.id)
            following = await count_live_edges(uow.session, UserFollow.follower_id, UserFollow.following_id, user.id)

        return Result.ok(
            UserProfile(
                id=user.id,
                username=user.username,
                display_name=user.display_name,
                avatar_url=user.avatar_url,
                bio=user.bio,
                followers_count=followers,
                following_count=following,
                created_at=user.created_at,
            )
        )

    async def update_profile(
        self,
        caller_id: Optional[uuid.UUID],
        *,
        display_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> Result[User]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            user = await uow.users.get_by_id(caller_id)
            if user is None:
                return Result.fail(UserErrors.not_found(caller_id))
            if display_name is not None:
                user.display_name = display_name.strip() or user.username
            if avatar_url is not None:
                user.avatar_url = avatar_url or None
            if bio is not None:
                user.bio = bio
            uow.users.update(user)
            await uow.save_changes()

        logger.info(f"User {caller_id} updated profile")
        return Result.ok(user)
