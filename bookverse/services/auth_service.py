from __future__ import annotations

from typing import Optional

from bookverse.core.security import create_access_token, decode_user_id
from bookverse.models.db import User
from bookverse.services.user_service import UserService


class AuthService:
    def __init__(
        self,
        user_service: UserService,
        *,
        jwt_secret: str,
        jwt_algorithm: str,
        jwt_expires_minutes: int,
    ):
        self._user_service = user_service
        self._jwt_secret = jwt_secret
        self._jwt_algorithm = jwt_algorithm
        self._jwt_expires_minutes = jwt_expires_minutes

    def issue_token(self, user: User) -> str:
        return create_access_token(
            user.id,
            username=user.username,
            role=user.role,
            secret=self._jwt_secret,
            algorithm=self._jwt_algorithm,
            expires_minutes=self._jwt_expires_minutes,
        )

    async def resolve_user(self, token: str) -> Optional[User]:
        """Return the active user a bearer token belongs to; ``ValueError`` for bad tokens."""
        user_id = decode_user_id(token, self._jwt_secret, self._jwt_algorithm)
        user = await self._user_service.get_user_by_id(user_id)
        if user is None or not user.is_active:
            return None
        return user
