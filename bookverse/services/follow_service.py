"""
Follow directory: who follows whom, and the public profile of a user.

Follows are soft-deleted on unfollow; following again revives the same row
instead of inserting a duplicate edge.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Set

from sqlalchemy import func, select

from bookverse.models.db import User, UserFollow, utcnow
from bookverse.models.schemas import PagedResult, UserSummary
from bookverse.repositories import UnitOfWork, not_deleted
from bookverse.services.errors import AuthErrors, FollowErrors, Result

logger = logging.getLogger(__name__)


def live_edge_users(anchor_column, other_column, user_id: uuid.UUID):
    """Live users on the other end of ``user_id``'s live follow edges."""
    return (
        select(User)
        .join(UserFollow, other_column == User.id)
        .where(anchor_column == user_id, not_deleted(UserFollow), not_deleted(User))
    )


async def count_live_edges(session, anchor_column, other_column, user_id: uuid.UUID) -> int:
    stmt = select(func.count()).select_from(live_edge_users(anchor_column, other_column, user_id).subquery())
    return int(await session.scalar(stmt) or 0)


class FollowService:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def follow(self, caller_id: Optional[uuid.UUID], target_id: uuid.UUID) -> Result[None]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)
        if caller_id == target_id:
            return Result.fail(FollowErrors.SelfFollow)

        async with UnitOfWork(self._session_factory) as uow:
            target = await uow.users.get_by_id(target_id)
            if target is None:
                logger.warning(f"User {caller_id} tried to follow missing user {target_id}")
                return Result.fail(FollowErrors.user_not_found(target_id))

            # Look past the soft-delete filter so a previous unfollow is revived
            existing = await uow.session.get(UserFollow, (caller_id, target_id))
            if existing is not None and not existing.is_deleted:
                return Result.fail(FollowErrors.AlreadyFollowing)

            if existing is not None:
                existing.deleted_at = None
                existing.followed_at = utcnow()
            else:
                await uow.user_follows.add(
                    UserFollow(follower_id=caller_id, following_id=target_id, followed_at=utcnow())
                )
            await uow.save_changes()

        logger.info(f"User {caller_id} followed {target_id}")
        return Result.ok()

    async def unfollow(self, caller_id: Optional[uuid.UUID], target_id: uuid.UUID) -> Result[None]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            edge = await uow.user_follows.get_single_or_none(
                (UserFollow.follower_id == caller_id) & (UserFollow.following_id == target_id)
            )
            if edge is None:
                return Result.fail(FollowErrors.NotFollowing)
            await uow.user_follows.delete(edge)
            await uow.save_changes()

        logger.info(f"User {caller_id} unfollowed {target_id}")
        return Result.ok()

    async def get_following_ids(self, user_id: uuid.UUID) -> Set[uuid.UUID]:
        async with UnitOfWork(self._session_factory) as uow:
            edges, _ = await uow.user_follows.get_all(filter=UserFollow.follower_id == user_id)
        return {edge.following_id for edge in edges}

    async def is_following(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
        async with UnitOfWork(self._session_factory) as uow:
            return await uow.user_follows.exists(
                (UserFollow.follower_id == follower_id) & (UserFollow.following_id == following_id)
            )

    async def find_user_summary(self, user_id: uuid.UUID) -> Optional[UserSummary]:
        async with UnitOfWork(self._session_factory) as uow:
            user = await uow.users.get_by_id(user_id)
        return UserSummary.from_model(user) if user else None

    async def list_followers(
        self,
        user_id: uuid.UUID,
        page_number: int = 1,
        page_size: int = 10,
    ) -> Result[PagedResult[UserSummary]]:
        return await self._list_edges(user_id, UserFollow.following_id, UserFollow.follower_id, page_number, page_size)

    async def list_following(
        self,
        user_id: uuid.UUID,
        page_number: int = 1,
        page_size: int = 10,
    ) -> Result[PagedResult[UserSummary]]:
        return await self._list_edges(user_id, UserFollow.follower_id, UserFollow.following_id, page_number, page_size)

    async def _list_edges(self, user_id, anchor_column, other_column, page_number, page_size):
        """Users on the other end of ``user_id``'s live edges, most recent first."""
        async with UnitOfWork(self._session_factory) as uow:
            owner = await uow.users.get_by_id(user_id)
            if owner is None:
                return Result.fail(FollowErrors.user_not_found(user_id))

            total = await count_live_edges(uow.session, anchor_column, other_column, user_id)
            stmt = (
                live_edge_users(anchor_column, other_column, user_id)
                .order_by(UserFollow.followed_at.desc())
                .offset((page_number - 1) * page_size)
                .limit(page_size)
            )
            users = list(await uow.session.scalars(stmt))

        items = [UserSummary.from_model(user) for user in users]
        return Result.ok(PagedResult.create(items, page_number, page_size, total))
