from __future__ import annotations

import logging
import uuid
from typing import Optional

from bookverse.models.db import COMMENT_TARGET_TYPES, Comment
from bookverse.models.schemas import CommentDto, PagedResult
from bookverse.repositories import UnitOfWork
from bookverse.services.errors import AuthErrors, CommentErrors, Result

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 2000


def _clean_text(text: Optional[str]) -> Optional[str]:
    cleaned = (text or "").strip()
    if not cleaned or len(cleaned) > MAX_COMMENT_LENGTH:
        return None
    return cleaned


class CommentService:
    """Comments on reviews and quotes. Only the author may edit or delete a comment."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def create_comment(
        self,
        caller_id: Optional[uuid.UUID],
        target_type: str,
        target_id: uuid.UUID,
        text: str,
    ) -> Result[Comment]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)
        if target_type not in COMMENT_TARGET_TYPES:
            return Result.fail(CommentErrors.InvalidTarget)
        cleaned = _clean_text(text)
        if cleaned is None:
            return Result.fail(CommentErrors.InvalidText)

        async with UnitOfWork(self._session_factory) as uow:
            author = await uow.users.get_by_id(caller_id)
            if author is None:
                return Result.fail(AuthErrors.Unauthorized)

            targets = uow.book_reviews if target_type == "Review" else uow.quotes
            if await targets.get_by_id(target_id) is None:
                logger.warning(f"{target_type} {target_id} not found for comment by {caller_id}")
                return Result.fail(CommentErrors.target_not_found(target_type, target_id))

            comment = Comment(
                text=cleaned,
                user_id=caller_id,
                user=author,
                target_type=target_type,
                target_id=target_id,
            )
            await uow.comments.add(comment)
            await uow.save_changes()

        logger.info(f"Comment {comment.id} added to {target_type} {target_id} by {caller_id}")
        return Result.ok(comment)

    async def update_comment(
        self,
        caller_id: Optional[uuid.UUID],
        comment_id: uuid.UUID,
        text: str,
    ) -> Result[Comment]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)
        cleaned = _clean_text(text)
        if cleaned is None:
            return Result.fail(CommentErrors.InvalidText)

        async with UnitOfWork(self._session_factory) as uow:
            comment = await uow.comments.get_by_id(comment_id, "user")
            failure = self._check_owned(comment, comment_id, caller_id)
            if failure:
                return failure
            comment.text = cleaned
            await uow.save_changes()

        logger.info(f"Comment {comment_id} updated")
        return Result.ok(comment)

    async def delete_comment(self, caller_id: Optional[uuid.UUID], comment_id: uuid.UUID) -> Result[None]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            comment = await uow.comments.get_by_id(comment_id)
            failure = self._check_owned(comment, comment_id, caller_id)
            if failure:
                return failure
            await uow.comments.delete(comment)
            await uow.save_changes()

        logger.info(f"Comment {comment_id} deleted")
        return Result.ok()

    async def get_comment(self, comment_id: uuid.UUID) -> Result[Comment]:
        async with UnitOfWork(self._session_factory) as uow:
            comment = await uow.comments.get_by_id(comment_id, "user")
        if comment is None:
            return Result.fail(CommentErrors.not_found(comment_id))
        return Result.ok(comment)

    async def list_comments(
        self,
        target_type: str,
        target_id: uuid.UUID,
        page_number: int = 1,
        page_size: int = 20,
    ) -> PagedResult[CommentDto]:
        """Comments on one review or quote, oldest first."""
        async with UnitOfWork(self._session_factory) as uow:
            comments, total = await uow.comments.get_all(
                filter=(Comment.target_type == target_type) & (Comment.target_id == target_id),
                includes=("user",),
                sort_column="created_at",
                page_number=page_number,
                page_size=page_size,
            )
        return PagedResult.create([CommentDto.from_model(c) for c in comments], page_number, page_size, total)

    @staticmethod
    def _check_owned(comment: Optional[Comment], comment_id: uuid.UUID, caller_id: uuid.UUID) -> Optional[Result]:
        if comment is None:
            logger.warning(f"Comment {comment_id} not found")
            return Result.fail(CommentErrors.not_found(comment_id))
        if comment.user_id != caller_id:
            logger.warning(f"User {caller_id} may not modify comment {comment_id}")
            return Result.fail(CommentErrors.Unauthorized)
        return None
