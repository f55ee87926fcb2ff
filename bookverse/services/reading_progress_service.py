from __future__ import annotations

import logging
import uuid
from typing import Optional

from bookverse.models.db import DEFAULT_SHELF_READ, ReadingProgress
from bookverse.repositories import UnitOfWork
from bookverse.services.errors import AuthErrors, BookErrors, ReadingProgressErrors, Result
from bookverse.services.shelf_service import apply_book_status, ensure_default_shelves

logger = logging.getLogger(__name__)


class ReadingProgressService:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def update_progress(
        self,
        caller_id: Optional[uuid.UUID],
        book_id: uuid.UUID,
        current_page: int,
    ) -> Result[ReadingProgress]:
        """
        Record how far the caller has read.

        Reaching the last page moves the book onto the "Read" shelf in the same
        transaction; a book already there is left alone.
        """
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            book = await uow.books.get_by_id(book_id)
            if book is None:
                logger.warning(f"Book {book_id} not found")
                return Result.fail(BookErrors.not_found(book_id))
            if current_page < 0 or current_page > book.page_count:
                return Result.fail(ReadingProgressErrors.invalid_page(book.page_count))

            progress = await uow.reading_progresses.get_single_or_none(
                (ReadingProgress.user_id == caller_id) & (ReadingProgress.book_id == book_id)
            )
            if progress is None:
                progress = ReadingProgress(user_id=caller_id, book_id=book_id, current_page=current_page)
                await uow.reading_progresses.add(progress)
            else:
                progress.current_page = current_page
                uow.reading_progresses.update(progress)

            if book.page_count > 0 and current_page == book.page_count:
                default_shelves = await ensure_default_shelves(uow, caller_id)
                read_shelf = next(s for s in default_shelves if s.name == DEFAULT_SHELF_READ)
                if read_shelf.find_membership(book_id) is None:
                    apply_book_status(default_shelves, book_id, DEFAULT_SHELF_READ)
                    logger.info(f"Book {book_id} finished by user {caller_id}, moved to {DEFAULT_SHELF_READ}")

            await uow.save_changes()

        logger.info(f"Reading progress for book {book_id} set to page {current_page}")
        return Result.ok(progress)

    async def get_progress(self, user_id: uuid.UUID, book_id: uuid.UUID) -> Optional[ReadingProgress]:
        async with UnitOfWork(self._session_factory) as uow:
            return await uow.reading_progresses.get_single_or_none(
                (ReadingProgress.user_id == user_id) & (ReadingProgress.book_id == book_id)
            )
