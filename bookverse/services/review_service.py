"""
Book reviews and the book rating aggregate.

Each create, update or delete re-reads every live review of the book inside
the same unit of work and overwrites ``average_rating``/``rating_count``.
Concurrent edits resolve as last writer wins; there is no version column.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from bookverse.models.db import Book, BookReview
from bookverse.models.schemas import PagedResult, ReviewDto
from bookverse.repositories import UnitOfWork
from bookverse.services.errors import AuthErrors, BookErrors, Result, ReviewErrors

logger = logging.getLogger(__name__)

MIN_RATING = 0
MAX_RATING = 5


def _rating_is_valid(rating: int) -> bool:
    return MIN_RATING <= rating <= MAX_RATING


async def recompute_book_rating(uow: UnitOfWork, book: Book) -> None:
    """Overwrite the aggregate from live reviews; pending changes must be flushed first."""
    reviews, count = await uow.book_reviews.get_all(filter=BookReview.book_id == book.id)
    book.rating_count = count
    book.average_rating = round(sum(r.rating for r in reviews) / count, 2) if count else 0.0
    uow.books.update(book)


class ReviewService:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def create_review(
        self,
        caller_id: Optional[uuid.UUID],
        book_id: uuid.UUID,
        rating: int,
        review_text: Optional[str] = None,
    ) -> Result[BookReview]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)
        if not _rating_is_valid(rating):
            return Result.fail(ReviewErrors.invalid_rating(MIN_RATING, MAX_RATING))

        async with UnitOfWork(self._session_factory) as uow:
            book = await uow.books.get_by_id(book_id)
            if book is None:
                logger.warning(f"Book {book_id} not found")
                return Result.fail(BookErrors.not_found(book_id))

            if await uow.book_reviews.exists(
                (BookReview.user_id == caller_id) & (BookReview.book_id == book_id)
            ):
                logger.warning(f"User {caller_id} already reviewed book {book_id}")
                return Result.fail(ReviewErrors.AlreadyReviewed)

            review = BookReview(user_id=caller_id, book_id=book_id, rating=rating, review_text=review_text)
            await uow.book_reviews.add(review)
            await uow.flush()
            await recompute_book_rating(uow, book)
            await uow.save_changes()

        logger.info(f"Review {review.id} created for book {book_id}")
        return Result.ok(review)

    async def update_review(
        self,
        caller_id: Optional[uuid.UUID],
        review_id: uuid.UUID,
        rating: int,
        review_text: Optional[str] = None,
    ) -> Result[BookReview]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            review = await uow.book_reviews.get_by_id(review_id, "book")
            owned = self._check_owned(review, review_id, caller_id)
            if owned.is_failure:
                return Result.fail(owned.error)
            if not _rating_is_valid(rating):
                return Result.fail(ReviewErrors.invalid_rating(MIN_RATING, MAX_RATING))

            review.rating = rating
            review.review_text = review_text
            uow.book_reviews.update(review)
            await uow.flush()
            await recompute_book_rating(uow, review.book)
            await uow.save_changes()

        logger.info(f"Review {review_id} updated")
        return Result.ok(review)

    async def delete_review(self, caller_id: Optional[uuid.UUID], review_id: uuid.UUID) -> Result[None]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            review = await uow.book_reviews.get_by_id(review_id, "book")
            owned = self._check_owned(review, review_id, caller_id)
            if owned.is_failure:
                return Result.fail(owned.error)

            await uow.book_reviews.delete(review)
            await uow.flush()
            await recompute_book_rating(uow, review.book)
            await uow.save_changes()

        logger.info(f"Review {review_id} deleted")
        return Result.ok()

    async def list_book_reviews(
        self,
        book_id: uuid.UUID,
        page_number: int = 1,
        page_size: int = 10,
    ) -> Result[PagedResult[ReviewDto]]:
        async with UnitOfWork(self._session_factory) as uow:
            if await uow.books.get_by_id(book_id) is None:
                return Result.fail(BookErrors.not_found(book_id))
            reviews, total = await uow.book_reviews.get_all(
                filter=BookReview.book_id == book_id,
                sort_column="created_at",
                sort_order="desc",
                page_number=page_number,
                page_size=page_size,
            )
        items = [ReviewDto.from_model(r) for r in reviews]
        return Result.ok(PagedResult.create(items, page_number, page_size, total))

    @staticmethod
    def _check_owned(
        review: Optional[BookReview],
        review_id: uuid.UUID,
        caller_id: uuid.UUID,
    ) -> Result[BookReview]:
        if review is None:
            logger.warning(f"Review {review_id} not found")
            return Result.fail(ReviewErrors.not_found(review_id))
        if review.user_id != caller_id:
            logger.warning(f"User {caller_id} attempted to modify review {review_id}")
            return Result.fail(ReviewErrors.Unauthorized)
        return Result.ok(review)
