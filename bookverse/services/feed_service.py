"""
Feed aggregation.

Quotes, reviews and shelf additions of every followed user are fetched,
normalized into ``FeedItem``s, merged in memory, sorted newest first and only
then paginated.  Activity about a soft-deleted book is left out for all three
kinds.  Every call reads the full activity of the follow graph, which
is fine at the current scale but will not hold for large graphs; a unioned,
indexed query would be the way to push ordering into the database.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from bookverse.models.db import Book, BookReview, BookShelf, Quote, Shelf
from bookverse.models.schemas import (
    BookDto,
    FeedItem,
    PagedResult,
    QuoteDto,
    ReviewDto,
    UserSummary,
)
from bookverse.repositories import UnitOfWork
from bookverse.services.errors import AuthErrors, FeedErrors, Result
from bookverse.services.follow_service import FollowService

logger = logging.getLogger(__name__)

ACTIVITY_QUOTE = "Quote"
ACTIVITY_REVIEW = "Review"
ACTIVITY_BOOK_ADDED = "BookAdded"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class FeedService:
    def __init__(
        self,
        session_factory,
        follow_service: FollowService,
        *,
        default_page_size: int = 10,
        max_page_size: int = 50,
    ):
        self._session_factory = session_factory
        self._follow_service = follow_service
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    async def get_feed(
        self,
        caller_id: Optional[uuid.UUID],
        page_number: int = 1,
        page_size: Optional[int] = None,
    ) -> Result[PagedResult[FeedItem]]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)
        if page_size is None:
            page_size = self._default_page_size
        if page_number < 1 or page_size < 1:
            return Result.fail(FeedErrors.InvalidPage)
        page_size = min(page_size, self._max_page_size)

        following_ids = await self._follow_service.get_following_ids(caller_id)
        if not following_ids:
            return Result.ok(PagedResult.create([], page_number, page_size, 0))

        items = await self._collect(following_ids)
        items.sort(key=lambda item: _as_utc(item.created_at), reverse=True)

        start = (page_number - 1) * page_size
        page = items[start:start + page_size]
        logger.debug(
            f"Feed for {caller_id}: {len(items)} items from {len(following_ids)} followed users, "
            f"page {page_number} has {len(page)}"
        )
        return Result.ok(PagedResult.create(page, page_number, page_size, len(items)))

    async def _collect(self, following_ids) -> List[FeedItem]:
        ids = list(following_ids)
        async with UnitOfWork(self._session_factory) as uow:
            quotes, _ = await uow.quotes.get_all(
                filter=Quote.created_by_user_id.in_(ids),
                includes=("likes",),
            )
            reviews, _ = await uow.book_reviews.get_all(filter=BookReview.user_id.in_(ids))
            shelves, _ = await uow.shelves.get_all(filter=Shelf.user_id.in_(ids))
            memberships: List[BookShelf] = []
            if shelves:
                memberships, _ = await uow.book_shelves.get_all(
                    filter=BookShelf.shelf_id.in_([s.id for s in shelves]),
                    includes=("book",),
                )
            live_book_ids = await self._live_book_ids(uow, quotes, reviews)

        shelves_by_id = {shelf.id: shelf for shelf in shelves}
        profiles: Dict[uuid.UUID, Optional[UserSummary]] = {}

        async def resolve(user_id: uuid.UUID) -> Optional[UserSummary]:
            if user_id not in profiles:
                profiles[user_id] = await self._follow_service.find_user_summary(user_id)
            return profiles[user_id]

        items: List[FeedItem] = []
        for quote in quotes:
            if quote.book_id is not None and quote.book_id not in live_book_ids:
                continue
            user = await resolve(quote.created_by_user_id)
            if user is None:
                continue
            items.append(
                FeedItem(
                    id=str(quote.id),
                    activity_type=ACTIVITY_QUOTE,
                    created_at=quote.created_at,
                    user=user,
                    quote=QuoteDto.from_model(quote),
                )
            )

        for review in reviews:
            if review.book_id not in live_book_ids:
                continue
            user = await resolve(review.user_id)
            if user is None:
                continue
            items.append(
                FeedItem(
                    id=str(review.id),
                    activity_type=ACTIVITY_REVIEW,
                    created_at=review.created_at,
                    user=user,
                    review=ReviewDto.from_model(review),
                )
            )

        for membership in memberships:
            if membership.book is None or membership.book.is_deleted:
                continue
            shelf = shelves_by_id[membership.shelf_id]
            user = await resolve(shelf.user_id)
            if user is None:
                continue
            items.append(
                FeedItem(
                    id=f"{membership.book_id}-{membership.shelf_id}",
                    activity_type=ACTIVITY_BOOK_ADDED,
                    created_at=membership.added_at,
                    user=user,
                    book=BookDto.from_model(membership.book),
                    shelf_name=shelf.name,
                )
            )

        return items

    @staticmethod
    async def _live_book_ids(uow: UnitOfWork, quotes, reviews) -> set:
        """Ids of the referenced books that are not soft-deleted."""
        referenced = {q.book_id for q in quotes if q.book_id is not None} | {r.book_id for r in reviews}
        if not referenced:
            return set()
        books, _ = await uow.books.get_all(filter=Book.id.in_(referenced))
        return {book.id for book in books}
