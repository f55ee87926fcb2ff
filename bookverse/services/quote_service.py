from __future__ import annotations

import logging
import uuid
from typing import Iterable, List, Optional

from bookverse.models.db import Quote, QuoteLike, utcnow
from bookverse.models.schemas import PagedResult, QuoteDto
from bookverse.repositories import UnitOfWork
from bookverse.services.errors import AuthErrors, BookErrors, Result, QuoteErrors

logger = logging.getLogger(__name__)


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Lower-case, strip and deduplicate tags, keeping first-seen order."""
    seen: List[str] = []
    for tag in tags or ():
        cleaned = (tag or "").strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


class QuoteService:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def create_quote(
        self,
        caller_id: Optional[uuid.UUID],
        text: str,
        *,
        book_id: Optional[uuid.UUID] = None,
        author_id: Optional[uuid.UUID] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Result[Quote]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)
        cleaned = (text or "").strip()
        if not cleaned:
            return Result.fail(QuoteErrors.InvalidText)

        async with UnitOfWork(self._session_factory) as uow:
            references = await self._check_references(uow, book_id, author_id)
            if references.is_failure:
                return Result.fail(references.error)

            quote = Quote(
                text=cleaned,
                created_by_user_id=caller_id,
                book_id=book_id,
                author_id=author_id,
                tags=normalize_tags(tags),
                likes=[],
            )
            await uow.quotes.add(quote)
            await uow.save_changes()

        logger.info(f"Quote {quote.id} created by user {caller_id}")
        return Result.ok(quote)

    async def update_quote(
        self,
        caller_id: Optional[uuid.UUID],
        quote_id: uuid.UUID,
        text: str,
        *,
        book_id: Optional[uuid.UUID] = None,
        author_id: Optional[uuid.UUID] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Result[Quote]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            quote = await uow.quotes.get_by_id(quote_id, "likes")
            owned = self._check_owned(quote, quote_id, caller_id)
            if owned.is_failure:
                return Result.fail(owned.error)

            cleaned = (text or "").strip()
            if not cleaned:
                return Result.fail(QuoteErrors.InvalidText)
            references = await self._check_references(uow, book_id, author_id)
            if references.is_failure:
                return Result.fail(references.error)

            quote.text = cleaned
            quote.book_id = book_id
            quote.author_id = author_id
            if tags is not None:
                quote.tags = normalize_tags(tags)
            uow.quotes.update(quote)
            await uow.save_changes()

        logger.info(f"Quote {quote_id} updated")
        return Result.ok(quote)

    async def delete_quote(self, caller_id: Optional[uuid.UUID], quote_id: uuid.UUID) -> Result[None]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            quote = await uow.quotes.get_by_id(quote_id)
            owned = self._check_owned(quote, quote_id, caller_id)
            if owned.is_failure:
                return Result.fail(owned.error)

            await uow.quotes.delete(quote)
            await uow.save_changes()

        logger.info(f"Quote {quote_id} deleted")
        return Result.ok()

    async def toggle_like(self, caller_id: Optional[uuid.UUID], quote_id: uuid.UUID) -> Result[Quote]:
        """Like the quote, or take the like back if the caller already liked it."""
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            quote = await uow.quotes.get_by_id(quote_id, "likes")
            if quote is None:
                return Result.fail(QuoteErrors.not_found(quote_id))

            existing = next((like for like in quote.likes if like.user_id == caller_id), None)
            if existing is not None:
                quote.likes.remove(existing)
            else:
                quote.likes.append(QuoteLike(user_id=caller_id, liked_at=utcnow()))
            await uow.save_changes()

        logger.info(f"User {caller_id} {'unliked' if existing else 'liked'} quote {quote_id}")
        return Result.ok(quote)

    async def get_quote(self, quote_id: uuid.UUID) -> Result[Quote]:
        async with UnitOfWork(self._session_factory) as uow:
            quote = await uow.quotes.get_by_id(quote_id, "likes")
        if quote is None:
            return Result.fail(QuoteErrors.not_found(quote_id))
        return Result.ok(quote)

    async def list_quotes(
        self,
        *,
        tag: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None,
        book_id: Optional[uuid.UUID] = None,
        author_id: Optional[uuid.UUID] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PagedResult[QuoteDto]:
        conditions = []
        if user_id is not None:
            conditions.append(Quote.created_by_user_id == user_id)
        if book_id is not None:
            conditions.append(Quote.book_id == book_id)
        if author_id is not None:
            conditions.append(Quote.author_id == author_id)

        condition = None
        for clause in conditions:
            condition = clause if condition is None else condition & clause

        async with UnitOfWork(self._session_factory) as uow:
            quotes, _ = await uow.quotes.get_all(
                filter=condition,
                includes=("likes",),
                sort_column="created_at",
                sort_order="desc",
            )

        # Tags live in a JSON column; filter them here so it works on every backend
        wanted = (tag or "").strip().lower()
        if wanted:
            quotes = [q for q in quotes if wanted in (q.tags or [])]

        start = (page_number - 1) * page_size
        items = [QuoteDto.from_model(q) for q in quotes[start:start + page_size]]
        return PagedResult.create(items, page_number, page_size, len(quotes))

    @staticmethod
    async def _check_references(
        uow: UnitOfWork,
        book_id: Optional[uuid.UUID],
        author_id: Optional[uuid.UUID],
    ) -> Result[None]:
        if book_id is not None and await uow.books.get_by_id(book_id) is None:
            return Result.fail(BookErrors.not_found(book_id))
        if author_id is not None and await uow.authors.get_by_id(author_id) is None:
            return Result.fail(BookErrors.author_not_found(author_id))
        return Result.ok()

    @staticmethod
    def _check_owned(quote: Optional[Quote], quote_id: uuid.UUID, caller_id: uuid.UUID) -> Result[Quote]:
        if quote is None:
            logger.warning(f"Quote {quote_id} not found")
            return Result.fail(QuoteErrors.not_found(quote_id))
        if quote.created_by_user_id != caller_id:
            logger.warning(f"User {caller_id} attempted to modify quote {quote_id}")
            return Result.fail(QuoteErrors.Unauthorized)
        return Result.ok(quote)
