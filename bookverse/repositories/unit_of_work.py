from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookverse.models.db import (
    Author,
    Book,
    BookReview,
    BookGenre,
    BookShelf,
    Comment,
    Genre,
    Quote,
    QuoteLike,
    ReadingProgress,
    Shelf,
    User,
    UserFollow,
)
from bookverse.repositories.base import Repository


class UnitOfWork:
    """
    One session, one transaction.

    Changes made through the repositories become visible only when
    ``save_changes`` commits them; leaving the block without saving (an
    exception, a cancelled task, an early return) discards them.  Entities
    loaded inside the block stay readable afterwards, but only the
    relationships named as includes are populated.

    Example:
        async with UnitOfWork(session_factory) as uow:
            shelf = await uow.shelves.get_by_id(shelf_id, "memberships")
            ...
            await uow.save_changes()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "UnitOfWork":
        session = self._session_factory()
        self.session = session
        self.users = Repository(session, User)
        self.authors = Repository(session, Author)
        self.books = Repository(session, Book)
        self.shelves = Repository(session, Shelf)
        self.book_shelves = Repository(session, BookShelf)
        self.quotes = Repository(session, Quote)
        self.quote_likes = Repository(session, QuoteLike)
        self.book_reviews = Repository(session, BookReview)
        self.user_follows = Repository(session, UserFollow)
        self.reading_progresses = Repository(session, ReadingProgress)
        self.genres = Repository(session, Genre)
        self.book_genres = Repository(session, BookGenre)
        self.comments = Repository(session, Comment)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None:
                await self.session.rollback()
        finally:
            # close() drops uncommitted work but keeps loaded attributes readable
            await self.session.close()
            self.session = None

    async def save_changes(self) -> None:
        await self.session.commit()

    async def flush(self) -> None:
        await self.session.flush()
