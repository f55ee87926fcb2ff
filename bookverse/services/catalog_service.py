from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select

from bookverse.models.db import Author, Book, BookGenre, Genre
from bookverse.models.schemas import AuthorDto, BookDto, PagedResult
from bookverse.repositories import UnitOfWork, not_deleted
from bookverse.services.errors import BookErrors, Result

logger = logging.getLogger(__name__)


class CatalogService:
    """Books and authors. Creation is an admin concern enforced by the router."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def create_author(self, name: str, bio: Optional[str] = None) -> Result[Author]:
        cleaned = (name or "").strip()
        if not cleaned:
            return Result.fail(BookErrors.InvalidAuthorName)

        async with UnitOfWork(self._session_factory) as uow:
            author = Author(name=cleaned, bio=bio)
            await uow.authors.add(author)
            await uow.save_changes()

        logger.info(f"Author {author.id} created: {cleaned}")
        return Result.ok(author)

    async def get_author(self, author_id: uuid.UUID) -> Result[Author]:
        async with UnitOfWork(self._session_factory) as uow:
            author = await uow.authors.get_by_id(author_id)
        if author is None:
            return Result.fail(BookErrors.author_not_found(author_id))
        return Result.ok(author)

    async def list_authors(
        self,
        *,
        search: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PagedResult[AuthorDto]:
        condition = func.lower(Author.name).contains(search.strip().lower()) if search else None
        async with UnitOfWork(self._session_factory) as uow:
            authors, total = await uow.authors.get_all(
                filter=condition,
                sort_column="name",
                page_number=page_number,
                page_size=page_size,
            )
        return PagedResult.create([AuthorDto.from_model(a) for a in authors], page_number, page_size, total)

    async def create_book(
        self,
        title: str,
        *,
        page_count: int = 0,
        author_id: Optional[uuid.UUID] = None,
        description: Optional[str] = None,
        isbn: Optional[str] = None,
        cover_url: Optional[str] = None,
    ) -> Result[Book]:
        cleaned = (title or "").strip()
        if not cleaned:
            return Result.fail(BookErrors.InvalidTitle)
        if page_count < 0:
            return Result.fail(BookErrors.InvalidPageCount)

        async with UnitOfWork(self._session_factory) as uow:
            if author_id is not None and await uow.authors.get_by_id(author_id) is None:
                logger.warning(f"Author {author_id} not found")
                return Result.fail(BookErrors.author_not_found(author_id))

            book = Book(
                title=cleaned,
                page_count=page_count,
                author_id=author_id,
                description=description,
                isbn=isbn,
                cover_url=cover_url,
                average_rating=0.0,
                rating_count=0,
            )
            await uow.books.add(book)
            await uow.save_changes()

        logger.info(f"Book {book.id} created: {cleaned}")
        return Result.ok(book)

    async def get_book(self, book_id: uuid.UUID) -> Result[Book]:
        async with UnitOfWork(self._session_factory) as uow:
            book = await uow.books.get_by_id(book_id)
        if book is None:
            return Result.fail(BookErrors.not_found(book_id))
        return Result.ok(book)

    async def list_books(
        self,
        *,
        search: Optional[str] = None,
        author_id: Optional[uuid.UUID] = None,
        genre: Optional[str] = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PagedResult[BookDto]:
        """Books sorted by title; ``genre`` matches a live genre name ignoring case."""
        conditions = []
        if search:
            conditions.append(func.lower(Book.title).contains(search.strip().lower()))
        if author_id is not None:
            conditions.append(Book.author_id == author_id)
        if genre and genre.strip():
            tagged = (
                select(BookGenre.book_id)
                .join(Genre, Genre.id == BookGenre.genre_id)
                .where(func.lower(Genre.name) == genre.strip().lower(), not_deleted(Genre))
            )
            conditions.append(Book.id.in_(tagged))

        condition = None
        for clause in conditions:
            condition = clause if condition is None else condition & clause

        async with UnitOfWork(self._session_factory) as uow:
            books, total = await uow.books.get_all(
                filter=condition,
                sort_column="title",
                page_number=page_number,
                page_size=page_size,
            )
        return PagedResult.create([BookDto.from_model(b) for b in books], page_number, page_size, total)
