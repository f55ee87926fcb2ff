"""
Genres and the genre tags on books.

Genre names are unique ignoring case among live genres.  Deleting a genre
soft-deletes it and drops its book tags, so it disappears from every book at
once.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, func, select

from bookverse.models.db import Book, BookGenre, Genre
from bookverse.models.schemas import GenreDto, PagedResult
from bookverse.repositories import UnitOfWork, not_deleted
from bookverse.services.errors import BookErrors, GenreErrors, Result

logger = logging.getLogger(__name__)

MAX_GENRE_NAME_LENGTH = 64


def _clean_name(name: Optional[str]) -> Optional[str]:
    cleaned = " ".join((name or "").split())
    if not cleaned or len(cleaned) > MAX_GENRE_NAME_LENGTH:
        return None
    return cleaned


async def _book_counts(session, genre_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, int]:
    ids = list(genre_ids)
    if not ids:
        return {}
    stmt = (
        select(BookGenre.genre_id, func.count())
        .join(Book, Book.id == BookGenre.book_id)
        .where(BookGenre.genre_id.in_(ids), not_deleted(Book))
        .group_by(BookGenre.genre_id)
    )
    return {genre_id: count for genre_id, count in (await session.execute(stmt)).all()}


class GenreService:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def create_genre(self, name: str) -> Result[Genre]:
        cleaned = _clean_name(name)
        if cleaned is None:
            return Result.fail(GenreErrors.InvalidName)

        async with UnitOfWork(self._session_factory) as uow:
            if await self._name_in_use(uow, cleaned):
                return Result.fail(GenreErrors.name_taken(cleaned))
            genre = Genre(name=cleaned)
            await uow.genres.add(genre)
            await uow.save_changes()

        logger.info(f"Genre {genre.id} created: {cleaned}")
        return Result.ok(genre)

    async def rename_genre(self, genre_id: uuid.UUID, name: str) -> Result[Genre]:
        cleaned = _clean_name(name)
        if cleaned is None:
            return Result.fail(GenreErrors.InvalidName)

        async with UnitOfWork(self._session_factory) as uow:
            genre = await uow.genres.get_by_id(genre_id)
            if genre is None:
                return Result.fail(GenreErrors.not_found(genre_id))
            if cleaned.lower() != genre.name.lower() and await self._name_in_use(uow, cleaned):
                return Result.fail(GenreErrors.name_taken(cleaned))
            genre.name = cleaned
            await uow.save_changes()

        logger.info(f"Genre {genre_id} renamed to {cleaned}")
        return Result.ok(genre)

    async def delete_genre(self, genre_id: uuid.UUID) -> Result[None]:
        async with UnitOfWork(self._session_factory) as uow:
            genre = await uow.genres.get_by_id(genre_id)
            if genre is None:
                logger.warning(f"Genre {genre_id} not found")
                return Result.fail(GenreErrors.not_found(genre_id))
            await uow.session.execute(delete(BookGenre).where(BookGenre.genre_id == genre_id))
            await uow.genres.delete(genre)
            await uow.save_changes()

        logger.info(f"Genre {genre_id} deleted")
        return Result.ok()

    async def get_genre(self, genre_id: uuid.UUID) -> Result[GenreDto]:
        async with UnitOfWork(self._session_factory) as uow:
            genre = await uow.genres.get_by_id(genre_id)
            if genre is None:
                return Result.fail(GenreErrors.not_found(genre_id))
            counts = await _book_counts(uow.session, [genre.id])
        return Result.ok(GenreDto.from_model(genre, counts.get(genre.id, 0)))

    async def list_genres(self, page_number: int = 1, page_size: int = 20) -> PagedResult[GenreDto]:
        async with UnitOfWork(self._session_factory) as uow:
            genres, total = await uow.genres.get_all(
                sort_column="name",
                page_number=page_number,
                page_size=page_size,
            )
            counts = await _book_counts(uow.session, (g.id for g in genres))
        items = [GenreDto.from_model(g, counts.get(g.id, 0)) for g in genres]
        return PagedResult.create(items, page_number, page_size, total)

    async def add_genres_to_book(self, book_id: uuid.UUID, genre_ids: List[uuid.UUID]) -> Result[List[GenreDto]]:
        """Tag a book; genres it already carries are left as they are."""
        wanted = list(dict.fromkeys(genre_ids or []))
        if not wanted:
            return Result.fail(GenreErrors.EmptySelection)

        async with UnitOfWork(self._session_factory) as uow:
            if await uow.books.get_by_id(book_id) is None:
                logger.warning(f"Book {book_id} not found")
                return Result.fail(BookErrors.not_found(book_id))

            genres, _ = await uow.genres.get_all(filter=Genre.id.in_(wanted))
            found = {g.id for g in genres}
            missing = next((g for g in wanted if g not in found), None)
            if missing is not None:
                return Result.fail(GenreErrors.not_found(missing))

            links, _ = await uow.book_genres.get_all(filter=BookGenre.book_id == book_id)
            linked = {link.genre_id for link in links}
            await uow.book_genres.add_range(
                BookGenre(book_id=book_id, genre_id=genre_id) for genre_id in wanted if genre_id not in linked
            )
            await uow.save_changes()

        logger.info(f"Book {book_id} tagged with {len(wanted)} genre(s)")
        return await self.list_book_genres(book_id)

    async def remove_genre_from_book(self, book_id: uuid.UUID, genre_id: uuid.UUID) -> Result[None]:
        async with UnitOfWork(self._session_factory) as uow:
            if await uow.books.get_by_id(book_id) is None:
                logger.warning(f"Book {book_id} not found")
                return Result.fail(BookErrors.not_found(book_id))
            link = await uow.book_genres.get_single_or_none(
                (BookGenre.book_id == book_id) & (BookGenre.genre_id == genre_id)
            )
            if link is None:
                logger.warning(f"Genre {genre_id} is not assigned to book {book_id}")
                return Result.fail(GenreErrors.not_assigned(genre_id, book_id))
            await uow.book_genres.delete(link)
            await uow.save_changes()

        logger.info(f"Removed genre {genre_id} from book {book_id}")
        return Result.ok()

    async def list_book_genres(self, book_id: uuid.UUID) -> Result[List[GenreDto]]:
        async with UnitOfWork(self._session_factory) as uow:
            if await uow.books.get_by_id(book_id) is None:
                return Result.fail(BookErrors.not_found(book_id))
            stmt = (
                select(Genre)
                .join(BookGenre, BookGenre.genre_id == Genre.id)
                .where(BookGenre.book_id == book_id, not_deleted(Genre))
                .order_by(Genre.name)
            )
            genres = list(await uow.session.scalars(stmt))
            counts = await _book_counts(uow.session, (g.id for g in genres))
        return Result.ok([GenreDto.from_model(g, counts.get(g.id, 0)) for g in genres])

    @staticmethod
    async def _name_in_use(uow: UnitOfWork, name: str) -> bool:
        return await uow.genres.exists(func.lower(Genre.name) == name.lower())
