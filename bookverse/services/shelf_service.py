"""
Shelf status engine.

Every user owns three default shelves (``DEFAULT_SHELVES``) that act as a
reading status: a book sits on at most one of them at a time.  Default shelves
are only changed through ``set_book_status``; custom shelves are free-form and
a book may sit on any number of them.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func

from bookverse.models.db import DEFAULT_SHELVES, BookShelf, Shelf, utcnow
from bookverse.repositories import UnitOfWork
from bookverse.services.errors import AuthErrors, BookErrors, Result, ShelfErrors

logger = logging.getLogger(__name__)

MAX_SHELF_NAME_LENGTH = 100

_DEFAULT_ORDER = {name: index for index, name in enumerate(DEFAULT_SHELVES)}


async def ensure_default_shelves(uow: UnitOfWork, user_id: uuid.UUID) -> List[Shelf]:
    """
    Return the user's default shelves (memberships loaded), creating missing ones.

    New shelves are added to the unit of work but not committed; the caller's
    ``save_changes`` persists them together with whatever else it changes.
    """
    shelves, _ = await uow.shelves.get_all(
        filter=(Shelf.user_id == user_id) & Shelf.is_default.is_(True),
        includes=("memberships",),
    )
    present = {shelf.name for shelf in shelves}
    missing = [name for name in DEFAULT_SHELVES if name not in present]
    if missing:
        created = [Shelf(name=name, user_id=user_id, is_default=True, memberships=[]) for name in missing]
        await uow.shelves.add_range(created)
        shelves.extend(created)
        logger.info(f"Created default shelves {missing} for user {user_id}")
    return sorted(shelves, key=lambda s: _DEFAULT_ORDER.get(s.name, len(_DEFAULT_ORDER)))


def apply_book_status(
    default_shelves: List[Shelf],
    book_id: uuid.UUID,
    target_shelf_name: Optional[str],
) -> Result[Optional[Shelf]]:
    """
    Place ``book_id`` on exactly one default shelf, or on none.

    Works purely on the loaded shelves; nothing is persisted.  An existing
    membership on the target shelf is kept as-is so repeated calls do not
    churn its ``added_at``.
    """
    target_name = (target_shelf_name or "").strip()
    target = None
    if target_name:
        target = next((s for s in default_shelves if s.name == target_name), None)
        if target is None:
            return Result.fail(ShelfErrors.default_shelf_not_found(target_name))

    for shelf in default_shelves:
        if shelf is target:
            continue
        existing = shelf.find_membership(book_id)
        if existing is not None:
            shelf.memberships.remove(existing)

    if target is not None and target.find_membership(book_id) is None:
        target.memberships.append(BookShelf(book_id=book_id, added_at=utcnow()))

    return Result.ok(target)


def _validate_shelf_name(name: Optional[str]) -> Result[str]:
    cleaned = (name or "").strip()
    if not cleaned:
        return Result.fail(ShelfErrors.invalid_name("Shelf name is required."))
    if len(cleaned) > MAX_SHELF_NAME_LENGTH:
        return Result.fail(
            ShelfErrors.invalid_name(f"Shelf name must be at most {MAX_SHELF_NAME_LENGTH} characters.")
        )
    if cleaned.lower() in {n.lower() for n in DEFAULT_SHELVES}:
        return Result.fail(ShelfErrors.invalid_name(f"'{cleaned}' is reserved for a default shelf."))
    return Result.ok(cleaned)


class ShelfService:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def set_book_status(
        self,
        caller_id: Optional[uuid.UUID],
        book_id: uuid.UUID,
        target_shelf_name: Optional[str],
    ) -> Result[None]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            book = await uow.books.get_by_id(book_id)
            if book is None:
                logger.warning(f"Book {book_id} not found")
                return Result.fail(BookErrors.not_found(book_id))

            default_shelves = await ensure_default_shelves(uow, caller_id)
            outcome = apply_book_status(default_shelves, book_id, target_shelf_name)
            if outcome.is_failure:
                logger.warning(f"Default shelf not found: {target_shelf_name}")
                return Result.fail(outcome.error)

            await uow.save_changes()

        if outcome.value is None:
            logger.info(f"Book {book_id} removed from all default shelves")
        else:
            logger.info(f"Book {book_id} updated to status {outcome.value.name}")
        return Result.ok()

    async def get_book_status(self, user_id: uuid.UUID, book_id: uuid.UUID) -> Optional[str]:
        """Name of the default shelf holding the book for this user, if any."""
        async with UnitOfWork(self._session_factory) as uow:
            shelves, _ = await uow.shelves.get_all(
                filter=(Shelf.user_id == user_id) & Shelf.is_default.is_(True),
                includes=("memberships",),
            )
        holding = next((s for s in shelves if s.find_membership(book_id) is not None), None)
        return holding.name if holding else None

    async def create_shelf(self, caller_id: Optional[uuid.UUID], name: str) -> Result[Shelf]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        validated = _validate_shelf_name(name)
        if validated.is_failure:
            return Result.fail(validated.error)

        async with UnitOfWork(self._session_factory) as uow:
            if await self._name_in_use(uow, caller_id, validated.value):
                return Result.fail(ShelfErrors.name_taken(validated.value))

            shelf = Shelf(name=validated.value, user_id=caller_id, is_default=False, memberships=[])
            await uow.shelves.add(shelf)
            await uow.save_changes()

        logger.info(f"Shelf {shelf.id} created for user {caller_id}")
        return Result.ok(shelf)

    async def rename_shelf(
        self,
        caller_id: Optional[uuid.UUID],
        shelf_id: uuid.UUID,
        name: str,
    ) -> Result[Shelf]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            shelf = await uow.shelves.get_by_id(shelf_id, "memberships.book")
            if shelf is not None and shelf.is_default:
                logger.warning(f"Attempt to rename default shelf: {shelf.name}")
                return Result.fail(ShelfErrors.default_shelf_update_denied(shelf.name))

            owned = self._check_owned(shelf, shelf_id, caller_id)
            if owned.is_failure:
                return Result.fail(owned.error)

            validated = _validate_shelf_name(name)
            if validated.is_failure:
                return Result.fail(validated.error)
            if validated.value.lower() != shelf.name.lower() and await self._name_in_use(
                uow, caller_id, validated.value
            ):
                return Result.fail(ShelfErrors.name_taken(validated.value))

            shelf.name = validated.value
            uow.shelves.update(shelf)
            await uow.save_changes()

        logger.info(f"Shelf with ID: {shelf_id} renamed successfully")
        return Result.ok(shelf)

    async def delete_shelf(self, caller_id: Optional[uuid.UUID], shelf_id: uuid.UUID) -> Result[None]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            shelf = await uow.shelves.get_by_id(shelf_id, "memberships")
            if shelf is not None and shelf.is_default:
                logger.warning(f"Attempt to delete default shelf: {shelf.name}")
                return Result.fail(ShelfErrors.default_shelf_delete_denied(shelf.name))

            owned = self._check_owned(shelf, shelf_id, caller_id)
            if owned.is_failure:
                return Result.fail(owned.error)

            shelf.memberships.clear()
            await uow.shelves.delete(shelf)
            await uow.save_changes()

        logger.info(f"Shelf with ID: {shelf_id} deleted")
        return Result.ok()

    async def add_book_to_shelf(
        self,
        caller_id: Optional[uuid.UUID],
        shelf_id: uuid.UUID,
        book_id: uuid.UUID,
    ) -> Result[None]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            shelf = await uow.shelves.get_by_id(shelf_id, "memberships")
            owned = self._check_owned(shelf, shelf_id, caller_id)
            if owned.is_failure:
                return Result.fail(owned.error)

            book = await uow.books.get_by_id(book_id)
            if book is None:
                logger.warning(f"Book {book_id} not found")
                return Result.fail(BookErrors.not_found(book_id))

            if shelf.is_default:
                return Result.fail(ShelfErrors.default_shelf_add_denied(shelf.name))

            if shelf.find_membership(book_id) is not None:
                return Result.fail(ShelfErrors.AlreadyAdded)

            shelf.memberships.append(BookShelf(book_id=book.id, added_at=utcnow()))
            await uow.save_changes()

        logger.info(f"Book {book_id} added to Shelf {shelf_id}")
        return Result.ok()

    async def remove_book_from_shelf(
        self,
        caller_id: Optional[uuid.UUID],
        shelf_id: uuid.UUID,
        book_id: uuid.UUID,
    ) -> Result[None]:
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)

        async with UnitOfWork(self._session_factory) as uow:
            shelf = await uow.shelves.get_by_id(shelf_id, "memberships")
            owned = self._check_owned(shelf, shelf_id, caller_id)
            if owned.is_failure:
                return Result.fail(owned.error)

            membership = shelf.find_membership(book_id)
            if membership is None:
                return Result.fail(ShelfErrors.book_not_on_shelf(book_id, shelf.name))

            shelf.memberships.remove(membership)
            await uow.save_changes()

        logger.info(f"Book {book_id} removed from Shelf {shelf_id}")
        return Result.ok()

    async def get_shelf(self, shelf_id: uuid.UUID) -> Result[Shelf]:
        async with UnitOfWork(self._session_factory) as uow:
            shelf = await uow.shelves.get_by_id(shelf_id, "memberships.book")
        if shelf is None:
            return Result.fail(ShelfErrors.not_found(shelf_id))
        return Result.ok(shelf)

    async def list_user_shelves(self, user_id: uuid.UUID) -> List[Shelf]:
        """Live shelves of a user: defaults first in canonical order, then custom by creation."""
        async with UnitOfWork(self._session_factory) as uow:
            shelves, _ = await uow.shelves.get_all(
                filter=Shelf.user_id == user_id,
                includes=("memberships.book",),
                sort_column="created_at",
            )
        defaults = sorted(
            (s for s in shelves if s.is_default),
            key=lambda s: _DEFAULT_ORDER.get(s.name, len(_DEFAULT_ORDER)),
        )
        return defaults + [s for s in shelves if not s.is_default]

    @staticmethod
    def _check_owned(shelf: Optional[Shelf], shelf_id: uuid.UUID, caller_id: uuid.UUID) -> Result[Shelf]:
        if shelf is None:
            logger.warning(f"Shelf {shelf_id} not found")
            return Result.fail(ShelfErrors.not_found(shelf_id))
        if shelf.user_id != caller_id:
            logger.warning(
                f"User {caller_id} attempted to modify shelf {shelf_id} owned by {shelf.user_id}"
            )
            return Result.fail(ShelfErrors.Unauthorized)
        return Result.ok(shelf)

    @staticmethod
    async def _name_in_use(uow: UnitOfWork, user_id: uuid.UUID, name: str) -> bool:
        return await uow.shelves.exists(
            (Shelf.user_id == user_id) & (func.lower(Shelf.name) == name.lower())
        )
