"""
Generic repository over an ``AsyncSession``.

Soft-deletable models (those with a ``deleted_at`` column) are filtered through
``not_deleted`` on every read, so callers never see deleted rows unless they
query the session directly.
"""

from __future__ import annotations

import uuid
from typing import Generic, Iterable, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bookverse.models.db import Base, utcnow

ModelT = TypeVar("ModelT", bound=Base)

SORT_ASC = "asc"
SORT_DESC = "desc"


def is_soft_deletable(model: Type[Base]) -> bool:
    return hasattr(model, "deleted_at")


def not_deleted(model: Type[Base]) -> ColumnElement[bool]:
    """Predicate selecting live rows of a soft-deletable model."""
    return model.deleted_at.is_(None)


def _load_option(model: Type[Base], path: str):
    """Build a ``selectinload`` chain from a dotted relationship path."""
    option = None
    current = model
    for part in path.split("."):
        attr = getattr(current, part)
        option = selectinload(attr) if option is None else option.selectinload(attr)
        current = attr.property.mapper.class_
    return option


class Repository(Generic[ModelT]):
    def __init__(self, session: AsyncSession, model: Type[ModelT]):
        self.session = session
        self.model = model

    def query(self, *includes: str) -> Select:
        stmt = select(self.model)
        if is_soft_deletable(self.model):
            stmt = stmt.where(not_deleted(self.model))
        if includes:
            stmt = stmt.options(*(_load_option(self.model, path) for path in includes))
        return stmt

    async def get_by_id(self, entity_id: uuid.UUID, *includes: str) -> Optional[ModelT]:
        stmt = self.query(*includes).where(self.model.id == entity_id)
        result = await self.session.scalars(stmt)
        return result.first()

    async def get_single_or_none(
        self,
        filter: ColumnElement[bool],
        *includes: str,
    ) -> Optional[ModelT]:
        result = await self.session.scalars(self.query(*includes).where(filter))
        return result.first()

    async def get_all(
        self,
        filter: Optional[ColumnElement[bool]] = None,
        includes: Sequence[str] = (),
        sort_column: Optional[str] = None,
        sort_order: str = SORT_ASC,
        page_number: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> Tuple[list[ModelT], int]:
        """
        Return ``(items, total_count)``.

        ``total_count`` counts every row matching ``filter``; pagination only
        narrows ``items``.  Paging applies when both ``page_number`` and
        ``page_size`` are given.
        """
        stmt = self.query(*includes)
        if filter is not None:
            stmt = stmt.where(filter)

        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = int(await self.session.scalar(count_stmt) or 0)

        if sort_column:
            column = getattr(self.model, sort_column)
            stmt = stmt.order_by(column.desc() if sort_order.lower() == SORT_DESC else column.asc())

        if page_number and page_size:
            stmt = stmt.offset((page_number - 1) * page_size).limit(page_size)

        result = await self.session.scalars(stmt)
        return list(result.unique()), total

    async def add(self, entity: ModelT) -> ModelT:
        self.session.add(entity)
        return entity

    async def add_range(self, entities: Iterable[ModelT]) -> list[ModelT]:
        items = list(entities)
        self.session.add_all(items)
        return items

    def update(self, entity: ModelT) -> ModelT:
        # Loaded entities are already tracked; this re-attaches detached ones.
        self.session.add(entity)
        return entity

    async def delete(self, entity: ModelT) -> None:
        if is_soft_deletable(self.model):
            entity.deleted_at = utcnow()
            self.session.add(entity)
        else:
            await self.session.delete(entity)

    async def count(self, filter: Optional[ColumnElement[bool]] = None) -> int:
        stmt = self.query()
        if filter is not None:
            stmt = stmt.where(filter)
        return int(await self.session.scalar(select(func.count()).select_from(stmt.subquery())) or 0)

    async def exists(self, filter: ColumnElement[bool]) -> bool:
        stmt = select(func.count()).select_from(self.query().where(filter).subquery())
        return bool(await self.session.scalar(stmt))
