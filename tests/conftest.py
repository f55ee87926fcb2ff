"""
Pytest configuration and shared fixtures for BookVerse tests.

Service tests run against a fresh in-memory SQLite database per test.
"""
import sys
import uuid
from pathlib import Path

import pytest
import pytest_asyncio

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from bookverse.core.database import create_engine, create_session_factory, shutdown_engine
from bookverse.models.db import Base, Book, User
from bookverse.repositories import UnitOfWork
from bookverse.services.feed_service import FeedService
from bookverse.services.follow_service import FollowService
from bookverse.services.quote_service import QuoteService
from bookverse.services.reading_progress_service import ReadingProgressService
from bookverse.services.review_service import ReviewService
from bookverse.services.shelf_service import ShelfService, ensure_default_shelves


@pytest_asyncio.fixture
async def engine():
    engine = create_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await shutdown_engine(engine)


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def shelf_service(session_factory):
    return ShelfService(session_factory)


@pytest.fixture
def follow_service(session_factory):
    return FollowService(session_factory)


@pytest.fixture
def review_service(session_factory):
    return ReviewService(session_factory)


@pytest.fixture
def quote_service(session_factory):
    return QuoteService(session_factory)


@pytest.fixture
def progress_service(session_factory):
    return ReadingProgressService(session_factory)


@pytest.fixture
def feed_service(session_factory, follow_service):
    return FeedService(session_factory, follow_service, default_page_size=10, max_page_size=50)


@pytest.fixture
def make_user(session_factory):
    """Insert a user directly; skips password hashing to keep tests fast."""

    async def _make(username=None, *, role="member", default_shelves=False):
        async with UnitOfWork(session_factory) as uow:
            user = User(
                id=uuid.uuid4(),
                username=username or f"user_{uuid.uuid4().hex[:8]}",
                password_hash="not-a-real-hash",
                role=role,
            )
            user.display_name = user.username.title()
            await uow.users.add(user)
            if default_shelves:
                await ensure_default_shelves(uow, user.id)
            await uow.save_changes()
        return user

    return _make


@pytest.fixture
def make_book(session_factory):
    async def _make(title="Dune", *, page_count=300):
        async with UnitOfWork(session_factory) as uow:
            book = Book(title=title, page_count=page_count, average_rating=0.0, rating_count=0)
            await uow.books.add(book)
            await uow.save_changes()
        return book

    return _make
