from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from .settings import Settings
from .logging_config import setup_logging
from .config_loader import reload_config
from .database import create_engine, create_session_factory, shutdown_engine
from bookverse.models.db import Base
from bookverse.services.auth_service import AuthService
from bookverse.services.catalog_service import CatalogService
from bookverse.services.comment_service import CommentService
from bookverse.services.feed_service import FeedService
from bookverse.services.follow_service import FollowService
from bookverse.services.genre_service import GenreService
from bookverse.services.quote_service import QuoteService
from bookverse.services.reading_progress_service import ReadingProgressService
from bookverse.services.review_service import ReviewService
from bookverse.services.shelf_service import ShelfService
from bookverse.services.user_service import UserService

logger = logging.getLogger(__name__)


def init_services(app: FastAPI, settings: Settings, session_factory) -> None:
    """Build the service graph on ``app.state``."""
    app.state.settings = settings
    app.state.db_session_factory = session_factory

    app.state.user_service = UserService(session_factory)
    app.state.auth_service = AuthService(
        app.state.user_service,
        jwt_secret=settings.JWT_SECRET,
        jwt_algorithm=settings.JWT_ALGORITHM,
        jwt_expires_minutes=settings.JWT_ACCESS_TOKEN_EXPIRES_MINUTES,
    )
    app.state.follow_service = FollowService(session_factory)
    app.state.catalog_service = CatalogService(session_factory)
    app.state.genre_service = GenreService(session_factory)
    app.state.shelf_service = ShelfService(session_factory)
    app.state.review_service = ReviewService(session_factory)
    app.state.quote_service = QuoteService(session_factory)
    app.state.comment_service = CommentService(session_factory)
    app.state.reading_progress_service = ReadingProgressService(session_factory)
    app.state.feed_service = FeedService(
        session_factory,
        app.state.follow_service,
        default_page_size=settings.FEED_DEFAULT_PAGE_SIZE,
        max_page_size=settings.FEED_MAX_PAGE_SIZE,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Pick up edits to the TOML config between restarts
    reload_config()

    # Load settings and configure logging
    settings = Settings()
    setup_logging(settings)

    # Database
    app.state.db_engine = create_engine(settings.DATABASE_URL)
    session_factory = create_session_factory(app.state.db_engine)
    if settings.CREATE_SCHEMA_ON_STARTUP:
        async with app.state.db_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    init_services(app, settings, session_factory)
    logger.info("BookVerse services initialised")

    try:
        yield
    finally:
        await shutdown_engine(app.state.db_engine)
        logger.info("Database engine disposed")
