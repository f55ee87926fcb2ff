from fastapi import FastAPI

from bookverse.core.startup import lifespan
from bookverse.core.middleware import logging_middleware, setup_cors_middleware
from bookverse.core.exceptions import setup_exception_handlers
from bookverse.core.settings import Settings

from bookverse.api import auth, books, comments, feed, follows, genres, quotes, reviews, shelves, users

# Initialize the FastAPI app with the lifespan manager
app = FastAPI(
    title="BookVerse",
    version="1.0.0",
    lifespan=lifespan
)

# Load settings for middleware configuration
settings = Settings()

# Setup CORS middleware (must be added before other middleware)
setup_cors_middleware(app, settings.CORS_ORIGINS)

# Add logging middleware
app.middleware("http")(logging_middleware)

# Setup exception handlers
setup_exception_handlers(app)

# Include routers
app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(users.router, prefix="/api", tags=["users"])
app.include_router(follows.router, prefix="/api", tags=["follows"])
app.include_router(books.router, prefix="/api", tags=["books"])
app.include_router(genres.router, prefix="/api", tags=["genres"])
app.include_router(shelves.router, prefix="/api", tags=["shelves"])
app.include_router(reviews.router, prefix="/api", tags=["reviews"])
app.include_router(quotes.router, prefix="/api", tags=["quotes"])
app.include_router(comments.router, prefix="/api", tags=["comments"])
app.include_router(feed.router, prefix="/api", tags=["feed"])


@app.get("/health")
async def health():
    """
    Health check endpoint to confirm the service is running.
    """
    return {"status": "healthy", "service": "bookverse"}
