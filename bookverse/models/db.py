from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

DEFAULT_SHELF_WANT_TO_READ = "Want to Read"
DEFAULT_SHELF_CURRENTLY_READING = "Currently Reading"
DEFAULT_SHELF_READ = "Read"

# Canonical order; also the order default shelves are listed in.
DEFAULT_SHELVES = (
    DEFAULT_SHELF_WANT_TO_READ,
    DEFAULT_SHELF_CURRENTLY_READING,
    DEFAULT_SHELF_READ,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for the BookVerse models."""


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )


class SoftDeleteMixin:
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class User(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(
        Enum("admin", "member", name="user_role"),
        nullable=False,
        default="member",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    shelves: Mapped[list["Shelf"]] = relationship(
        "Shelf",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class Author(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "authors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)

    books: Mapped[list["Book"]] = relationship("Book", back_populates="author")


class Book(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "books"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(512), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    isbn: Mapped[str | None] = mapped_column(String(32), nullable=True)
    cover_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    page_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    author_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("authors.id", ondelete="SET NULL"),
        nullable=True,
    )
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    author: Mapped["Author"] = relationship("Author", back_populates="books")


class Shelf(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "shelves"
    __table_args__ = (
        Index("ix_shelves_user_id", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="shelves")
    memberships: Mapped[list["BookShelf"]] = relationship(
        "BookShelf",
        back_populates="shelf",
        cascade="all, delete-orphan",
        order_by="BookShelf.added_at",
    )

    def find_membership(self, book_id: uuid.UUID) -> "BookShelf | None":
        return next((m for m in self.memberships if m.book_id == book_id), None)


class BookShelf(Base):
    """A book placed on a shelf; owned by the shelf."""

    __tablename__ = "book_shelves"
    __table_args__ = (
        Index("ix_book_shelves_book_id", "book_id"),
    )

    shelf_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shelves.id", ondelete="CASCADE"),
        primary_key=True,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="CASCADE"),
        primary_key=True,
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    shelf: Mapped["Shelf"] = relationship("Shelf", back_populates="memberships")
    book: Mapped["Book"] = relationship("Book")


class Quote(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "quotes"
    __table_args__ = (
        Index("ix_quotes_created_by_user_id", "created_by_user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_by_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    book_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="SET NULL"),
        nullable=True,
    )
    author_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("authors.id", ondelete="SET NULL"),
        nullable=True,
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    likes: Mapped[list["QuoteLike"]] = relationship(
        "QuoteLike",
        back_populates="quote",
        cascade="all, delete-orphan",
    )

    @property
    def like_count(self) -> int:
        return len(self.likes)


class QuoteLike(Base):
    __tablename__ = "quote_likes"

    quote_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("quotes.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    liked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    quote: Mapped["Quote"] = relationship("Quote", back_populates="likes")


class BookReview(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "book_reviews"
    __table_args__ = (
        Index("ix_book_reviews_book_id", "book_id"),
        Index("ix_book_reviews_user_id", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review_text: Mapped[str | None] = mapped_column(Text, nullable=True)

    book: Mapped["Book"] = relationship("Book")


class UserFollow(Base, SoftDeleteMixin):
    __tablename__ = "user_follows"
    __table_args__ = (
        Index("ix_user_follows_following_id", "following_id"),
    )

    follower_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    following_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    followed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )


class ReadingProgress(Base, TimestampMixin):
    __tablename__ = "reading_progresses"
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_reading_progress_user_book"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
    )
    current_page: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Genre(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "genres"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    book_links: Mapped[list["BookGenre"]] = relationship(
        "BookGenre",
        back_populates="genre",
        cascade="all, delete-orphan",
    )


class BookGenre(Base):
    """Book tagged with a genre; removing the tag deletes the row."""

    __tablename__ = "book_genres"
    __table_args__ = (
        Index("ix_book_genres_genre_id", "genre_id"),
    )

    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="CASCADE"),
        primary_key=True,
    )
    genre_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("genres.id", ondelete="CASCADE"),
        primary_key=True,
    )

    genre: Mapped["Genre"] = relationship("Genre", back_populates="book_links")


COMMENT_TARGET_TYPES = ("Review", "Quote")


class Comment(Base, TimestampMixin, SoftDeleteMixin):
    """A reader's comment on a review or a quote."""

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_target", "target_type", "target_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    target_type: Mapped[str] = mapped_column(
        Enum(*COMMENT_TARGET_TYPES, name="comment_target_type"),
        nullable=False,
    )
    target_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    user: Mapped["User"] = relationship("User")
