"""
Response payloads shared by the services and the HTTP layer.

Fields are snake_case in Python and camelCase on the wire so existing clients
keyed on ``activityType``/``totalCount`` keep working.
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime
from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

from bookverse.models.db import Author, Book, BookReview, Comment, Genre, Quote, Shelf, User

T = TypeVar("T")

ActivityType = Literal["Quote", "Review", "BookAdded"]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserSummary(ApiModel):
    id: uuid.UUID
    username: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_model(cls, user: User) -> "UserSummary":
        return cls(
            id=user.id,
            username=user.username,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
        )


class UserProfile(UserSummary):
    bio: Optional[str] = None
    followers_count: int = 0
    following_count: int = 0
    created_at: datetime


class AuthorDto(ApiModel):
    id: uuid.UUID
    name: str
    bio: Optional[str] = None

    @classmethod
    def from_model(cls, author: Author) -> "AuthorDto":
        return cls(id=author.id, name=author.name, bio=author.bio)


class GenreDto(ApiModel):
    id: uuid.UUID
    name: str
    book_count: int = 0

    @classmethod
    def from_model(cls, genre: Genre, book_count: int = 0) -> "GenreDto":
        return cls(id=genre.id, name=genre.name, book_count=book_count)


class BookDto(ApiModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    isbn: Optional[str] = None
    cover_url: Optional[str] = None
    page_count: int
    author_id: Optional[uuid.UUID] = None
    average_rating: float
    rating_count: int

    @classmethod
    def from_model(cls, book: Book) -> "BookDto":
        return cls(
            id=book.id,
            title=book.title,
            description=book.description,
            isbn=book.isbn,
            cover_url=book.cover_url,
            page_count=book.page_count,
            author_id=book.author_id,
            average_rating=book.average_rating,
            rating_count=book.rating_count,
        )


class ShelfDto(ApiModel):
    id: uuid.UUID
    name: str
    is_default: bool
    book_count: int
    books: List[BookDto] = []

    @classmethod
    def from_model(cls, shelf: Shelf, *, include_books: bool = True) -> "ShelfDto":
        live = [m for m in shelf.memberships if m.book is not None and not m.book.is_deleted]
        return cls(
            id=shelf.id,
            name=shelf.name,
            is_default=shelf.is_default,
            book_count=len(live),
            books=[BookDto.from_model(m.book) for m in live] if include_books else [],
        )


class QuoteDto(ApiModel):
    id: uuid.UUID
    text: str
    created_by_user_id: uuid.UUID
    book_id: Optional[uuid.UUID] = None
    author_id: Optional[uuid.UUID] = None
    tags: List[str] = []
    likes_count: int = 0
    created_at: datetime

    @classmethod
    def from_model(cls, quote: Quote) -> "QuoteDto":
        return cls(
            id=quote.id,
            text=quote.text,
            created_by_user_id=quote.created_by_user_id,
            book_id=quote.book_id,
            author_id=quote.author_id,
            tags=list(quote.tags or []),
            likes_count=quote.like_count,
            created_at=quote.created_at,
        )


class ReviewDto(ApiModel):
    id: uuid.UUID
    user_id: uuid.UUID
    book_id: uuid.UUID
    rating: int
    review_text: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_model(cls, review: BookReview) -> "ReviewDto":
        return cls(
            id=review.id,
            user_id=review.user_id,
            book_id=review.book_id,
            rating=review.rating,
            review_text=review.review_text,
            created_at=review.created_at,
        )


class CommentDto(ApiModel):
    id: uuid.UUID
    text: str
    target_type: str
    target_id: uuid.UUID
    user: UserSummary
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, comment: Comment) -> "CommentDto":
        return cls(
            id=comment.id,
            text=comment.text,
            target_type=comment.target_type,
            target_id=comment.target_id,
            user=UserSummary.from_model(comment.user),
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class FeedItem(ApiModel):
    """One piece of social activity; built on read, never stored."""

    id: str
    activity_type: ActivityType
    created_at: datetime
    user: UserSummary
    quote: Optional[QuoteDto] = None
    review: Optional[ReviewDto] = None
    book: Optional[BookDto] = None
    shelf_name: Optional[str] = None


class PagedResult(ApiModel, Generic[T]):
    items: List[T]
    page_number: int
    page_size: int
    total_count: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @computed_field
    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @computed_field
    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages

    @classmethod
    def create(cls, items: List[T], page_number: int, page_size: int, total_count: int) -> "PagedResult[T]":
        return cls(items=items, page_number=page_number, page_size=page_size, total_count=total_count)
