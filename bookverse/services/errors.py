""" Typed domain errors and the result envelope returned by every service operation. """

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    FAILURE = "failure"

    @property
    def status(self) -> HTTPStatus:
        return _KIND_STATUS[self]


_KIND_STATUS = {
    ErrorKind.UNAUTHORIZED: HTTPStatus.UNAUTHORIZED,
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.FORBIDDEN: HTTPStatus.FORBIDDEN,
    ErrorKind.CONFLICT: HTTPStatus.CONFLICT,
    ErrorKind.VALIDATION: HTTPStatus.BAD_REQUEST,
    ErrorKind.FAILURE: HTTPStatus.BAD_REQUEST,
}


@dataclass(frozen=True, slots=True)
class Error:
    """A domain failure: stable machine-readable ``code`` plus a human message."""

    code: str
    message: str
    kind: ErrorKind = ErrorKind.FAILURE

    @classmethod
    def not_found(cls, code: str, message: str) -> "Error":
        return cls(code, message, ErrorKind.NOT_FOUND)

    @classmethod
    def conflict(cls, code: str, message: str) -> "Error":
        return cls(code, message, ErrorKind.CONFLICT)

    @classmethod
    def forbidden(cls, code: str, message: str) -> "Error":
        return cls(code, message, ErrorKind.FORBIDDEN)

    @classmethod
    def validation(cls, code: str, message: str) -> "Error":
        return cls(code, message, ErrorKind.VALIDATION)

    @classmethod
    def unauthorized(cls, code: str, message: str) -> "Error":
        return cls(code, message, ErrorKind.UNAUTHORIZED)

    @classmethod
    def failure(cls, code: str, message: str) -> "Error":
        return cls(code, message, ErrorKind.FAILURE)


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Success with an optional payload, or a typed failure. Never both."""

    value: Optional[T] = None
    error: Optional[Error] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: Error) -> "Result[T]":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None


def to_http_payload(error: Error) -> Tuple[int, Dict[str, Any]]:
    """Convert a domain error into an HTTP status and response body."""

    body: Dict[str, Any] = {
        "type": "error",
        "data": {
            "code": error.code,
            "message": error.message,
        },
    }
    return int(error.kind.status), body


class AuthErrors:
    Unauthorized = Error.unauthorized("Auth.Unauthorized", "User is not authenticated.")
    InvalidCredentials = Error.unauthorized("Auth.InvalidCredentials", "Invalid username or password.")


class UserErrors:
    UsernameTaken = Error.conflict("Users.UsernameTaken", "Username is already taken.")
    EmailAlreadyRegistered = Error.conflict("Users.EmailAlreadyRegistered", "Email is already registered.")

    @staticmethod
    def not_found(identifier: Any) -> Error:
        return Error.not_found("Users.NotFound", f"The user '{identifier}' was not found.")


class BookErrors:
    InvalidTitle = Error.validation("Books.InvalidTitle", "Book title is required.")
    InvalidPageCount = Error.validation("Books.InvalidPageCount", "Page count cannot be negative.")
    InvalidAuthorName = Error.validation("Authors.InvalidName", "Author name is required.")

    @staticmethod
    def not_found(book_id: uuid.UUID) -> Error:
        return Error.not_found("Books.NotFound", f"The book with id '{book_id}' was not found.")

    @staticmethod
    def author_not_found(author_id: uuid.UUID) -> Error:
        return Error.not_found("Authors.NotFound", f"The author with id '{author_id}' was not found.")


class GenreErrors:
    InvalidName = Error.validation("Genres.InvalidName", "Genre name must be between 1 and 64 characters.")
    EmptySelection = Error.validation("Genres.EmptySelection", "At least one genre must be specified.")

    @staticmethod
    def not_found(genre_id: Any) -> Error:
        return Error.not_found("Genres.NotFound", f"The genre '{genre_id}' was not found.")

    @staticmethod
    def name_taken(name: str) -> Error:
        return Error.conflict("Genres.NameTaken", f"A genre named '{name}' already exists.")

    @staticmethod
    def not_assigned(genre_id: uuid.UUID, book_id: uuid.UUID) -> Error:
        return Error.not_found("Genres.NotAssigned", f"Genre '{genre_id}' is not assigned to book '{book_id}'.")


class ShelfErrors:
    Unauthorized = Error.forbidden("Shelves.Unauthorized", "You are not authorized to modify this shelf.")
    AlreadyAdded = Error.conflict("Shelves.AlreadyAdded", "Book is already on this shelf.")

    @staticmethod
    def not_found(shelf_id: uuid.UUID) -> Error:
        return Error.not_found("Shelves.NotFound", f"The shelf with id '{shelf_id}' was not found.")

    @staticmethod
    def default_shelf_not_found(name: str) -> Error:
        return Error.not_found("Shelves.DefaultShelfNotFound", f"Default shelf '{name}' not found.")

    @staticmethod
    def default_shelf_delete_denied(name: str) -> Error:
        return Error.failure("Shelves.DefaultShelfDeleteDenied", f"Cannot delete default shelf '{name}'.")

    @staticmethod
    def default_shelf_update_denied(name: str) -> Error:
        return Error.failure("Shelves.DefaultShelfUpdateDenied", f"Cannot rename default shelf '{name}'.")

    @staticmethod
    def default_shelf_add_denied(name: str) -> Error:
        return Error.failure(
            "Shelves.DefaultShelfAddDenied",
            f"Cannot manually add books to default shelf '{name}'. Update the book status instead.",
        )

    @staticmethod
    def book_not_on_shelf(book_id: uuid.UUID, shelf_name: str) -> Error:
        return Error.not_found("Shelf.Notfound", f"Book:{book_id} not found in shelf:{shelf_name}")

    @staticmethod
    def invalid_name(reason: str) -> Error:
        return Error.validation("Shelves.InvalidName", reason)

    @staticmethod
    def name_taken(name: str) -> Error:
        return Error.conflict("Shelves.NameTaken", f"You already have a shelf named '{name}'.")


class ReviewErrors:
    Unauthorized = Error.forbidden("BookReviews.Unauthorized", "You are not authorized to modify this review.")
    AlreadyReviewed = Error.conflict("BookReviews.AlreadyReviewed", "You have already reviewed this book.")

    @staticmethod
    def not_found(review_id: uuid.UUID) -> Error:
        return Error.not_found("BookReviews.NotFound", f"The review with id '{review_id}' was not found.")

    @staticmethod
    def invalid_rating(minimum: int, maximum: int) -> Error:
        return Error.validation("BookReviews.InvalidRating", f"Rating must be between {minimum} and {maximum}.")


class QuoteErrors:
    Unauthorized = Error.forbidden("Quotes.Unauthorized", "You are not authorized to modify this quote.")
    InvalidText = Error.validation("Quotes.InvalidText", "Quote text must not be empty.")

    @staticmethod
    def not_found(quote_id: uuid.UUID) -> Error:
        return Error.not_found("Quotes.NotFound", f"The quote with id '{quote_id}' was not found.")


class CommentErrors:
    Unauthorized = Error.forbidden("Comments.Unauthorized", "You are not authorized to modify this comment.")
    InvalidText = Error.validation("Comments.InvalidText", "Comment text must not be empty.")
    InvalidTarget = Error.validation("Comments.InvalidTarget", "Comments can only target a Review or a Quote.")

    @staticmethod
    def not_found(comment_id: uuid.UUID) -> Error:
        return Error.not_found("Comments.NotFound", f"The comment with id '{comment_id}' was not found.")

    @staticmethod
    def target_not_found(target_type: str, target_id: uuid.UUID) -> Error:
        return Error.not_found("Comments.TargetNotFound", f"The {target_type.lower()} '{target_id}' was not found.")


class FollowErrors:
    SelfFollow = Error.validation("Follows.SelfFollow", "You cannot follow yourself.")
    AlreadyFollowing = Error.conflict("Follows.AlreadyFollowing", "You are already following this user.")
    NotFollowing = Error.not_found("Follows.NotFollowing", "You are not following this user.")

    @staticmethod
    def user_not_found(user_id: uuid.UUID) -> Error:
        return Error.not_found("Follows.UserNotFound", f"The user '{user_id}' was not found.")


class ReadingProgressErrors:
    @staticmethod
    def invalid_page(page_count: int) -> Error:
        return Error.validation(
            "ReadingProgress.InvalidPage",
            f"Current page must be between 0 and {page_count}.",
        )


class FeedErrors:
    InvalidPage = Error.validation("Feed.InvalidPage", "Page number and page size must be positive.")
