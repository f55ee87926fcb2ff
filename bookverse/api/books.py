import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field

from bookverse.core.dependencies import (
    get_catalog_service,
    get_current_user_id,
    get_optional_user_id,
    get_reading_progress_service,
    get_shelf_service,
    require_admin_user,
)
from bookverse.core.exceptions import unwrap
from bookverse.models.db import User
from bookverse.models.schemas import ApiModel, AuthorDto, BookDto, PagedResult
from bookverse.services.catalog_service import CatalogService
from bookverse.services.reading_progress_service import ReadingProgressService
from bookverse.services.shelf_service import ShelfService

router = APIRouter()


class CreateAuthorRequest(ApiModel):
    name: str = Field(min_length=1, max_length=255)
    bio: Optional[str] = None


class CreateBookRequest(ApiModel):
    title: str = Field(min_length=1, max_length=512)
    page_count: int = Field(default=0, ge=0)
    author_id: Optional[uuid.UUID] = None
    description: Optional[str] = None
    isbn: Optional[str] = Field(default=None, max_length=32)
    cover_url: Optional[str] = Field(default=None, max_length=512)


class BookStatusResponse(ApiModel):
    book_id: uuid.UUID
    shelf_name: Optional[str] = None


class ProgressRequest(ApiModel):
    current_page: int


class ProgressResponse(ApiModel):
    book_id: uuid.UUID
    current_page: int
    page_count: int
    status: Optional[str] = None


@router.get("/books", response_model=PagedResult[BookDto])
async def list_books(
    search: Optional[str] = None,
    author_id: Optional[uuid.UUID] = Query(None, alias="authorId"),
    genre: Optional[str] = None,
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1, le=100),
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    return await catalog_service.list_books(
        search=search,
        author_id=author_id,
        genre=genre,
        page_number=page_number,
        page_size=page_size,
    )


@router.get("/books/{book_id}", response_model=BookDto)
async def get_book(
    book_id: uuid.UUID,
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    return BookDto.from_model(unwrap(await catalog_service.get_book(book_id)))


@router.post("/books", response_model=BookDto, status_code=status.HTTP_201_CREATED)
async def create_book(
    request: CreateBookRequest,
    _: User = Depends(require_admin_user),
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    book = unwrap(
        await catalog_service.create_book(
            request.title,
            page_count=request.page_count,
            author_id=request.author_id,
            description=request.description,
            isbn=request.isbn,
            cover_url=request.cover_url,
        )
    )
    return BookDto.from_model(book)


@router.post("/authors", response_model=AuthorDto, status_code=status.HTTP_201_CREATED)
async def create_author(
    request: CreateAuthorRequest,
    _: User = Depends(require_admin_user),
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    return AuthorDto.from_model(unwrap(await catalog_service.create_author(request.name, request.bio)))


@router.get("/authors", response_model=PagedResult[AuthorDto])
async def list_authors(
    search: Optional[str] = None,
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1, le=100),
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    return await catalog_service.list_authors(search=search, page_number=page_number, page_size=page_size)


@router.get("/authors/{author_id}", response_model=AuthorDto)
async def get_author(
    author_id: uuid.UUID,
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    return AuthorDto.from_model(unwrap(await catalog_service.get_author(author_id)))


@router.post("/books/{book_id}/status", response_model=BookStatusResponse)
async def set_book_status(
    book_id: uuid.UUID,
    target_shelf_name: Optional[str] = Query(None, alias="targetShelfName"),
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    """Move the book onto one default shelf; an empty name takes it off all of them."""
    unwrap(await shelf_service.set_book_status(caller_id, book_id, target_shelf_name))
    shelf_name = await shelf_service.get_book_status(caller_id, book_id)
    return BookStatusResponse(book_id=book_id, shelf_name=shelf_name)


@router.get("/books/{book_id}/status", response_model=BookStatusResponse)
async def get_book_status(
    book_id: uuid.UUID,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    return BookStatusResponse(book_id=book_id, shelf_name=await shelf_service.get_book_status(caller_id, book_id))


@router.put("/books/{book_id}/progress", response_model=ProgressResponse)
async def update_progress(
    book_id: uuid.UUID,
    request: ProgressRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    progress_service: ReadingProgressService = Depends(get_reading_progress_service),
    catalog_service: CatalogService = Depends(get_catalog_service),
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    progress = unwrap(await progress_service.update_progress(caller_id, book_id, request.current_page))
    book = unwrap(await catalog_service.get_book(book_id))
    return ProgressResponse(
        book_id=book_id,
        current_page=progress.current_page,
        page_count=book.page_count,
        status=await shelf_service.get_book_status(caller_id, book_id),
    )


@router.get("/books/{book_id}/progress", response_model=ProgressResponse)
async def get_progress(
    book_id: uuid.UUID,
    caller_id: uuid.UUID = Depends(get_current_user_id),
    progress_service: ReadingProgressService = Depends(get_reading_progress_service),
    catalog_service: CatalogService = Depends(get_catalog_service),
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    book = unwrap(await catalog_service.get_book(book_id))
    progress = await progress_service.get_progress(caller_id, book_id)
    return ProgressResponse(
        book_id=book_id,
        current_page=progress.current_page if progress else 0,
        page_count=book.page_count,
        status=await shelf_service.get_book_status(caller_id, book_id),
    )
