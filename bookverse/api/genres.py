import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field

from bookverse.core.dependencies import get_genre_service, require_admin_user
from bookverse.core.exceptions import unwrap
from bookverse.models.db import User
from bookverse.models.schemas import ApiModel, GenreDto, PagedResult
from bookverse.services.genre_service import GenreService

router = APIRouter()


class GenreRequest(ApiModel):
    name: str = Field(min_length=1, max_length=64)


class BookGenresRequest(ApiModel):
    genre_ids: List[uuid.UUID]


@router.get("/genres", response_model=PagedResult[GenreDto])
async def list_genres(
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(20, alias="pageSize", ge=1, le=100),
    genre_service: GenreService = Depends(get_genre_service),
):
    return await genre_service.list_genres(page_number, page_size)


@router.get("/genres/{genre_id}", response_model=GenreDto)
async def get_genre(
    genre_id: uuid.UUID,
    genre_service: GenreService = Depends(get_genre_service),
):
    return unwrap(await genre_service.get_genre(genre_id))


@router.post("/genres", response_model=GenreDto, status_code=status.HTTP_201_CREATED)
async def create_genre(
    request: GenreRequest,
    _: User = Depends(require_admin_user),
    genre_service: GenreService = Depends(get_genre_service),
):
    return GenreDto.from_model(unwrap(await genre_service.create_genre(request.name)))


@router.put("/genres/{genre_id}", response_model=GenreDto)
async def rename_genre(
    genre_id: uuid.UUID,
    request: GenreRequest,
    _: User = Depends(require_admin_user),
    genre_service: GenreService = Depends(get_genre_service),
):
    unwrap(await genre_service.rename_genre(genre_id, request.name))
    return unwrap(await genre_service.get_genre(genre_id))


@router.delete("/genres/{genre_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_genre(
    genre_id: uuid.UUID,
    _: User = Depends(require_admin_user),
    genre_service: GenreService = Depends(get_genre_service),
):
    unwrap(await genre_service.delete_genre(genre_id))


@router.get("/books/{book_id}/genres", response_model=List[GenreDto])
async def list_book_genres(
    book_id: uuid.UUID,
    genre_service: GenreService = Depends(get_genre_service),
):
    return unwrap(await genre_service.list_book_genres(book_id))


@router.post("/books/{book_id}/genres", response_model=List[GenreDto])
async def add_genres_to_book(
    book_id: uuid.UUID,
    request: BookGenresRequest,
    _: User = Depends(require_admin_user),
    genre_service: GenreService = Depends(get_genre_service),
):
    return unwrap(await genre_service.add_genres_to_book(book_id, request.genre_ids))


@router.delete("/books/{book_id}/genres/{genre_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_genre_from_book(
    book_id: uuid.UUID,
    genre_id: uuid.UUID,
    _: User = Depends(require_admin_user),
    genre_service: GenreService = Depends(get_genre_service),
):
    unwrap(await genre_service.remove_genre_from_book(book_id, genre_id))
