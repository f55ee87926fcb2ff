import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field

from bookverse.core.dependencies import get_optional_user_id, get_shelf_service
from bookverse.core.exceptions import unwrap
from bookverse.models.schemas import ApiModel, ShelfDto
from bookverse.services.shelf_service import ShelfService

router = APIRouter()


class ShelfNameRequest(ApiModel):
    name: str = Field(max_length=200)


@router.post("/shelves", response_model=ShelfDto, status_code=status.HTTP_201_CREATED)
async def create_shelf(
    request: ShelfNameRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    return ShelfDto.from_model(unwrap(await shelf_service.create_shelf(caller_id, request.name)))


@router.get("/shelves/{shelf_id}", response_model=ShelfDto)
async def get_shelf(
    shelf_id: uuid.UUID,
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    return ShelfDto.from_model(unwrap(await shelf_service.get_shelf(shelf_id)))


@router.get("/users/{user_id}/shelves", response_model=List[ShelfDto])
async def list_user_shelves(
    user_id: uuid.UUID,
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    shelves = await shelf_service.list_user_shelves(user_id)
    return [ShelfDto.from_model(shelf, include_books=False) for shelf in shelves]


@router.put("/shelves/{shelf_id}", response_model=ShelfDto)
async def rename_shelf(
    shelf_id: uuid.UUID,
    request: ShelfNameRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    return ShelfDto.from_model(unwrap(await shelf_service.rename_shelf(caller_id, shelf_id, request.name)))


@router.delete("/shelves/{shelf_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shelf(
    shelf_id: uuid.UUID,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    unwrap(await shelf_service.delete_shelf(caller_id, shelf_id))


@router.post("/shelves/{shelf_id}/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_book_to_shelf(
    shelf_id: uuid.UUID,
    book_id: uuid.UUID,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    unwrap(await shelf_service.add_book_to_shelf(caller_id, shelf_id, book_id))


@router.delete("/shelves/{shelf_id}/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_book_from_shelf(
    shelf_id: uuid.UUID,
    book_id: uuid.UUID,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    shelf_service: ShelfService = Depends(get_shelf_service),
):
    unwrap(await shelf_service.remove_book_from_shelf(caller_id, shelf_id, book_id))
