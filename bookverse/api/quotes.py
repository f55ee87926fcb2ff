import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from bookverse.core.dependencies import get_optional_user_id, get_quote_service
from bookverse.core.exceptions import unwrap
from bookverse.models.schemas import ApiModel, PagedResult, QuoteDto
from bookverse.services.quote_service import QuoteService

router = APIRouter()


class QuoteRequest(ApiModel):
    text: str
    book_id: Optional[uuid.UUID] = None
    author_id: Optional[uuid.UUID] = None
    tags: Optional[List[str]] = None


@router.post("/quotes", response_model=QuoteDto, status_code=status.HTTP_201_CREATED)
async def create_quote(
    request: QuoteRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    quote_service: QuoteService = Depends(get_quote_service),
):
    quote = unwrap(
        await quote_service.create_quote(
            caller_id,
            request.text,
            book_id=request.book_id,
            author_id=request.author_id,
            tags=request.tags,
        )
    )
    return QuoteDto.from_model(quote)


@router.put("/quotes/{quote_id}", response_model=QuoteDto)
async def update_quote(
    quote_id: uuid.UUID,
    request: QuoteRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    quote_service: QuoteService = Depends(get_quote_service),
):
    quote = unwrap(
        await quote_service.update_quote(
            caller_id,
            quote_id,
            request.text,
            book_id=request.book_id,
            author_id=request.author_id,
            tags=request.tags,
        )
    )
    return QuoteDto.from_model(quote)


@router.delete("/quotes/{quote_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quote(
    quote_id: uuid.UUID,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    quote_service: QuoteService = Depends(get_quote_service),
):
    unwrap(await quote_service.delete_quote(caller_id, quote_id))


@router.get("/quotes", response_model=PagedResult[QuoteDto])
async def list_quotes(
    tag: Optional[str] = None,
    user_id: Optional[uuid.UUID] = Query(None, alias="userId"),
    book_id: Optional[uuid.UUID] = Query(None, alias="bookId"),
    author_id: Optional[uuid.UUID] = Query(None, alias="authorId"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1, le=100),
    quote_service: QuoteService = Depends(get_quote_service),
):
    return await quote_service.list_quotes(
        tag=tag,
        user_id=user_id,
        book_id=book_id,
        author_id=author_id,
        page_number=page_number,
        page_size=page_size,
    )


@router.get("/quotes/{quote_id}", response_model=QuoteDto)
async def get_quote(
    quote_id: uuid.UUID,
    quote_service: QuoteService = Depends(get_quote_service),
):
    return QuoteDto.from_model(unwrap(await quote_service.get_quote(quote_id)))


@router.post("/quotes/{quote_id}/like", response_model=QuoteDto)
async def toggle_like(
    quote_id: uuid.UUID,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    quote_service: QuoteService = Depends(get_quote_service),
):
    return QuoteDto.from_model(unwrap(await quote_service.toggle_like(caller_id, quote_id)))
