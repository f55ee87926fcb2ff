import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from bookverse.core.dependencies import get_optional_user_id, get_review_service
from bookverse.core.exceptions import unwrap
from bookverse.models.schemas import ApiModel, PagedResult, ReviewDto
from bookverse.services.review_service import ReviewService

router = APIRouter()


class CreateReviewRequest(ApiModel):
    book_id: uuid.UUID
    rating: int
    review_text: Optional[str] = None


class UpdateReviewRequest(ApiModel):
    rating: int
    review_text: Optional[str] = None


@router.post("/reviews", response_model=ReviewDto, status_code=status.HTTP_201_CREATED)
async def create_review(
    request: CreateReviewRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    review_service: ReviewService = Depends(get_review_service),
):
    review = unwrap(
        await review_service.create_review(caller_id, request.book_id, request.rating, request.review_text)
    )
    return ReviewDto.from_model(review)


@router.put("/reviews/{review_id}", response_model=ReviewDto)
async def update_review(
    review_id: uuid.UUID,
    request: UpdateReviewRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    review_service: ReviewService = Depends(get_review_service),
):
    review = unwrap(
        await review_service.update_review(caller_id, review_id, request.rating, request.review_text)
    )
    return ReviewDto.from_model(review)


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: uuid.UUID,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    review_service: ReviewService = Depends(get_review_service),
):
    unwrap(await review_service.delete_review(caller_id, review_id))


@router.get("/books/{book_id}/reviews", response_model=PagedResult[ReviewDto])
async def list_book_reviews(
    book_id: uuid.UUID,
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(10, alias="pageSize", ge=1, le=100),
    review_service: ReviewService = Depends(get_review_service),
):
    return unwrap(await review_service.list_book_reviews(book_id, page_number, page_size))
