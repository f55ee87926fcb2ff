import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from bookverse.core.dependencies import get_comment_service, get_optional_user_id
from bookverse.core.exceptions import unwrap
from bookverse.models.schemas import ApiModel, CommentDto, PagedResult
from bookverse.services.comment_service import CommentService

router = APIRouter()

TargetType = Literal["Review", "Quote"]


class CreateCommentRequest(ApiModel):
    target_type: TargetType
    target_id: uuid.UUID
    text: str


class UpdateCommentRequest(ApiModel):
    text: str


@router.post("/comments", response_model=CommentDto, status_code=status.HTTP_201_CREATED)
async def create_comment(
    request: CreateCommentRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    comment_service: CommentService = Depends(get_comment_service),
):
    comment = unwrap(
        await comment_service.create_comment(caller_id, request.target_type, request.target_id, request.text)
    )
    return CommentDto.from_model(comment)


@router.get("/comments", response_model=PagedResult[CommentDto])
async def list_comments(
    target_type: TargetType = Query(..., alias="targetType"),
    target_id: uuid.UUID = Query(..., alias="targetId"),
    page_number: int = Query(1, alias="pageNumber", ge=1),
    page_size: int = Query(20, alias="pageSize", ge=1, le=100),
    comment_service: CommentService = Depends(get_comment_service),
):
    return await comment_service.list_comments(target_type, target_id, page_number, page_size)


@router.get("/comments/{comment_id}", response_model=CommentDto)
async def get_comment(
    comment_id: uuid.UUID,
    comment_service: CommentService = Depends(get_comment_service),
):
    return CommentDto.from_model(unwrap(await comment_service.get_comment(comment_id)))


@router.put("/comments/{comment_id}", response_model=CommentDto)
async def update_comment(
    comment_id: uuid.UUID,
    request: UpdateCommentRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    comment_service: CommentService = Depends(get_comment_service),
):
    return CommentDto.from_model(unwrap(await comment_service.update_comment(caller_id, comment_id, request.text)))


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: uuid.UUID,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    comment_service: CommentService = Depends(get_comment_service),
):
    unwrap(await comment_service.delete_comment(caller_id, comment_id))
