import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from bookverse.core.dependencies import get_feed_service, get_optional_user_id
from bookverse.core.exceptions import unwrap
from bookverse.models.schemas import FeedItem, PagedResult
from bookverse.services.feed_service import FeedService

router = APIRouter()


@router.get("/feed", response_model=PagedResult[FeedItem])
async def get_feed(
    page_number: int = Query(1, alias="pageNumber"),
    page_size: Optional[int] = Query(None, alias="pageSize"),
    caller_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    feed_service: FeedService = Depends(get_feed_service),
):
    """Recent activity of the users the caller follows, newest first."""
    return unwrap(await feed_service.get_feed(caller_id, page_number, page_size))
