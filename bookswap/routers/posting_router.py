"""
Posting Router

Listing, searching and managing postings (book listings).
"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Query, status
import logging

from bookswap.core.auth_middleware import get_current_active_user
from bookswap.deps import get_posting_service
from bookswap.models.posting import PostingStatus
from bookswap.schemas.auth import BaseResponse
from bookswap.schemas.pagination import PaginationLimits, PaginationMeta
from bookswap.schemas.posting import PostingCreate, PostingImageCreate, PostingUpdate
from bookswap.schemas.user import User as UserSchema
from bookswap.services.posting_service import PostingService

router = APIRouter(prefix="/postings", tags=["postings"])
logger = logging.getLogger(__name__)

_LIMITS = PaginationLimits.POSTINGS


@router.get("", response_model=BaseResponse)
def search_postings(
    posting_status: Optional[PostingStatus] = Query(PostingStatus.LISTED, alias="status"),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    course_id: Optional[int] = Query(None, alias="courseId"),
    keyword: Optional[str] = Query(None, max_length=100),
    min_price: Optional[int] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[int] = Query(None, alias="maxPrice", ge=0),
    limit: int = Query(_LIMITS["default"], ge=_LIMITS["min"], le=_LIMITS["max"]),
    offset: int = Query(0, ge=0),
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    """
    Search postings, newest first.

    Only listed postings are returned unless another status is requested.
    """
    result = posting_service.search(
        status=posting_status,
        category_id=category_id,
        course_id=course_id,
        keyword=keyword,
        min_price=min_price,
        max_price=max_price,
        limit=limit,
        offset=offset,
    )
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta=PaginationMeta.build(limit, offset, result.total_count).model_dump(),
    )


@router.post("", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def create_posting(
    request: PostingCreate,
    current_user: UserSchema = Depends(get_current_active_user),
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    posting = posting_service.create(current_user.id, request)
    return BaseResponse(success=True, data={"posting": posting.model_dump(mode="json")})


@router.get("/popular", response_model=BaseResponse)
def popular_postings(
    limit: Optional[int] = Query(None, ge=1, le=50),
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    """찜/댓글 수 기준 인기 게시물"""
    postings = posting_service.popular(limit)
    return BaseResponse(
        success=True, data={"postings": [p.model_dump() for p in postings]}
    )


@router.get("/user/{user_id}", response_model=BaseResponse)
def list_user_postings(
    user_id: int,
    posting_status: Optional[PostingStatus] = Query(None, alias="status"),
    limit: int = Query(_LIMITS["default"], ge=_LIMITS["min"], le=_LIMITS["max"]),
    offset: int = Query(0, ge=0),
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    result = posting_service.list_user_postings(
        user_id, status=posting_status, limit=limit, offset=offset
    )
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta=PaginationMeta.build(limit, offset, result.total_count).model_dump(),
    )


@router.get("/{posting_id}", response_model=BaseResponse)
def get_posting(
    posting_id: int,
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    posting = posting_service.get_posting(posting_id)
    return BaseResponse(success=True, data={"posting": posting.model_dump(mode="json")})


@router.put("/{posting_id}", response_model=BaseResponse)
def update_posting(
    posting_id: int,
    request: PostingUpdate,
    current_user: UserSchema = Depends(get_current_active_user),
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    posting = posting_service.update(posting_id, current_user.id, request)
    return BaseResponse(success=True, data={"posting": posting.model_dump(mode="json")})


@router.delete("/{posting_id}", response_model=BaseResponse)
def remove_posting(
    posting_id: int,
    current_user: UserSchema = Depends(get_current_active_user),
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    """게시물 내리기 (상태를 removed 로 변경)"""
    posting = posting_service.remove(posting_id, current_user.id)
    return BaseResponse(success=True, data={"posting": posting.model_dump(mode="json")})


# Images


@router.get("/{posting_id}/images", response_model=BaseResponse)
def list_posting_images(
    posting_id: int,
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    images = posting_service.list_images(posting_id)
    return BaseResponse(success=True, data={"images": [i.model_dump() for i in images]})


@router.post("/{posting_id}/images", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def add_posting_image(
    posting_id: int,
    request: PostingImageCreate,
    current_user: UserSchema = Depends(get_current_active_user),
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    image = posting_service.add_image(posting_id, current_user.id, request)
    return BaseResponse(success=True, data={"image": image.model_dump()})


@router.delete("/{posting_id}/images/{image_id}", response_model=BaseResponse)
def delete_posting_image(
    posting_id: int,
    image_id: int,
    current_user: UserSchema = Depends(get_current_active_user),
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    posting_service.delete_image(posting_id, image_id, current_user.id)
    return BaseResponse(success=True, data={"deleted": True})
