from typing import Any, Optional
from fastapi import APIRouter, Depends, Query, status

from bookswap.core.auth_middleware import get_current_active_user
from bookswap.core.exceptions import ValidationError
from bookswap.deps import get_review_service
from bookswap.schemas.auth import BaseResponse
from bookswap.schemas.pagination import PaginationMeta
from bookswap.schemas.review import ReviewCreate, ReviewUpdate
from bookswap.schemas.user import User as UserSchema
from bookswap.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def submit_review(
    request: ReviewCreate,
    current_user: UserSchema = Depends(get_current_active_user),
    review_service: ReviewService = Depends(get_review_service),
) -> Any:
    """완료된 주문의 판매자 평가 (주문당 1회)"""
    review = review_service.submit(
        current_user.id, request.order_id, request.rating, request.comment
    )
    return BaseResponse(success=True, data={"review": review.model_dump(mode="json")})


@router.get("", response_model=BaseResponse)
def list_reviews(
    seller_id: Optional[int] = Query(None, alias="sellerId"),
    reviewer_id: Optional[int] = Query(None, alias="reviewerId"),
    order_id: Optional[int] = Query(None, alias="orderId"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: UserSchema = Depends(get_current_active_user),
    review_service: ReviewService = Depends(get_review_service),
) -> Any:
    """
    Reviews by order, by seller, or by reviewer.
    Without filters the caller's own reviews are returned.
    """
    if order_id is not None:
        review = review_service.get_for_order(order_id)
        return BaseResponse(
            success=True,
            data={"review": review.model_dump(mode="json") if review else None},
        )

    if seller_id is not None and reviewer_id is not None:
        raise ValidationError("Use either sellerId or reviewerId")
    if seller_id is not None:
        result = review_service.list_for_seller(seller_id, limit=limit, offset=offset)
    else:
        result = review_service.list_by_reviewer(
            reviewer_id if reviewer_id is not None else current_user.id,
            limit=limit,
            offset=offset,
        )
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta=PaginationMeta.build(limit, offset, result.total_count).model_dump(),
    )


@router.get("/average", response_model=BaseResponse)
def average_rating(
    user_id: Optional[int] = Query(None, alias="userId"),
    current_user: UserSchema = Depends(get_current_active_user),
    review_service: ReviewService = Depends(get_review_service),
) -> Any:
    result = review_service.average_rating(user_id if user_id is not None else current_user.id)
    return BaseResponse(success=True, data=result.model_dump())


@router.put("/{review_id}", response_model=BaseResponse)
def update_review(
    review_id: int,
    request: ReviewUpdate,
    current_user: UserSchema = Depends(get_current_active_user),
    review_service: ReviewService = Depends(get_review_service),
) -> Any:
    review = review_service.update(
        review_id, current_user.id, rating=request.rating, comment=request.comment
    )
    return BaseResponse(success=True, data={"review": review.model_dump(mode="json")})


@router.delete("/{review_id}", response_model=BaseResponse)
def delete_review(
    review_id: int,
    current_user: UserSchema = Depends(get_current_active_user),
    review_service: ReviewService = Depends(get_review_service),
) -> Any:
    review_service.delete(review_id, current_user.id)
    return BaseResponse(success=True, data={"deleted": True})
