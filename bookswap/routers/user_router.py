from typing import Any
from fastapi import APIRouter, Depends
import logging

from bookswap.core.auth_middleware import get_current_active_user
from bookswap.deps import get_ledger_service, get_review_service, get_user_service
from bookswap.schemas.auth import BaseResponse
from bookswap.schemas.ledger import TopUpRequest
from bookswap.schemas.user import User as UserSchema, UserUpdate
from bookswap.services.ledger_service import LedgerService
from bookswap.services.review_service import ReviewService
from bookswap.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.get("/me", response_model=BaseResponse)
def get_current_user_profile(
    current_user: UserSchema = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service),
) -> Any:
    """현재 사용자 프로필 조회"""
    profile = user_service.get_profile(current_user.id)
    return BaseResponse(success=True, data={"user": profile.model_dump(mode="json")})


@router.put("/me", response_model=BaseResponse)
def update_current_user_profile(
    update_data: UserUpdate,
    current_user: UserSchema = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service),
) -> Any:
    """현재 사용자 프로필 업데이트"""
    profile = user_service.update_profile(current_user.id, update_data)
    return BaseResponse(success=True, data={"user": profile.model_dump(mode="json")})


@router.get("/me/statistics", response_model=BaseResponse)
def get_my_statistics(
    current_user: UserSchema = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service),
) -> Any:
    stats = user_service.get_statistics(current_user.id)
    return BaseResponse(success=True, data=stats.model_dump())


@router.get("/balance", response_model=BaseResponse)
def get_my_balance(
    current_user: UserSchema = Depends(get_current_active_user),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> Any:
    """현재 지갑 잔액"""
    balance = ledger_service.get_balance(current_user.id)
    return BaseResponse(success=True, data=balance.model_dump())


@router.post("/topup", response_model=BaseResponse)
def top_up(
    request: TopUpRequest,
    current_user: UserSchema = Depends(get_current_active_user),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> Any:
    """지갑 충전"""
    result = ledger_service.top_up(current_user.id, request.amount)
    return BaseResponse(success=True, data=result.model_dump())


@router.get("/{user_id}", response_model=BaseResponse)
def get_public_profile(
    user_id: int,
    _: UserSchema = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service),
    review_service: ReviewService = Depends(get_review_service),
) -> Any:
    """다른 사용자의 공개 프로필과 받은 리뷰"""
    profile = user_service.get_public_profile(user_id)
    reviews = review_service.list_for_seller(user_id, limit=10)
    return BaseResponse(
        success=True,
        data={
            "user": profile.model_dump(mode="json"),
            "reviews": reviews.model_dump(mode="json"),
        },
    )
