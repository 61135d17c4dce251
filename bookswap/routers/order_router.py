from typing import Any
from fastapi import APIRouter, Depends, Query, status
import logging

from bookswap.core.auth_middleware import get_current_active_user
from bookswap.deps import get_order_service
from bookswap.schemas.auth import BaseResponse
from bookswap.schemas.order import OrderRole, PurchaseRequest
from bookswap.schemas.pagination import PaginationLimits, PaginationMeta
from bookswap.schemas.user import User as UserSchema
from bookswap.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])
logger = logging.getLogger(__name__)

_LIMITS = PaginationLimits.ORDERS


@router.post("", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def purchase(
    request: PurchaseRequest,
    current_user: UserSchema = Depends(get_current_active_user),
    order_service: OrderService = Depends(get_order_service),
) -> Any:
    """지갑 잔액으로 게시물 구매"""
    order = order_service.purchase(current_user.id, request.posting_id)
    return BaseResponse(success=True, data={"order": order.model_dump(mode="json")})


@router.get("", response_model=BaseResponse)
def list_my_orders(
    role: OrderRole = Query(OrderRole.BUYER),
    limit: int = Query(_LIMITS["default"], ge=_LIMITS["min"], le=_LIMITS["max"]),
    offset: int = Query(0, ge=0),
    current_user: UserSchema = Depends(get_current_active_user),
    order_service: OrderService = Depends(get_order_service),
) -> Any:
    """구매(buyer) 또는 판매(seller) 내역"""
    result = order_service.list_orders(current_user.id, role=role, limit=limit, offset=offset)
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta=PaginationMeta.build(limit, offset, result.total_count).model_dump(),
    )


@router.get("/{order_id}", response_model=BaseResponse)
def get_order(
    order_id: int,
    current_user: UserSchema = Depends(get_current_active_user),
    order_service: OrderService = Depends(get_order_service),
) -> Any:
    order = order_service.get_order(order_id, current_user)
    return BaseResponse(success=True, data={"order": order.model_dump(mode="json")})
