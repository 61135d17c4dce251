from typing import Any, Optional
from fastapi import APIRouter, Depends, Query

from bookswap.core.auth_middleware import get_current_active_user
from bookswap.deps import get_ledger_service
from bookswap.models.transaction_record import TransactionType
from bookswap.schemas.auth import BaseResponse
from bookswap.schemas.pagination import PaginationLimits, PaginationMeta
from bookswap.schemas.user import User as UserSchema
from bookswap.services.ledger_service import LedgerService

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=BaseResponse)
def list_my_transactions(
    trans_type: Optional[TransactionType] = Query(None, alias="type"),
    limit: int = Query(
        PaginationLimits.TRANSACTIONS["default"],
        ge=PaginationLimits.TRANSACTIONS["min"],
        le=PaginationLimits.TRANSACTIONS["max"],
    ),
    offset: int = Query(0, ge=0),
    current_user: UserSchema = Depends(get_current_active_user),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> Any:
    """내 거래 내역 (최신순)"""
    result = ledger_service.list_transactions(
        current_user.id, trans_type=trans_type, limit=limit, offset=offset
    )
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta=PaginationMeta.build(limit, offset, result.total_count).model_dump(),
    )


@router.get("/integrity", response_model=BaseResponse)
def verify_my_ledger(
    current_user: UserSchema = Depends(get_current_active_user),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> Any:
    """잔액과 원장 합계 정합성 확인"""
    result = ledger_service.verify_user_integrity(current_user.id)
    return BaseResponse(success=True, data=result.model_dump())


@router.get("/{record_id}", response_model=BaseResponse)
def get_my_transaction(
    record_id: int,
    current_user: UserSchema = Depends(get_current_active_user),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> Any:
    record = ledger_service.get_transaction(record_id, current_user.id)
    return BaseResponse(success=True, data=record.model_dump(mode="json"))
