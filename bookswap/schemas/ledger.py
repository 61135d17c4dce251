"""
지갑 원장 관련 Pydantic 스키마
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from bookswap.models.transaction_record import TransactionType


class TransactionRecordSchema(BaseModel):
    id: int
    user_id: int
    amount: int = Field(..., description="부호 있는 금액 (payment는 음수)")
    trans_type: TransactionType
    balance_after: int
    order_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TopUpRequest(BaseModel):
    amount: int = Field(..., description="충전 금액 (0 < amount <= 100000)")


class BalanceResponse(BaseModel):
    user_id: int
    balance: int


class TopUpResponse(BaseModel):
    user_id: int
    amount: int
    balance: int
    transaction_id: int


class TransactionListResponse(BaseModel):
    balance: int
    transactions: List[TransactionRecordSchema]
    total_count: int
    has_next: bool


class IntegrityCheckResponse(BaseModel):
    status: str = Field(..., description="OK 또는 MISMATCH")
    user_id: int
    recorded_balance: int = Field(..., description="users.balance 값")
    calculated_balance: int = Field(..., description="거래 금액 합계")
    latest_balance_after: Optional[int] = None
    entry_count: int
    verified_at: str
