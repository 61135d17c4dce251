"""
Admin statistics schemas
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from bookswap.schemas.ledger import TransactionRecordSchema


class StatisticsType(str, Enum):
    PLATFORM = "platform"
    TRANSACTION = "transaction"
    CATEGORY = "category"
    COURSE = "course"


class PlatformStatistics(BaseModel):
    total_users: int
    blocked_users: int
    total_postings: int
    listed_postings: int
    sold_postings: int
    total_orders: int
    total_transactions: int
    total_revenue: int = Field(..., description="Sum of payment amounts (absolute)")
    total_reports: int
    pending_reports: int


class TransactionTypeSummary(BaseModel):
    count: int
    total: int


class TransactionStatistics(BaseModel):
    recent: List[TransactionRecordSchema]
    by_type: Dict[str, TransactionTypeSummary]


class GroupPostingStatistics(BaseModel):
    """Posting counts for one category or course"""
    id: int
    name: str
    code: Optional[str] = None
    total_postings: int
    listed_postings: int
    sold_postings: int
    average_price: float


class GroupStatistics(BaseModel):
    items: List[GroupPostingStatistics]
