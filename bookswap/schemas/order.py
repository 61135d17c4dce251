from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from bookswap.models.order import OrderStatus


class OrderSchema(BaseModel):
    id: int
    buyer_id: int
    seller_id: int
    posting_id: int
    deal_price: int
    status: OrderStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PurchaseRequest(BaseModel):
    posting_id: int = Field(..., alias="postingId")

    class Config:
        populate_by_name = True


class OrderRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"


class OrderListResponse(BaseModel):
    orders: List[OrderSchema]
    total_count: int
