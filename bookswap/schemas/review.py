from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ReviewSchema(BaseModel):
    id: int
    order_id: int
    reviewer_id: int
    target_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewCreate(BaseModel):
    order_id: int = Field(..., alias="orderId")
    rating: int
    comment: Optional[str] = Field(None, max_length=1000)

    class Config:
        populate_by_name = True


class ReviewUpdate(BaseModel):
    rating: Optional[int] = None
    comment: Optional[str] = Field(None, max_length=1000)


class AverageRating(BaseModel):
    user_id: int
    average: float = Field(..., description="Mean rating rounded to one decimal")
    count: int


class ReviewListResponse(BaseModel):
    reviews: List[ReviewSchema]
    total_count: int
