from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CommentSchema(BaseModel):
    id: int
    posting_id: int
    author_id: int
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CommentCreate(BaseModel):
    posting_id: int = Field(..., alias="postingId")
    content: str = Field(..., max_length=2000)

    class Config:
        populate_by_name = True


class CommentUpdate(BaseModel):
    content: str = Field(..., max_length=2000)
