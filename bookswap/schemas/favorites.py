"""
Favorites Schemas

Pydantic models for favorite postings API responses and requests.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional


class FavoritePostingInfo(BaseModel):
    """
    Favorite with posting summary.
    Used in list responses.
    """
    posting_id: int = Field(..., description="Saved posting")
    title: str = Field(..., description="Posting title")
    price: int = Field(..., description="Current posting price")
    status: str = Field(..., description="Current posting status")
    image_url: Optional[str] = Field(None, description="Cover image")
    added_at: Optional[datetime] = Field(None, description="When user saved the posting")

    class Config:
        from_attributes = True


class AddFavoriteRequest(BaseModel):
    """Request body for adding a favorite"""
    posting_id: int = Field(..., alias="postingId", description="Posting to save")

    class Config:
        populate_by_name = True


class UserFavoritesResponse(BaseModel):
    """Response containing user's list of favorites"""
    user_id: int
    favorites: List[FavoritePostingInfo]
    total_count: int


class FavoriteCheckResponse(BaseModel):
    """Response for checking if a posting is favorited"""
    posting_id: int
    is_favorited: bool


class FavoriteSchema(BaseModel):
    """
    Basic favorite schema matching database model.
    Used for repository layer conversions.
    """
    user_id: int
    posting_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
