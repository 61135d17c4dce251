"""
Posting Schemas

Pydantic models for posting (listing) API requests and responses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from bookswap.models.posting import PostingStatus
from bookswap.schemas.catalog import CategorySchema, CourseSchema


class PostingSchema(BaseModel):
    """Posting row as stored. Used for repository layer conversions."""
    id: int
    seller_id: int
    title: str
    description: Optional[str] = None
    price: int
    status: PostingStatus
    category_id: Optional[int] = None
    course_id: Optional[int] = None
    image_url: Optional[str] = None
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PostingImageSchema(BaseModel):
    id: int
    posting_id: int
    image_url: str
    display_order: int = 0

    class Config:
        from_attributes = True


class SellerSummary(BaseModel):
    id: int
    username: str

    class Config:
        from_attributes = True


class PostingDetail(PostingSchema):
    """Posting with its seller, catalog entries and images"""
    seller: Optional[SellerSummary] = None
    category: Optional[CategorySchema] = None
    course: Optional[CourseSchema] = None
    images: List[PostingImageSchema] = Field(default_factory=list)
    favorite_count: int = 0
    comment_count: int = 0


class PostingCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: int = Field(..., gt=0, description="Price in the smallest currency unit")
    category_id: Optional[int] = Field(None, alias="categoryId")
    course_id: Optional[int] = Field(None, alias="courseId")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    images: List[str] = Field(default_factory=list, description="Extra image URLs")

    class Config:
        populate_by_name = True


class PostingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[int] = Field(None, gt=0)
    category_id: Optional[int] = Field(None, alias="categoryId")
    course_id: Optional[int] = Field(None, alias="courseId")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    status: Optional[PostingStatus] = Field(
        None, description="Owners may only toggle listed and reserved"
    )

    class Config:
        populate_by_name = True


class PostingSearchResult(BaseModel):
    postings: List[PostingSchema]
    total_count: int


class PopularPosting(BaseModel):
    id: int
    title: str
    price: int
    image_url: Optional[str] = None
    seller_id: int
    favorite_count: int
    comment_count: int


class PostingImageCreate(BaseModel):
    image_url: str = Field(..., min_length=1, alias="imageUrl")
    display_order: int = Field(0, ge=0, alias="displayOrder")

    class Config:
        populate_by_name = True
