from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional, List

from bookswap.schemas.posting import PostingSchema
from bookswap.schemas.report import ReportSchema


class User(BaseModel):
    id: int
    email: EmailStr
    username: str
    balance: int = 0
    is_admin: bool = False
    is_blocked: bool = False
    violation_count: int = 0
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserCredentials(User):
    """Login-only view that carries the password hash; never returned over HTTP"""
    password_hash: str


class UserProfile(BaseModel):
    id: int
    email: EmailStr
    username: str
    balance: int
    is_admin: bool
    violation_count: int
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicProfile(BaseModel):
    """Profile visible to other users"""
    id: int
    username: str
    joined_at: Optional[datetime] = None
    average_rating: float = 0.0
    review_count: int = 0


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=2, max_length=50)

    @field_validator("username")
    @classmethod
    def username_must_not_be_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.strip() == "":
            raise ValueError("Username cannot be empty")
        return v.strip() if v is not None else v


class UserStatistics(BaseModel):
    total_postings: int = 0
    sold_postings: int = 0
    total_purchases: int = 0
    total_spent: int = 0
    total_earned: int = 0
    average_rating: float = 0.0
    review_count: int = 0
    favorites_count: int = 0


class UserListItem(BaseModel):
    """사용자 목록용 간소한 정보"""
    id: int
    email: EmailStr
    username: str
    is_admin: bool
    is_blocked: bool
    violation_count: int
    balance: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserListResult(BaseModel):
    """사용자 목록 결과"""
    users: List[UserListItem]
    total_count: int


class BlockUserRequest(BaseModel):
    is_blocked: bool = Field(..., alias="isBlocked")

    class Config:
        populate_by_name = True


class AdminUserDetail(BaseModel):
    """관리자용 사용자 상세 - 프로필, 통계, 최근 게시물, 관련 신고"""
    profile: UserListItem
    statistics: UserStatistics
    recent_postings: List[PostingSchema]
    reports: List[ReportSchema]
