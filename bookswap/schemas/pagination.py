from pydantic import BaseModel, Field
from typing import Optional


class PaginationParams(BaseModel):
    """기본 페이지네이션 파라미터"""
    limit: Optional[int] = Field(None, ge=1, description="페이지당 항목 수")
    offset: Optional[int] = Field(0, ge=0, description="시작 오프셋")


class PaginationMeta(BaseModel):
    """페이지네이션 메타 정보"""
    limit: int
    offset: int
    total_count: Optional[int] = None
    has_next: Optional[bool] = None

    @classmethod
    def build(cls, limit: int, offset: int, total_count: int) -> "PaginationMeta":
        return cls(
            limit=limit,
            offset=offset,
            total_count=total_count,
            has_next=offset + limit < total_count,
        )


# 엔드포인트별 페이지네이션 제한
class PaginationLimits:
    POSTINGS = {"min": 1, "max": 100, "default": 20}
    TRANSACTIONS = {"min": 1, "max": 100, "default": 50}
    ORDERS = {"min": 1, "max": 100, "default": 20}
    REPORTS = {"min": 1, "max": 100, "default": 20}
    MESSAGES = {"min": 1, "max": 100, "default": 50}
    USER_LIST = {"min": 1, "max": 100, "default": 20}
