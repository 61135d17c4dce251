"""
Report Schemas

A report target is a tagged union keyed on ``kind``; each variant carries
exactly the identifiers it needs, so an order-violation report without a
target user cannot be constructed.
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from bookswap.models.report import ReportStatus, ReportType


class PostingTarget(BaseModel):
    kind: Literal["posting"] = "posting"
    posting_id: int


class CommentTarget(BaseModel):
    kind: Literal["comment"] = "comment"
    comment_id: int


class OrderViolationTarget(BaseModel):
    kind: Literal["order_violation"] = "order_violation"
    order_id: int
    target_user_id: int


ReportTarget = Annotated[
    Union[PostingTarget, CommentTarget, OrderViolationTarget],
    Field(discriminator="kind"),
]


class ReportSchema(BaseModel):
    id: int
    reporter_id: int
    report_type: ReportType
    posting_id: Optional[int] = None
    comment_id: Optional[int] = None
    order_id: Optional[int] = None
    target_user_id: Optional[int] = None
    reason: str
    status: ReportStatus
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReportCreateRequest(BaseModel):
    """Wire form of a report submission"""
    report_type: ReportType = Field(..., alias="reportType")
    target_id: int = Field(..., alias="targetId")
    reason: str = Field(..., max_length=1000)
    target_user_id: Optional[int] = Field(None, alias="targetUserId")

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def order_violation_needs_target_user(self) -> "ReportCreateRequest":
        if self.report_type == ReportType.ORDER_VIOLATION and self.target_user_id is None:
            raise ValueError("targetUserId is required for order_violation reports")
        return self

    def to_target(self) -> Union[PostingTarget, CommentTarget, OrderViolationTarget]:
        if self.report_type == ReportType.POSTING:
            return PostingTarget(posting_id=self.target_id)
        if self.report_type == ReportType.COMMENT:
            return CommentTarget(comment_id=self.target_id)
        return OrderViolationTarget(
            order_id=self.target_id, target_user_id=self.target_user_id
        )


class ReportReviewRequest(BaseModel):
    status: Literal["approved", "rejected"]
    remove_posting: bool = Field(False, alias="removePosting")

    class Config:
        populate_by_name = True


class ReportListResponse(BaseModel):
    reports: List[ReportSchema]
    total_count: int
