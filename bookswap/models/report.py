"""
Report model

One row per abuse report. ``report_type`` selects which target columns are
filled; the check constraint rejects any other shape.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from bookswap.models.base import BaseModel, BigIntPK


class ReportType(str, Enum):
    POSTING = "posting"
    COMMENT = "comment"
    ORDER_VIOLATION = "order_violation"


class ReportStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Report(BaseModel):
    __tablename__ = "reports"
    __table_args__ = (
        CheckConstraint(
            "(report_type = 'posting' AND posting_id IS NOT NULL"
            " AND comment_id IS NULL AND order_id IS NULL AND target_user_id IS NULL)"
            " OR (report_type = 'comment' AND posting_id IS NOT NULL"
            " AND target_user_id IS NOT NULL AND order_id IS NULL)"
            " OR (report_type = 'order_violation' AND order_id IS NOT NULL"
            " AND target_user_id IS NOT NULL AND posting_id IS NULL AND comment_id IS NULL)",
            name="ck_reports_target_shape",
        ),
        Index("idx_reports_status", "status"),
        Index("idx_reports_reporter", "reporter_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    reporter_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    report_type: Mapped[str] = mapped_column(String(20), nullable=False)
    # comment reports also keep the comment's posting and author, which outlive the comment
    posting_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("postings.id"), nullable=True
    )
    comment_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("comments.id", ondelete="SET NULL"), nullable=True
    )
    order_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("orders.id"), nullable=True
    )
    target_user_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=True
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=ReportStatus.PENDING.value, nullable=False
    )
    reviewed_by: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=True
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
