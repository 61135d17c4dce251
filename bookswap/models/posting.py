"""
Posting models

A posting is one item offered for sale. Its ``status`` is the listing
lifecycle; ``version`` is bumped on every status change so concurrent
writers can detect that the row moved underneath them.
"""

from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from bookswap.models.base import BaseModel, BigIntPK


class PostingStatus(str, Enum):
    LISTED = "listed"
    RESERVED = "reserved"
    SOLD = "sold"
    REPORTED = "reported"
    REMOVED = "removed"

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return status in (cls.SOLD.value, cls.REMOVED.value)


class Posting(BaseModel):
    __tablename__ = "postings"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_postings_price_positive"),
        Index("idx_postings_status_created", "status", "created_at"),
        Index("idx_postings_seller", "seller_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    seller_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=PostingStatus.LISTED.value, nullable=False
    )
    category_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    course_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True
    )
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)


class PostingImage(BaseModel):
    __tablename__ = "posting_images"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    posting_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("postings.id", ondelete="CASCADE"), nullable=False
    )
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
