"""
Order model

Immutable record of one completed purchase. ``deal_price`` is the posting
price read under the purchase lock; later price edits never touch it.
"""

from enum import Enum

from sqlalchemy import BigInteger, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from bookswap.models.base import BaseModel, BigIntPK


class OrderStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(BaseModel):
    __tablename__ = "orders"
    __table_args__ = (
        # 게시물당 완료된 주문은 하나만 허용 (동시 구매 최종 방어선)
        Index(
            "uq_orders_posting_completed",
            "posting_id",
            unique=True,
            postgresql_where=text("status = 'completed'"),
            sqlite_where=text("status = 'completed'"),
        ),
        Index("idx_orders_buyer", "buyer_id"),
        Index("idx_orders_seller", "seller_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    buyer_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    seller_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False
    )
    posting_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("postings.id"), nullable=False
    )
    deal_price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=OrderStatus.COMPLETED.value, nullable=False
    )
