"""
지갑 원장(Ledger) 데이터 모델

사용자 잔액의 모든 변동을 기록하는 추가 전용(append-only) 테이블입니다.
users.balance 는 항상 해당 사용자의 amount 합계와 같아야 합니다.
"""

from enum import Enum

from sqlalchemy import BigInteger, Column, ForeignKey, Index, String

from bookswap.models.base import BaseModel, BigIntPK


class TransactionType(str, Enum):
    TOP_UP = "top_up"
    PAYMENT = "payment"
    INCOME = "income"
    REFUND = "refund"

    @property
    def sign(self) -> int:
        """잔액에 미치는 방향 (payment만 차감)"""
        return -1 if self is TransactionType.PAYMENT else 1


class TransactionRecord(BaseModel):
    """
    거래 원장 테이블

    원칙:
    1. 불변성: 한번 생성된 레코드는 수정/삭제되지 않음
    2. 완전성: 모든 잔액 변동이 기록됨
    3. 정합성: balance_after 로 거래 직후 잔액 추적
    """

    __tablename__ = "transaction_records"
    __table_args__ = (Index("idx_transaction_records_user", "user_id", "id"),)

    # 기본 키
    id = Column(BigIntPK, primary_key=True, autoincrement=True)

    # 사용자 ID
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False)

    # 부호 있는 금액 - 양수면 증가, 음수면 감소
    amount = Column(BigInteger, nullable=False)

    # 거래 유형 - top_up / payment / income / refund
    trans_type = Column(String(20), nullable=False)

    # 거래 후 잔액
    balance_after = Column(BigInteger, nullable=False)

    # 주문으로 인한 거래인 경우 참조
    order_id = Column(BigInteger, ForeignKey("orders.id"), nullable=True)
