from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from bookswap.models.order import Order, OrderStatus
from bookswap.repositories.base import BaseRepository
from bookswap.schemas.order import OrderRole, OrderSchema


class OrderRepository(BaseRepository[Order, OrderSchema]):
    def __init__(self, db: Session):
        super().__init__(Order, OrderSchema, db)

    def create_completed(
        self, buyer_id: int, seller_id: int, posting_id: int, deal_price: int
    ) -> OrderSchema:
        """완료 주문 생성 (commit 하지 않음 - 구매 트랜잭션에 합류)"""
        return self.create(
            commit=False,
            buyer_id=buyer_id,
            seller_id=seller_id,
            posting_id=posting_id,
            deal_price=deal_price,
            status=OrderStatus.COMPLETED.value,
        )

    def list_for_user(
        self, user_id: int, role: OrderRole = OrderRole.BUYER, limit: int = 20, offset: int = 0
    ) -> Tuple[List[OrderSchema], int]:
        self._ensure_clean_session()
        column = Order.buyer_id if role == OrderRole.BUYER else Order.seller_id
        query = (
            self.db.query(Order)
            .filter(column == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return self._paginate(query, limit, offset)

    def completed_for_posting(self, posting_id: int) -> Optional[OrderSchema]:
        instance = (
            self.db.query(Order)
            .filter(
                Order.posting_id == posting_id,
                Order.status == OrderStatus.COMPLETED.value,
            )
            .first()
        )
        return self._to_schema(instance)

    def purchase_totals(self, buyer_id: int) -> Tuple[int, int]:
        """(구매 건수, 총 지출)"""
        count, total = (
            self.db.query(func.count(Order.id), func.coalesce(func.sum(Order.deal_price), 0))
            .filter(
                Order.buyer_id == buyer_id,
                Order.status == OrderStatus.COMPLETED.value,
            )
            .one()
        )
        return int(count), int(total)
