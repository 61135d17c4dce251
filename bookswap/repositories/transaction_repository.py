"""
거래 원장 리포지토리

원장은 추가 전용입니다. 이 리포지토리에는 수정/삭제 메서드가 없으며,
append 는 commit 하지 않고 호출자의 트랜잭션에 합류합니다.
"""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from bookswap.models.transaction_record import TransactionRecord as TransactionRecordModel
from bookswap.models.transaction_record import TransactionType
from bookswap.repositories.base import BaseRepository
from bookswap.schemas.ledger import TransactionRecordSchema


class TransactionRepository(BaseRepository[TransactionRecordModel, TransactionRecordSchema]):
    def __init__(self, db: Session):
        super().__init__(TransactionRecordModel, TransactionRecordSchema, db)

    def append(
        self,
        user_id: int,
        amount: int,
        trans_type: TransactionType,
        balance_after: int,
        order_id: Optional[int] = None,
    ) -> TransactionRecordSchema:
        """원장 항목 추가 (commit 하지 않음)"""
        return self.create(
            commit=False,
            user_id=user_id,
            amount=amount,
            trans_type=trans_type.value,
            balance_after=balance_after,
            order_id=order_id,
        )

    def list_for_user(
        self,
        user_id: int,
        trans_type: Optional[TransactionType] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[TransactionRecordSchema], int]:
        """사용자 거래 내역 (최신순)"""
        self._ensure_clean_session()
        query = self.db.query(self.model_class).filter(
            self.model_class.user_id == user_id
        )
        if trans_type is not None:
            query = query.filter(self.model_class.trans_type == trans_type.value)
        query = query.order_by(desc(self.model_class.id))
        return self._paginate(query, limit, offset)

    def get_for_user(self, record_id: int, user_id: int) -> Optional[TransactionRecordSchema]:
        self._ensure_clean_session()
        instance = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.id == record_id,
                self.model_class.user_id == user_id,
            )
            .first()
        )
        return self._to_schema(instance)

    def sum_for_user(self, user_id: int) -> Tuple[int, int]:
        """(금액 합계, 항목 수)"""
        total, entry_count = (
            self.db.query(
                func.coalesce(func.sum(self.model_class.amount), 0),
                func.count(self.model_class.id),
            )
            .filter(self.model_class.user_id == user_id)
            .one()
        )
        return int(total), int(entry_count)

    def latest_for_user(self, user_id: int) -> Optional[TransactionRecordSchema]:
        instance = (
            self.db.query(self.model_class)
            .filter(self.model_class.user_id == user_id)
            .order_by(desc(self.model_class.id))
            .first()
        )
        return self._to_schema(instance)

    def sum_by_type_for_user(self, user_id: int) -> Dict[str, int]:
        rows = (
            self.db.query(self.model_class.trans_type, func.sum(self.model_class.amount))
            .filter(self.model_class.user_id == user_id)
            .group_by(self.model_class.trans_type)
            .all()
        )
        return {trans_type: int(total or 0) for trans_type, total in rows}

    def recent(self, limit: int) -> List[TransactionRecordSchema]:
        instances = (
            self.db.query(self.model_class)
            .order_by(desc(self.model_class.id))
            .limit(limit)
            .all()
        )
        return self._to_schemas(instances)

    def total_revenue(self) -> int:
        """모든 payment 금액의 절대값 합계"""
        total = (
            self.db.query(func.coalesce(func.sum(self.model_class.amount), 0))
            .filter(self.model_class.trans_type == TransactionType.PAYMENT.value)
            .scalar()
        )
        return abs(int(total or 0))

    def summary_by_type(self) -> Dict[str, Tuple[int, int]]:
        """거래 유형별 (건수, 금액 합계) - 전체 사용자"""
        rows = (
            self.db.query(
                self.model_class.trans_type,
                func.count(self.model_class.id),
                func.coalesce(func.sum(self.model_class.amount), 0),
            )
            .group_by(self.model_class.trans_type)
            .all()
        )
        return {trans_type: (int(count), int(total)) for trans_type, count, total in rows}
