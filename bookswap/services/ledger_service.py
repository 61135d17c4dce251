"""
지갑 원장 서비스

사용자 잔액을 변경하는 유일한 진입점입니다.

- credit/debit 은 commit 하지 않습니다. 호출자(주문 워크플로 등)의 unit of work
  안에서 잔액 변경, 원장 기록, 그 밖의 상태 변경이 함께 commit 되거나 함께 롤백됩니다.
- debit 은 조건부 UPDATE(balance >= amount)로 수행되어 잔액이 음수가 될 수 없습니다.
- 불변식: users.balance == 해당 사용자의 transaction_records.amount 합계
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from bookswap.config import Settings
from bookswap.core.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from bookswap.database.session import unit_of_work
from bookswap.models.transaction_record import TransactionType
from bookswap.repositories.transaction_repository import TransactionRepository
from bookswap.repositories.user_repository import UserRepository
from bookswap.schemas.ledger import (
    BalanceResponse,
    IntegrityCheckResponse,
    TopUpResponse,
    TransactionListResponse,
    TransactionRecordSchema,
)
from bookswap.schemas.user import User as UserSchema

logger = logging.getLogger(__name__)


class LedgerService:
    """지갑 잔액과 거래 원장을 관리하는 서비스"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.user_repo = UserRepository(db)
        self.transaction_repo = TransactionRepository(db)

    @staticmethod
    def _require_positive(amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError(
                "Amount must be a positive integer", details={"amount": amount}
            )

    # ------------------------------------------------------------------
    # 트랜잭션 참여 연산 (commit 하지 않음)
    # ------------------------------------------------------------------

    def lock_accounts(self, user_ids: Iterable[int]) -> List[UserSchema]:
        """사용자 행을 id 오름차순으로 잠금"""
        return self.user_repo.lock_users(user_ids)

    def credit(
        self,
        user_id: int,
        amount: int,
        trans_type: TransactionType,
        order_id: Optional[int] = None,
    ) -> TransactionRecordSchema:
        """잔액 증가 + 원장 기록"""
        self._require_positive(amount)
        if trans_type == TransactionType.PAYMENT:
            raise ValidationError("Payment entries can only be debits")

        new_balance = self.user_repo.apply_balance_delta(user_id, amount)
        if new_balance is None:
            raise NotFoundError(f"User not found: {user_id}")

        return self.transaction_repo.append(
            user_id=user_id,
            amount=amount,
            trans_type=trans_type,
            balance_after=new_balance,
            order_id=order_id,
        )

    def debit(
        self,
        user_id: int,
        amount: int,
        trans_type: TransactionType = TransactionType.PAYMENT,
        order_id: Optional[int] = None,
    ) -> TransactionRecordSchema:
        """잔액 차감 + 원장 기록 (음수 금액으로 기록)"""
        self._require_positive(amount)
        if trans_type != TransactionType.PAYMENT:
            raise ValidationError("Only payment entries can be debits")

        new_balance = self.user_repo.apply_balance_delta(user_id, -amount)
        if new_balance is None:
            current = self.user_repo.get_balance(user_id)
            if current is None:
                raise NotFoundError(f"User not found: {user_id}")
            raise InsufficientBalanceError(
                details={"balance": current, "required": amount}
            )

        return self.transaction_repo.append(
            user_id=user_id,
            amount=-amount,
            trans_type=trans_type,
            balance_after=new_balance,
            order_id=order_id,
        )

    # ------------------------------------------------------------------
    # 독립 연산
    # ------------------------------------------------------------------

    def top_up(self, user_id: int, amount: int) -> TopUpResponse:
        """지갑 충전 (0 < amount <= TOP_UP_MAX_AMOUNT)"""
        max_amount = self.settings.TOP_UP_MAX_AMOUNT
        if isinstance(amount, bool) or not isinstance(amount, int) or not 0 < amount <= max_amount:
            raise ValidationError(
                f"Top-up amount must be between 1 and {max_amount}",
                details={"amount": amount, "max": max_amount},
            )

        with unit_of_work(self.db):
            record = self.credit(user_id, amount, TransactionType.TOP_UP)

        logger.info(f"User {user_id} topped up {amount}, balance {record.balance_after}")
        return TopUpResponse(
            user_id=user_id,
            amount=amount,
            balance=record.balance_after,
            transaction_id=record.id,
        )

    def get_balance(self, user_id: int) -> BalanceResponse:
        balance = self.user_repo.get_balance(user_id)
        if balance is None:
            raise NotFoundError(f"User not found: {user_id}")
        return BalanceResponse(user_id=user_id, balance=balance)

    def list_transactions(
        self,
        user_id: int,
        trans_type: Optional[TransactionType] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> TransactionListResponse:
        records, total_count = self.transaction_repo.list_for_user(
            user_id, trans_type=trans_type, limit=limit, offset=offset
        )
        return TransactionListResponse(
            balance=self.get_balance(user_id).balance,
            transactions=records,
            total_count=total_count,
            has_next=offset + limit < total_count,
        )

    def get_transaction(self, record_id: int, user_id: int) -> TransactionRecordSchema:
        record = self.transaction_repo.get_for_user(record_id, user_id)
        if not record:
            raise NotFoundError("Transaction not found", details={"id": record_id})
        return record

    def verify_user_integrity(self, user_id: int) -> IntegrityCheckResponse:
        """users.balance 와 원장 합계를 비교"""
        recorded_balance = self.user_repo.get_balance(user_id)
        if recorded_balance is None:
            raise NotFoundError(f"User not found: {user_id}")

        calculated_balance, entry_count = self.transaction_repo.sum_for_user(user_id)
        latest = self.transaction_repo.latest_for_user(user_id)

        status = "OK" if calculated_balance == recorded_balance else "MISMATCH"
        if status == "MISMATCH":
            logger.error(
                f"Ledger mismatch for user {user_id}: balance={recorded_balance} sum={calculated_balance}"
            )

        return IntegrityCheckResponse(
            status=status,
            user_id=user_id,
            recorded_balance=recorded_balance,
            calculated_balance=calculated_balance,
            latest_balance_after=latest.balance_after if latest else None,
            entry_count=entry_count,
            verified_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
        )
