import logging

from sqlalchemy.orm import Session

from bookswap.core.exceptions import (
    AuthorizationError,
    BusinessLogicError,
    InsufficientBalanceError,
    ListingUnavailableError,
    NotFoundError,
)
from bookswap.database.session import unit_of_work
from bookswap.models.posting import PostingStatus
from bookswap.models.transaction_record import TransactionType
from bookswap.repositories.order_repository import OrderRepository
from bookswap.repositories.posting_repository import PostingRepository
from bookswap.schemas.order import OrderListResponse, OrderRole, OrderSchema
from bookswap.schemas.user import User as UserSchema
from bookswap.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class OrderService:
    """구매 처리 서비스 (구매 한 건 = 트랜잭션 하나)"""

    def __init__(self, db: Session, ledger_service: LedgerService):
        self.db = db
        self.ledger = ledger_service
        self.order_repo = OrderRepository(db)
        self.posting_repo = PostingRepository(db)

    def purchase(self, buyer_id: int, posting_id: int) -> OrderSchema:
        """Buy a listed posting with the buyer's wallet balance.

        Raises:
            NotFoundError: posting does not exist
            ListingUnavailableError: posting is not listed, or was taken while
                this purchase was in flight
            BusinessLogicError: buyer owns the posting
            InsufficientBalanceError: buyer balance is below the price
            TransactionAbortedError: the database rejected the unit of work
        """
        with unit_of_work(self.db):
            posting = self.posting_repo.get_for_update(posting_id)
            if posting is None:
                raise NotFoundError("Posting not found", details={"posting_id": posting_id})
            if posting.status != PostingStatus.LISTED:
                raise ListingUnavailableError(
                    details={"posting_id": posting_id, "status": posting.status.value}
                )
            if posting.seller_id == buyer_id:
                raise BusinessLogicError(
                    error_code="ORDER_SELF_PURCHASE",
                    message="You cannot buy your own posting",
                    details={"posting_id": posting_id},
                )

            price = posting.price
            accounts = {
                account.id: account
                for account in self.ledger.lock_accounts([buyer_id, posting.seller_id])
            }
            buyer = accounts.get(buyer_id)
            if buyer is None:
                raise NotFoundError("Buyer not found", details={"user_id": buyer_id})
            if buyer.balance < price:
                raise InsufficientBalanceError(
                    details={"balance": buyer.balance, "required": price}
                )

            if not self.posting_repo.compare_and_swap_status(
                posting_id, expected=[PostingStatus.LISTED], new_status=PostingStatus.SOLD
            ):
                raise ListingUnavailableError(details={"posting_id": posting_id})

            order = self.order_repo.create_completed(
                buyer_id=buyer_id,
                seller_id=posting.seller_id,
                posting_id=posting_id,
                deal_price=price,
            )
            self.ledger.debit(buyer_id, price, TransactionType.PAYMENT, order_id=order.id)
            self.ledger.credit(posting.seller_id, price, TransactionType.INCOME, order_id=order.id)

        logger.info(
            f"Order {order.id} completed: buyer {buyer_id} bought posting {posting_id} "
            f"from seller {posting.seller_id} for {price}"
        )
        return order

    def list_orders(
        self,
        user_id: int,
        role: OrderRole = OrderRole.BUYER,
        limit: int = 20,
        offset: int = 0,
    ) -> OrderListResponse:
        orders, total_count = self.order_repo.list_for_user(
            user_id, role=role, limit=limit, offset=offset
        )
        return OrderListResponse(orders=orders, total_count=total_count)

    def get_order(self, order_id: int, requester: UserSchema) -> OrderSchema:
        """Visible to the buyer, the seller and admins"""
        order = self.order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found", details={"order_id": order_id})
        if requester.id not in (order.buyer_id, order.seller_id) and not requester.is_admin:
            raise AuthorizationError("You are not a party to this order")
        return order

