from concurrent.futures import ThreadPoolExecutor
from threading import Barrier
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from bookswap.config import settings
from bookswap.core.exceptions import (
    AuthorizationError,
    BusinessLogicError,
    InsufficientBalanceError,
    ListingUnavailableError,
    NotFoundError,
    TransactionAbortedError,
)
from bookswap.models import Order, PostingStatus, TransactionRecord, TransactionType
from bookswap.schemas.order import OrderRole
from bookswap.schemas.user import User as UserSchema
from bookswap.services.ledger_service import LedgerService
from bookswap.services.order_service import OrderService


def _order_service(session):
    return OrderService(session, LedgerService(session, settings))


@pytest.fixture
def order_service(db):
    return _order_service(db)


def _posting_status(db, posting):
    db.refresh(posting)
    return posting.status


class TestPurchase:
    """구매 워크플로 테스트"""

    def test_purchase_moves_money_and_marks_sold(self, db, order_service, make_user, make_posting):
        buyer = make_user(balance=1000)
        seller = make_user()
        posting = make_posting(seller, price=300)

        order = order_service.purchase(buyer.id, posting.id)

        assert order.deal_price == 300
        assert order.buyer_id == buyer.id
        assert order.seller_id == seller.id
        assert order_service.ledger.get_balance(buyer.id).balance == 700
        assert order_service.ledger.get_balance(seller.id).balance == 300
        assert _posting_status(db, posting) == PostingStatus.SOLD.value

        entries = (
            db.query(TransactionRecord)
            .filter(TransactionRecord.order_id == order.id)
            .order_by(TransactionRecord.id)
            .all()
        )
        assert [(e.user_id, e.amount, e.trans_type) for e in entries] == [
            (buyer.id, -300, TransactionType.PAYMENT.value),
            (seller.id, 300, TransactionType.INCOME.value),
        ]

    def test_purchase_keeps_ledger_integrity(self, order_service, make_user, make_posting):
        buyer = make_user(balance=1000)
        seller = make_user(balance=50)
        posting = make_posting(seller, price=300)

        order_service.purchase(buyer.id, posting.id)

        for user in (buyer, seller):
            assert order_service.ledger.verify_user_integrity(user.id).status == "OK"

    def test_insufficient_balance_changes_nothing(self, db, order_service, make_user, make_posting):
        buyer = make_user(balance=100)
        seller = make_user()
        posting = make_posting(seller, price=300)

        with pytest.raises(InsufficientBalanceError):
            order_service.purchase(buyer.id, posting.id)

        assert order_service.ledger.get_balance(buyer.id).balance == 100
        assert order_service.ledger.get_balance(seller.id).balance == 0
        assert _posting_status(db, posting) == PostingStatus.LISTED.value
        assert db.query(Order).count() == 0

    def test_exact_balance_is_enough(self, order_service, make_user, make_posting):
        buyer = make_user(balance=300)
        posting = make_posting(make_user(), price=300)

        order_service.purchase(buyer.id, posting.id)

        assert order_service.ledger.get_balance(buyer.id).balance == 0

    def test_cannot_buy_own_posting(self, order_service, make_user, make_posting):
        seller = make_user(balance=1000)
        posting = make_posting(seller, price=300)

        with pytest.raises(BusinessLogicError) as exc_info:
            order_service.purchase(seller.id, posting.id)

        assert exc_info.value.error_code == "ORDER_SELF_PURCHASE"
        assert order_service.ledger.get_balance(seller.id).balance == 1000

    def test_missing_posting(self, order_service, make_user):
        buyer = make_user(balance=1000)
        with pytest.raises(NotFoundError):
            order_service.purchase(buyer.id, 12345)

    @pytest.mark.parametrize(
        "status", [PostingStatus.SOLD, PostingStatus.REMOVED, PostingStatus.RESERVED]
    )
    def test_only_listed_postings_are_purchasable(self, order_service, make_user, make_posting, status):
        buyer = make_user(balance=1000)
        posting = make_posting(make_user(), price=300, status=status)

        with pytest.raises(ListingUnavailableError):
            order_service.purchase(buyer.id, posting.id)

        assert order_service.ledger.get_balance(buyer.id).balance == 1000

    def test_second_buyer_in_another_session_loses(self, session_factory, make_user, make_posting):
        first_buyer = make_user(balance=1000)
        second_buyer = make_user(balance=1000)
        seller = make_user()
        posting = make_posting(seller, price=300)

        first = _order_service(session_factory())
        second = _order_service(session_factory())
        # the second session has already seen the posting as listed
        assert second.posting_repo.get_by_id(posting.id).status == PostingStatus.LISTED

        first.purchase(first_buyer.id, posting.id)
        with pytest.raises(ListingUnavailableError):
            second.purchase(second_buyer.id, posting.id)

        assert second.ledger.get_balance(first_buyer.id).balance == 700
        assert second.ledger.get_balance(second_buyer.id).balance == 1000
        assert second.ledger.get_balance(seller.id).balance == 300

    def test_concurrent_buyers_exactly_one_wins(self, session_factory, make_user, make_posting):
        buyers = [make_user(balance=1000) for _ in range(4)]
        seller = make_user()
        posting = make_posting(seller, price=300)
        barrier = Barrier(len(buyers))

        def attempt(buyer_id):
            service = _order_service(session_factory())
            barrier.wait()
            try:
                return service.purchase(buyer_id, posting.id)
            except (ListingUnavailableError, TransactionAbortedError) as e:
                return e

        with ThreadPoolExecutor(max_workers=len(buyers)) as pool:
            results = list(pool.map(attempt, [b.id for b in buyers]))

        orders = [r for r in results if not isinstance(r, Exception)]
        assert len(orders) == 1

        check = _order_service(session_factory())
        assert check.ledger.get_balance(seller.id).balance == 300
        balances = sorted(check.ledger.get_balance(b.id).balance for b in buyers)
        assert balances == [700, 1000, 1000, 1000]
        assert check.order_repo.count() == 1
        for user in buyers + [seller]:
            assert check.ledger.verify_user_integrity(user.id).status == "OK"

    def test_lost_compare_and_swap_aborts(self, db, order_service, make_user, make_posting):
        buyer = make_user(balance=1000)
        seller = make_user()
        posting = make_posting(seller, price=300)

        # another writer moved the posting between the read and the swap
        with patch.object(order_service.posting_repo, "compare_and_swap_status", return_value=False):
            with pytest.raises(ListingUnavailableError):
                order_service.purchase(buyer.id, posting.id)

        assert order_service.ledger.get_balance(buyer.id).balance == 1000
        assert order_service.ledger.get_balance(seller.id).balance == 0
        assert db.query(Order).count() == 0

    def test_database_failure_rolls_back_everything(self, db, order_service, make_user, make_posting):
        buyer = make_user(balance=1000)
        seller = make_user()
        posting = make_posting(seller, price=300)

        with patch.object(
            order_service.ledger,
            "credit",
            side_effect=OperationalError("INSERT", {}, Exception("disk I/O error")),
        ):
            with pytest.raises(TransactionAbortedError) as exc_info:
                order_service.purchase(buyer.id, posting.id)

        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert order_service.ledger.get_balance(buyer.id).balance == 1000
        assert order_service.ledger.get_balance(seller.id).balance == 0
        assert _posting_status(db, posting) == PostingStatus.LISTED.value
        assert db.query(Order).count() == 0
        assert order_service.ledger.verify_user_integrity(buyer.id).status == "OK"

    def test_later_price_edit_does_not_touch_order(self, db, order_service, make_user, make_posting):
        buyer = make_user(balance=1000)
        posting = make_posting(make_user(), price=300)
        order = order_service.purchase(buyer.id, posting.id)

        posting.price = 900
        db.commit()

        assert order_service.get_order(order.id, UserSchema.model_validate(buyer)).deal_price == 300


class TestOrderQueries:
    """주문 조회 테스트"""

    def test_list_by_role(self, order_service, make_user, make_posting):
        buyer = make_user(balance=1000)
        seller = make_user()
        order_service.purchase(buyer.id, make_posting(seller, price=100).id)
        order_service.purchase(buyer.id, make_posting(seller, price=200).id)

        bought = order_service.list_orders(buyer.id, role=OrderRole.BUYER)
        sold = order_service.list_orders(seller.id, role=OrderRole.SELLER)

        assert bought.total_count == 2
        assert sold.total_count == 2
        assert order_service.list_orders(seller.id, role=OrderRole.BUYER).total_count == 0

    def test_get_order_visibility(self, order_service, make_user, make_posting):
        buyer = make_user(balance=1000)
        seller = make_user()
        outsider = make_user()
        admin = make_user(is_admin=True)
        order = order_service.purchase(buyer.id, make_posting(seller).id)

        for viewer in (buyer, seller, admin):
            assert order_service.get_order(order.id, UserSchema.model_validate(viewer)).id == order.id
        with pytest.raises(AuthorizationError):
            order_service.get_order(order.id, UserSchema.model_validate(outsider))
