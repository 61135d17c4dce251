import pytest
from sqlalchemy import func

from bookswap.core.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from bookswap.database.session import unit_of_work
from bookswap.models import TransactionRecord, TransactionType


class TestTopUp:
    """지갑 충전 테스트"""

    def test_top_up_updates_balance_and_ledger(self, ledger, make_user):
        user = make_user()

        result = ledger.top_up(user.id, 5000)

        assert result.balance == 5000
        assert ledger.get_balance(user.id).balance == 5000
        history = ledger.list_transactions(user.id)
        assert history.total_count == 1
        assert history.transactions[0].trans_type == TransactionType.TOP_UP
        assert history.transactions[0].amount == 5000
        assert history.transactions[0].balance_after == 5000

    @pytest.mark.parametrize("amount", [0, -10, 100001])
    def test_top_up_rejects_out_of_range(self, ledger, make_user, amount):
        user = make_user()

        with pytest.raises(ValidationError):
            ledger.top_up(user.id, amount)

        assert ledger.get_balance(user.id).balance == 0
        assert ledger.list_transactions(user.id).total_count == 0

    def test_top_up_accepts_upper_bound(self, ledger, make_user):
        user = make_user()
        assert ledger.top_up(user.id, 100000).balance == 100000

    def test_top_up_unknown_user(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.top_up(9999, 100)


class TestDebitCredit:
    """원장 참여 연산 테스트"""

    def test_debit_records_negative_amount(self, db, ledger, make_user):
        user = make_user(balance=1000)

        with unit_of_work(db):
            record = ledger.debit(user.id, 300)

        assert record.amount == -300
        assert record.balance_after == 700
        assert ledger.get_balance(user.id).balance == 700

    def test_debit_never_goes_negative(self, db, ledger, make_user):
        user = make_user(balance=100)

        with pytest.raises(InsufficientBalanceError):
            with unit_of_work(db):
                ledger.debit(user.id, 101)

        assert ledger.get_balance(user.id).balance == 100
        assert ledger.list_transactions(user.id).total_count == 1

    def test_credit_refuses_payment_type(self, db, ledger, make_user):
        user = make_user()
        with pytest.raises(ValidationError):
            ledger.credit(user.id, 10, TransactionType.PAYMENT)

    def test_debit_refuses_non_payment_type(self, db, ledger, make_user):
        user = make_user(balance=50)
        with pytest.raises(ValidationError):
            ledger.debit(user.id, 10, TransactionType.REFUND)

    def test_failed_block_rolls_back_every_entry(self, db, ledger, make_user):
        user = make_user(balance=500)

        with pytest.raises(RuntimeError):
            with unit_of_work(db):
                ledger.credit(user.id, 200, TransactionType.REFUND)
                raise RuntimeError("boom")

        assert ledger.get_balance(user.id).balance == 500
        count = db.query(func.count(TransactionRecord.id)).scalar()
        assert count == 1


class TestIntegrity:
    """잔액 = 원장 합계 불변식 테스트"""

    def test_integrity_ok_after_mixed_entries(self, db, ledger, make_user):
        user = make_user(balance=1000)
        ledger.top_up(user.id, 250)
        with unit_of_work(db):
            ledger.debit(user.id, 400)

        check = ledger.verify_user_integrity(user.id)

        assert check.status == "OK"
        assert check.recorded_balance == 850
        assert check.calculated_balance == 850
        assert check.latest_balance_after == 850
        assert check.entry_count == 3

    def test_integrity_detects_mismatch(self, db, ledger, make_user):
        user = make_user(balance=300)
        user.balance = 999
        db.commit()

        check = ledger.verify_user_integrity(user.id)

        assert check.status == "MISMATCH"
        assert check.recorded_balance == 999
        assert check.calculated_balance == 300

    def test_get_transaction_only_for_owner(self, ledger, make_user):
        owner = make_user()
        other = make_user()
        record_id = ledger.top_up(owner.id, 10).transaction_id

        assert ledger.get_transaction(record_id, owner.id).amount == 10
        with pytest.raises(NotFoundError):
            ledger.get_transaction(record_id, other.id)
