from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

import bookswap.database.session as session_module
from bookswap.core.exceptions import TransactionAbortedError, ValidationError
from bookswap.database.session import get_db, unit_of_work
from bookswap.models import User


def test_get_db_closes_session_after_request():
    gen = get_db()
    db = next(gen)
    with patch.object(db, "close") as mock_close:
        with pytest.raises(StopIteration):
            next(gen)
    mock_close.assert_called_once()


class TestUnitOfWork:
    """원자적 트랜잭션 경계 테스트"""

    def test_commits_on_success(self, db, session_factory, make_user):
        user = make_user()

        with unit_of_work(db):
            db.query(User).filter(User.id == user.id).update({"username": "renamed"})

        other = session_factory()
        assert other.get(User, user.id).username == "renamed"

    def test_domain_error_rolls_back_and_propagates(self, db, session_factory, make_user):
        user = make_user()
        original = user.username

        with pytest.raises(ValidationError):
            with unit_of_work(db):
                db.query(User).filter(User.id == user.id).update({"username": "renamed"})
                raise ValidationError("bad input")

        other = session_factory()
        assert other.get(User, user.id).username == original

    def test_database_error_becomes_transaction_aborted(self, db):
        failure = OperationalError("UPDATE users", {}, Exception("database is locked"))

        with patch.object(session_module, "logger") as mock_logger:
            with pytest.raises(TransactionAbortedError) as exc_info:
                with unit_of_work(db):
                    raise failure

        assert exc_info.value.__cause__ is failure
        assert exc_info.value.details["reason"] == "OperationalError"
        assert mock_logger.error.called
