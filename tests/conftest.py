import os
import sys
import tempfile
from pathlib import Path

import pytest

# 테스트는 임시 SQLite 파일 DB 사용 - bookswap import 전에 설정해야 함
_DB_PATH = os.path.join(tempfile.gettempdir(), f"bookswap_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

# Ensure project root is on path for `bookswap` imports
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from bookswap.config import settings  # noqa: E402
from bookswap.core.security import create_access_token, hash_password  # noqa: E402
from bookswap.database.connection import SessionLocal, engine  # noqa: E402
from bookswap.database.session import unit_of_work  # noqa: E402
from bookswap.models import (  # noqa: E402
    Base,
    Comment,
    Order,
    OrderStatus,
    Posting,
    PostingStatus,
    TransactionType,
    User,
)
from bookswap.services.ledger_service import LedgerService  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


def pytest_sessionfinish(session, exitstatus):
    engine.dispose()
    if os.path.exists(_DB_PATH):
        os.remove(_DB_PATH)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def session_factory():
    """같은 DB에 대한 독립 세션 (동시 요청 흉내)"""
    sessions = []

    def _make():
        session = SessionLocal()
        sessions.append(session)
        return session

    yield _make
    for session in sessions:
        session.close()


@pytest.fixture
def ledger(db):
    return LedgerService(db, settings)


@pytest.fixture
def make_user(db):
    """사용자 생성. balance 는 원장(top_up 기록)을 통해 채워 잔액 불변식을 유지한다."""
    counter = {"n": 0}

    def _make(username=None, balance=0, is_admin=False, is_blocked=False, password="password123"):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = User(
            email=f"{username}@example.com",
            username=username,
            password_hash=hash_password(password),
            balance=0,
            is_admin=is_admin,
            is_blocked=is_blocked,
        )
        db.add(user)
        db.commit()
        if balance:
            with unit_of_work(db):
                LedgerService(db, settings).credit(user.id, balance, TransactionType.TOP_UP)
            db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_posting(db):
    def _make(seller, price=300, status=PostingStatus.LISTED, title="Intro to Algorithms"):
        posting = Posting(
            seller_id=seller.id,
            title=title,
            price=price,
            status=status.value,
        )
        db.add(posting)
        db.commit()
        return posting

    return _make


@pytest.fixture
def make_comment(db):
    def _make(author, posting, content="Is this still available?"):
        comment = Comment(author_id=author.id, posting_id=posting.id, content=content)
        db.add(comment)
        db.commit()
        return comment

    return _make


@pytest.fixture
def make_order(db):
    """원장을 거치지 않는 주문 레코드 (리뷰/신고 테스트용)"""
    def _make(buyer, seller, posting, status=OrderStatus.COMPLETED):
        order = Order(
            buyer_id=buyer.id,
            seller_id=seller.id,
            posting_id=posting.id,
            deal_price=posting.price,
            status=status.value,
        )
        db.add(order)
        db.commit()
        return order

    return _make


@pytest.fixture
def client():
    from bookswap.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(data={"sub": user.email, "user_id": user.id})
        return {"Authorization": f"Bearer {token}"}

    return _headers
