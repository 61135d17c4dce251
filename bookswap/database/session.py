import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookswap.core.exceptions import TransactionAbortedError
from bookswap.database.connection import SessionLocal

logger = logging.getLogger(__name__)


def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception:
        if db.in_transaction():
            db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Run a block as one all-or-nothing transaction on ``db``.

    Everything flushed inside the block is committed together when it exits
    cleanly. Any exception rolls the whole block back; database-level failures
    are re-raised as ``TransactionAbortedError`` so callers can retry the
    operation from scratch.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Unit of work aborted: {e}")
        raise TransactionAbortedError(details={"reason": type(e).__name__}) from e
    except Exception:
        db.rollback()
        raise
