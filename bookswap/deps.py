"""
Per-request service builders.

Services are created from the application container for every request and
bound to that request's database session; nothing is shared across requests.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from bookswap.database.session import get_db

# Services
from bookswap.services.auth_service import AuthService
from bookswap.services.catalog_service import CatalogService
from bookswap.services.comment_service import CommentService
from bookswap.services.favorites_service import FavoritesService
from bookswap.services.ledger_service import LedgerService
from bookswap.services.message_service import MessageService
from bookswap.services.order_service import OrderService
from bookswap.services.posting_service import PostingService
from bookswap.services.report_service import ReportService
from bookswap.services.review_service import ReviewService
from bookswap.services.statistics_service import StatisticsService
from bookswap.services.user_service import UserService


def _services(request: Request):
    return request.app.container.services


def get_auth_service(request: Request, db: Session = Depends(get_db)) -> AuthService:
    return _services(request).auth_service(db=db)


def get_user_service(request: Request, db: Session = Depends(get_db)) -> UserService:
    return _services(request).user_service(db=db)


def get_ledger_service(request: Request, db: Session = Depends(get_db)) -> LedgerService:
    return _services(request).ledger_service(db=db)


def get_order_service(request: Request, db: Session = Depends(get_db)) -> OrderService:
    # the ledger shares the order's session so both commit in one unit of work
    return _services(request).order_service(db=db, ledger_service__db=db)


def get_posting_service(request: Request, db: Session = Depends(get_db)) -> PostingService:
    return _services(request).posting_service(db=db)


def get_catalog_service(request: Request, db: Session = Depends(get_db)) -> CatalogService:
    return _services(request).catalog_service(db=db)


def get_comment_service(request: Request, db: Session = Depends(get_db)) -> CommentService:
    return _services(request).comment_service(db=db)


def get_favorites_service(request: Request, db: Session = Depends(get_db)) -> FavoritesService:
    return _services(request).favorites_service(db=db)


def get_message_service(request: Request, db: Session = Depends(get_db)) -> MessageService:
    return _services(request).message_service(db=db)


def get_report_service(request: Request, db: Session = Depends(get_db)) -> ReportService:
    return _services(request).report_service(db=db)


def get_review_service(request: Request, db: Session = Depends(get_db)) -> ReviewService:
    return _services(request).review_service(db=db)


def get_statistics_service(request: Request, db: Session = Depends(get_db)) -> StatisticsService:
    return _services(request).statistics_service(db=db)
