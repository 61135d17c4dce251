from dependency_injector import containers, providers

from bookswap.config import get_settings
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


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(get_settings)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies.

    Every factory takes the request's ``db`` session as a call argument, e.g.
    ``services.order_service(db=db, ledger_service__db=db)``.
    """

    config = providers.DependenciesContainer()

    auth_service = providers.Factory(AuthService, settings=config.config)
    user_service = providers.Factory(UserService, settings=config.config)
    ledger_service = providers.Factory(LedgerService, settings=config.config)
    order_service = providers.Factory(OrderService, ledger_service=ledger_service)
    posting_service = providers.Factory(PostingService, settings=config.config)
    catalog_service = providers.Factory(CatalogService)
    comment_service = providers.Factory(CommentService)
    favorites_service = providers.Factory(FavoritesService)
    message_service = providers.Factory(MessageService)
    report_service = providers.Factory(ReportService)
    review_service = providers.Factory(ReviewService)
    statistics_service = providers.Factory(StatisticsService, settings=config.config)


class Container(containers.DeclarativeContainer):
    """Application container."""

    config = providers.Container(ConfigModule)
    services = providers.Container(ServiceModule, config=config)
