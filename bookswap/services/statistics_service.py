"""
관리자 통계 서비스

모든 값은 조회 시점에 집계합니다 (캐시 없음).
"""

from sqlalchemy.orm import Session

from bookswap.config import Settings
from bookswap.models.posting import PostingStatus
from bookswap.models.report import ReportStatus
from bookswap.repositories.order_repository import OrderRepository
from bookswap.repositories.posting_repository import PostingRepository
from bookswap.repositories.report_repository import ReportRepository
from bookswap.repositories.transaction_repository import TransactionRepository
from bookswap.repositories.user_repository import UserRepository
from bookswap.schemas.statistics import (
    GroupPostingStatistics,
    GroupStatistics,
    PlatformStatistics,
    StatisticsType,
    TransactionStatistics,
    TransactionTypeSummary,
)


class StatisticsService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.user_repo = UserRepository(db)
        self.posting_repo = PostingRepository(db)
        self.order_repo = OrderRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.report_repo = ReportRepository(db)

    def platform(self) -> PlatformStatistics:
        return PlatformStatistics(
            total_users=self.user_repo.count(),
            blocked_users=self.user_repo.count({"is_blocked": True}),
            total_postings=self.posting_repo.count_by_status(),
            listed_postings=self.posting_repo.count_by_status(PostingStatus.LISTED),
            sold_postings=self.posting_repo.count_by_status(PostingStatus.SOLD),
            total_orders=self.order_repo.count(),
            total_transactions=self.transaction_repo.count(),
            total_revenue=self.transaction_repo.total_revenue(),
            total_reports=self.report_repo.count(),
            pending_reports=self.report_repo.count({"status": ReportStatus.PENDING.value}),
        )

    def transactions(self) -> TransactionStatistics:
        summary = self.transaction_repo.summary_by_type()
        return TransactionStatistics(
            recent=self.transaction_repo.recent(self.settings.RECENT_TRANSACTIONS_LIMIT),
            by_type={
                trans_type: TransactionTypeSummary(count=count, total=total)
                for trans_type, (count, total) in summary.items()
            },
        )

    def categories(self) -> GroupStatistics:
        rows = self.posting_repo.group_statistics("category")
        return GroupStatistics(items=[GroupPostingStatistics(**row) for row in rows])

    def courses(self) -> GroupStatistics:
        rows = self.posting_repo.group_statistics(
            "course", limit=self.settings.COURSE_STATISTICS_LIMIT
        )
        return GroupStatistics(items=[GroupPostingStatistics(**row) for row in rows])

    def get(self, statistics_type: StatisticsType):
        handlers = {
            StatisticsType.PLATFORM: self.platform,
            StatisticsType.TRANSACTION: self.transactions,
            StatisticsType.CATEGORY: self.categories,
            StatisticsType.COURSE: self.courses,
        }
        return handlers[statistics_type]()
