from typing import Optional
from sqlalchemy.orm import Session

from bookswap.repositories.favorites_repository import FavoritesRepository
from bookswap.repositories.order_repository import OrderRepository
from bookswap.repositories.posting_repository import PostingRepository
from bookswap.repositories.report_repository import ReportRepository
from bookswap.repositories.review_repository import ReviewRepository
from bookswap.repositories.transaction_repository import TransactionRepository
from bookswap.repositories.user_repository import UserRepository
from bookswap.core.exceptions import BusinessLogicError, ConflictError, NotFoundError
from bookswap.config import Settings
from bookswap.models.posting import PostingStatus
from bookswap.models.transaction_record import TransactionType
from bookswap.schemas.user import (
    AdminUserDetail,
    PublicProfile,
    User as UserSchema,
    UserListItem,
    UserListResult,
    UserProfile,
    UserStatistics,
    UserUpdate,
)
import logging

logger = logging.getLogger(__name__)


class UserService:
    """사용자 관련 비즈니스 로직을 담당하는 서비스"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.user_repo = UserRepository(db)
        self.posting_repo = PostingRepository(db)
        self.order_repo = OrderRepository(db)
        self.review_repo = ReviewRepository(db)
        self.favorites_repo = FavoritesRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.report_repo = ReportRepository(db)

    def get_user_by_id(self, user_id: int) -> UserSchema:
        """사용자 ID로 조회"""
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    def get_profile(self, user_id: int) -> UserProfile:
        """사용자 프로필 조회"""
        profile = self.user_repo.get_user_profile(user_id)
        if not profile:
            raise NotFoundError(f"User profile not found: {user_id}")
        return profile

    def update_profile(self, user_id: int, update_data: UserUpdate) -> UserProfile:
        """사용자 프로필 업데이트"""
        self.get_user_by_id(user_id)

        if update_data.username is not None:
            # 닉네임 중복 확인 (본인 제외)
            if self.user_repo.username_taken(update_data.username, exclude_user_id=user_id):
                raise ConflictError("Username already taken", details={"field": "username"})
            self.user_repo.update(user_id, username=update_data.username)

        return self.get_profile(user_id)

    def get_public_profile(self, user_id: int) -> PublicProfile:
        """다른 사용자에게 보이는 프로필 (평점 포함)"""
        user = self.get_user_by_id(user_id)
        average, count = self.review_repo.rating_summary(user_id)
        return PublicProfile(
            id=user.id,
            username=user.username,
            joined_at=user.created_at,
            average_rating=round(average, 1) if average is not None else 0.0,
            review_count=count,
        )

    def get_statistics(self, user_id: int) -> UserStatistics:
        self.get_user_by_id(user_id)
        purchases, spent = self.order_repo.purchase_totals(user_id)
        totals_by_type = self.transaction_repo.sum_by_type_for_user(user_id)
        average, review_count = self.review_repo.rating_summary(user_id)

        return UserStatistics(
            total_postings=self.posting_repo.count_by_seller(user_id),
            sold_postings=self.posting_repo.count_by_seller(user_id, PostingStatus.SOLD),
            total_purchases=purchases,
            total_spent=spent,
            total_earned=totals_by_type.get(TransactionType.INCOME.value, 0),
            average_rating=round(average, 1) if average is not None else 0.0,
            review_count=review_count,
            favorites_count=self.favorites_repo.get_favorites_count(user_id),
        )

    # ------------------------------------------------------------------
    # 관리자 기능
    # ------------------------------------------------------------------

    def list_users(
        self,
        is_admin: Optional[bool] = None,
        is_blocked: Optional[bool] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> UserListResult:
        limit = min(limit, self.settings.MAX_PAGE_SIZE)
        users, total_count = self.user_repo.list_users(
            is_admin=is_admin,
            is_blocked=is_blocked,
            search=search.strip() if search else None,
            limit=limit,
            offset=offset,
        )
        return UserListResult(
            users=[UserListItem.model_validate(user.model_dump()) for user in users],
            total_count=total_count,
        )

    def get_user_detail(self, user_id: int) -> AdminUserDetail:
        user = self.get_user_by_id(user_id)
        recent_postings, _ = self.posting_repo.search(status=None, seller_id=user_id, limit=10)
        return AdminUserDetail(
            profile=UserListItem.model_validate(user.model_dump()),
            statistics=self.get_statistics(user_id),
            recent_postings=recent_postings,
            reports=self.report_repo.list_concerning_user(user_id),
        )

    def set_blocked(self, admin_id: int, user_id: int, blocked: bool) -> UserSchema:
        if admin_id == user_id:
            raise BusinessLogicError(
                error_code="USER_SELF_BLOCK",
                message="You cannot block yourself",
            )
        self.get_user_by_id(user_id)
        user = self.user_repo.set_blocked(user_id, blocked)
        logger.info(f"Admin {admin_id} set user {user_id} blocked={blocked}")
        return user
