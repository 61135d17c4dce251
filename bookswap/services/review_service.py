import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookswap.core.exceptions import (
    AuthorizationError,
    BusinessLogicError,
    DuplicateReviewError,
    NotFoundError,
    TransactionAbortedError,
    ValidationError,
)
from bookswap.database.session import unit_of_work
from bookswap.models.order import OrderStatus
from bookswap.repositories.order_repository import OrderRepository
from bookswap.repositories.review_repository import ReviewRepository
from bookswap.schemas.review import AverageRating, ReviewListResponse, ReviewSchema

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _validate_rating(rating) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(
            f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}",
            details={"reason": "InvalidRating", "rating": rating},
        )


def _clean_comment(comment: Optional[str]) -> Optional[str]:
    if comment is None:
        return None
    return comment.strip() or None


class ReviewService:
    def __init__(self, db: Session):
        self.db = db
        self.review_repo = ReviewRepository(db)
        self.order_repo = OrderRepository(db)

    def submit(
        self, reviewer_id: int, order_id: int, rating: int, comment: Optional[str] = None
    ) -> ReviewSchema:
        """리뷰 작성 - 완료된 주문의 구매자만, 주문당 한 번"""
        _validate_rating(rating)

        order = self.order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found", details={"order_id": order_id})
        if order.buyer_id != reviewer_id:
            raise AuthorizationError(
                "Only the buyer can review this order", details={"reason": "NotBuyer"}
            )
        if order.seller_id == reviewer_id:
            raise BusinessLogicError(
                error_code="REVIEW_SELF",
                message="You cannot review yourself",
                details={"reason": "SelfReview"},
            )
        if order.status != OrderStatus.COMPLETED:
            raise BusinessLogicError(
                error_code="REVIEW_ORDER_NOT_COMPLETED",
                message="Only completed orders can be reviewed",
                details={"order_id": order_id, "status": order.status.value},
            )
        if self.review_repo.get_for_order(order_id) is not None:
            raise DuplicateReviewError(details={"order_id": order_id})

        try:
            with unit_of_work(self.db):
                review = self.review_repo.create(
                    commit=False,
                    order_id=order_id,
                    reviewer_id=reviewer_id,
                    target_id=order.seller_id,
                    rating=rating,
                    comment=_clean_comment(comment),
                )
        except TransactionAbortedError as e:
            # unique(order_id) lost a race with a concurrent submission
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateReviewError(details={"order_id": order_id}) from e
            raise

        logger.info(f"User {reviewer_id} reviewed order {order_id} ({rating})")
        return review

    def _get_own(self, review_id: int, reviewer_id: int) -> ReviewSchema:
        review = self.review_repo.get_by_id(review_id)
        if review is None:
            raise NotFoundError("Review not found", details={"review_id": review_id})
        if review.reviewer_id != reviewer_id:
            raise AuthorizationError("Only the author can modify this review")
        return review

    def update(
        self,
        review_id: int,
        reviewer_id: int,
        rating: Optional[int] = None,
        comment: Optional[str] = None,
    ) -> ReviewSchema:
        self._get_own(review_id, reviewer_id)
        fields = {}
        if rating is not None:
            _validate_rating(rating)
            fields["rating"] = rating
        if comment is not None:
            fields["comment"] = _clean_comment(comment)
        if not fields:
            return self.review_repo.get_by_id(review_id)
        return self.review_repo.update(review_id, **fields)

    def delete(self, review_id: int, reviewer_id: int) -> None:
        self._get_own(review_id, reviewer_id)
        self.review_repo.delete(review_id)
        logger.info(f"User {reviewer_id} deleted review {review_id}")

    def list_for_seller(self, seller_id: int, limit: int = 20, offset: int = 0) -> ReviewListResponse:
        reviews, total_count = self.review_repo.list_by(target_id=seller_id, limit=limit, offset=offset)
        return ReviewListResponse(reviews=reviews, total_count=total_count)

    def list_by_reviewer(self, reviewer_id: int, limit: int = 20, offset: int = 0) -> ReviewListResponse:
        reviews, total_count = self.review_repo.list_by(
            reviewer_id=reviewer_id, limit=limit, offset=offset
        )
        return ReviewListResponse(reviews=reviews, total_count=total_count)

    def get_for_order(self, order_id: int) -> Optional[ReviewSchema]:
        return self.review_repo.get_for_order(order_id)

    def average_rating(self, user_id: int) -> AverageRating:
        average, count = self.review_repo.rating_summary(user_id)
        return AverageRating(
            user_id=user_id,
            average=round(average, 1) if average is not None else 0.0,
            count=count,
        )
