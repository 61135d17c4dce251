from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from bookswap.models.review import Review
from bookswap.repositories.base import BaseRepository
from bookswap.schemas.review import ReviewSchema


class ReviewRepository(BaseRepository[Review, ReviewSchema]):
    def __init__(self, db: Session):
        super().__init__(Review, ReviewSchema, db)

    def get_for_order(self, order_id: int) -> Optional[ReviewSchema]:
        return self.get_by_field("order_id", order_id)

    def list_by(
        self,
        target_id: Optional[int] = None,
        reviewer_id: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[ReviewSchema], int]:
        self._ensure_clean_session()
        query = self.db.query(Review)
        if target_id is not None:
            query = query.filter(Review.target_id == target_id)
        if reviewer_id is not None:
            query = query.filter(Review.reviewer_id == reviewer_id)
        query = query.order_by(Review.created_at.desc(), Review.id.desc())
        return self._paginate(query, limit, offset)

    def rating_summary(self, target_id: int) -> Tuple[Optional[float], int]:
        """(평균 평점, 리뷰 수) - 리뷰가 없으면 (None, 0)"""
        average, count = (
            self.db.query(func.avg(Review.rating), func.count(Review.id))
            .filter(Review.target_id == target_id)
            .one()
        )
        return (float(average) if average is not None else None), int(count)
