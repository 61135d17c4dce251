"""
Posting Repository

All methods return Pydantic schemas, never SQLAlchemy models.
Status writes go through ``compare_and_swap_status`` so a transition only
happens from the status the caller observed.
"""

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import case, func, or_, update
from sqlalchemy.orm import Session

from bookswap.models.catalog import Category, Course
from bookswap.models.comment import Comment
from bookswap.models.favorite import FavoritePosting
from bookswap.models.posting import Posting, PostingImage, PostingStatus
from bookswap.models.user import User
from bookswap.repositories.base import BaseRepository
from bookswap.schemas.catalog import CategorySchema, CourseSchema
from bookswap.schemas.posting import (
    PopularPosting,
    PostingDetail,
    PostingImageSchema,
    PostingSchema,
    SellerSummary,
)


class PostingRepository(BaseRepository[Posting, PostingSchema]):
    def __init__(self, db: Session):
        super().__init__(model_class=Posting, schema_class=PostingSchema, db=db)

    def get_for_update(self, posting_id: int) -> Optional[PostingSchema]:
        """Lock the posting row and read its current state from the database.

        ``populate_existing`` bypasses whatever the identity map already holds
        so the snapshot reflects the row as it is under the lock.
        """
        instance = (
            self.db.query(Posting)
            .filter(Posting.id == posting_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        return self._to_schema(instance)

    def compare_and_swap_status(
        self,
        posting_id: int,
        expected: Iterable[PostingStatus],
        new_status: PostingStatus,
    ) -> bool:
        """Move the posting to ``new_status`` only if its status is in ``expected``.

        Returns False when no row matched, i.e. somebody else changed the
        posting first. Does not commit.
        """
        expected_values = [status.value for status in expected]
        result = self.db.execute(
            update(Posting)
            .where(Posting.id == posting_id, Posting.status.in_(expected_values))
            .values(status=new_status.value, version=Posting.version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        # keep any instance already in the session in step with the row
        self.db.query(Posting).filter(Posting.id == posting_id).populate_existing().first()
        return True

    def update_fields(
        self, posting_id: int, expected: Iterable[PostingStatus], **fields
    ) -> bool:
        """상태가 expected 중 하나일 때만 필드 수정. commit 하지 않음"""
        expected_values = [status.value for status in expected]
        result = self.db.execute(
            update(Posting)
            .where(Posting.id == posting_id, Posting.status.in_(expected_values))
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        self.db.query(Posting).filter(Posting.id == posting_id).populate_existing().first()
        return True

    def search(
        self,
        status: Optional[PostingStatus] = PostingStatus.LISTED,
        category_id: Optional[int] = None,
        course_id: Optional[int] = None,
        keyword: Optional[str] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        seller_id: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[PostingSchema], int]:
        """Filtered posting list, newest first, with the total match count"""
        self._ensure_clean_session()
        query = self.db.query(Posting)
        if status is not None:
            query = query.filter(Posting.status == status.value)
        if category_id is not None:
            query = query.filter(Posting.category_id == category_id)
        if course_id is not None:
            query = query.filter(Posting.course_id == course_id)
        if seller_id is not None:
            query = query.filter(Posting.seller_id == seller_id)
        if keyword:
            pattern = f"%{keyword.strip()}%"
            query = query.filter(
                or_(Posting.title.ilike(pattern), Posting.description.ilike(pattern))
            )
        if min_price is not None:
            query = query.filter(Posting.price >= min_price)
        if max_price is not None:
            query = query.filter(Posting.price <= max_price)

        query = query.order_by(Posting.created_at.desc(), Posting.id.desc())
        return self._paginate(query, limit, offset)

    def get_detail(self, posting_id: int) -> Optional[PostingDetail]:
        """Posting joined with seller, catalog entries, images and counters"""
        self._ensure_clean_session()
        posting = self.db.query(Posting).filter(Posting.id == posting_id).first()
        if posting is None:
            return None

        seller = self.db.query(User).filter(User.id == posting.seller_id).first()
        category = (
            self.db.query(Category).filter(Category.id == posting.category_id).first()
            if posting.category_id
            else None
        )
        course = (
            self.db.query(Course).filter(Course.id == posting.course_id).first()
            if posting.course_id
            else None
        )

        base = PostingSchema.model_validate(posting).model_dump()
        return PostingDetail(
            **base,
            seller=SellerSummary.model_validate(seller) if seller else None,
            category=CategorySchema.model_validate(category) if category else None,
            course=CourseSchema.model_validate(course) if course else None,
            images=self.list_images(posting_id),
            favorite_count=self.db.query(FavoritePosting)
            .filter(FavoritePosting.posting_id == posting_id)
            .count(),
            comment_count=self.db.query(Comment)
            .filter(Comment.posting_id == posting_id)
            .count(),
        )

    def popular(self, limit: int) -> List[PopularPosting]:
        """Listed postings ranked by favorite count, then comment count"""
        self._ensure_clean_session()
        favorite_counts = (
            self.db.query(
                FavoritePosting.posting_id.label("posting_id"),
                func.count().label("favorite_count"),
            )
            .group_by(FavoritePosting.posting_id)
            .subquery()
        )
        comment_counts = (
            self.db.query(
                Comment.posting_id.label("posting_id"),
                func.count().label("comment_count"),
            )
            .group_by(Comment.posting_id)
            .subquery()
        )
        favorite_count = func.coalesce(favorite_counts.c.favorite_count, 0)
        comment_count = func.coalesce(comment_counts.c.comment_count, 0)

        rows = (
            self.db.query(Posting, favorite_count, comment_count)
            .outerjoin(favorite_counts, favorite_counts.c.posting_id == Posting.id)
            .outerjoin(comment_counts, comment_counts.c.posting_id == Posting.id)
            .filter(Posting.status == PostingStatus.LISTED.value)
            .order_by(favorite_count.desc(), comment_count.desc(), Posting.id.desc())
            .limit(limit)
            .all()
        )
        return [
            PopularPosting(
                id=posting.id,
                title=posting.title,
                price=posting.price,
                image_url=posting.image_url,
                seller_id=posting.seller_id,
                favorite_count=int(favorites),
                comment_count=int(comments),
            )
            for posting, favorites, comments in rows
        ]

    def count_by_status(self, status: Optional[PostingStatus] = None) -> int:
        query = self.db.query(Posting)
        if status is not None:
            query = query.filter(Posting.status == status.value)
        return query.count()

    def count_by_seller(self, seller_id: int, status: Optional[PostingStatus] = None) -> int:
        query = self.db.query(Posting).filter(Posting.seller_id == seller_id)
        if status is not None:
            query = query.filter(Posting.status == status.value)
        return query.count()

    def references_catalog(self, category_id: Optional[int] = None, course_id: Optional[int] = None) -> bool:
        query = self.db.query(Posting)
        if category_id is not None:
            query = query.filter(Posting.category_id == category_id)
        if course_id is not None:
            query = query.filter(Posting.course_id == course_id)
        return query.first() is not None

    # Images

    def list_images(self, posting_id: int) -> List[PostingImageSchema]:
        instances = (
            self.db.query(PostingImage)
            .filter(PostingImage.posting_id == posting_id)
            .order_by(PostingImage.display_order, PostingImage.id)
            .all()
        )
        return [PostingImageSchema.model_validate(instance) for instance in instances]

    def add_image(
        self, posting_id: int, image_url: str, display_order: int = 0, commit: bool = True
    ) -> PostingImageSchema:
        instance = PostingImage(
            posting_id=posting_id, image_url=image_url, display_order=display_order
        )
        self.db.add(instance)
        try:
            self.db.flush()
            self.db.refresh(instance)
            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return PostingImageSchema.model_validate(instance)

    def get_image(self, image_id: int) -> Optional[PostingImageSchema]:
        instance = self.db.query(PostingImage).filter(PostingImage.id == image_id).first()
        return PostingImageSchema.model_validate(instance) if instance else None

    def delete_image(self, image_id: int) -> bool:
        deleted = (
            self.db.query(PostingImage)
            .filter(PostingImage.id == image_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted == 1

    # Statistics

    def group_statistics(self, by: str, limit: Optional[int] = None) -> List[dict]:
        """Posting counts and average price per category (``by="category"``) or course"""
        group = Category if by == "category" else Course
        foreign_key = Posting.category_id if by == "category" else Posting.course_id
        listed = func.sum(case((Posting.status == PostingStatus.LISTED.value, 1), else_=0))
        sold = func.sum(case((Posting.status == PostingStatus.SOLD.value, 1), else_=0))
        columns = [group.id, group.name]
        if group is Course:
            columns.append(Course.code)
        query = (
            self.db.query(
                *columns,
                func.count(Posting.id).label("total"),
                listed.label("listed"),
                sold.label("sold"),
                func.avg(Posting.price).label("average_price"),
            )
            .outerjoin(Posting, foreign_key == group.id)
            .group_by(*columns)
            .order_by(func.count(Posting.id).desc(), group.id)
        )
        if limit:
            query = query.limit(limit)
        return [
            {
                "id": row.id,
                "name": row.name,
                "code": getattr(row, "code", None),
                "total_postings": int(row.total or 0),
                "listed_postings": int(row.listed or 0),
                "sold_postings": int(row.sold or 0),
                "average_price": round(float(row.average_price), 2) if row.average_price is not None else 0.0,
            }
            for row in query.all()
        ]
