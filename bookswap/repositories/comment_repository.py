from typing import List, Tuple

from sqlalchemy.orm import Session

from bookswap.models.comment import Comment
from bookswap.repositories.base import BaseRepository
from bookswap.schemas.comment import CommentSchema


class CommentRepository(BaseRepository[Comment, CommentSchema]):
    def __init__(self, db: Session):
        super().__init__(Comment, CommentSchema, db)

    def list_for_posting(
        self, posting_id: int, limit: int = 50, offset: int = 0
    ) -> Tuple[List[CommentSchema], int]:
        """게시물 댓글 (오래된 순)"""
        self._ensure_clean_session()
        query = (
            self.db.query(Comment)
            .filter(Comment.posting_id == posting_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return self._paginate(query, limit, offset)

    def count_for_posting(self, posting_id: int) -> int:
        return self.count({"posting_id": posting_id})
