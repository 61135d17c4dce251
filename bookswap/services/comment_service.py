import logging
from typing import List

from sqlalchemy.orm import Session

from bookswap.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from bookswap.repositories.comment_repository import CommentRepository
from bookswap.repositories.posting_repository import PostingRepository
from bookswap.schemas.comment import CommentSchema

logger = logging.getLogger(__name__)


def _clean_content(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment cannot be empty")
    return content


class CommentService:
    """게시물 댓글 서비스"""

    def __init__(self, db: Session):
        self.db = db
        self.comment_repo = CommentRepository(db)
        self.posting_repo = PostingRepository(db)

    def _require_posting(self, posting_id: int) -> None:
        if not self.posting_repo.exists({"id": posting_id}):
            raise NotFoundError("Posting not found", details={"posting_id": posting_id})

    def _get_own(self, comment_id: int, author_id: int) -> CommentSchema:
        comment = self.comment_repo.get_by_id(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found", details={"comment_id": comment_id})
        if comment.author_id != author_id:
            raise AuthorizationError("Only the author can modify this comment")
        return comment

    def create(self, author_id: int, posting_id: int, content: str) -> CommentSchema:
        content = _clean_content(content)
        self._require_posting(posting_id)
        comment = self.comment_repo.create(
            posting_id=posting_id, author_id=author_id, content=content
        )
        logger.info(f"User {author_id} commented on posting {posting_id}")
        return comment

    def list_for_posting(self, posting_id: int, limit: int = 50, offset: int = 0) -> List[CommentSchema]:
        self._require_posting(posting_id)
        comments, _ = self.comment_repo.list_for_posting(posting_id, limit=limit, offset=offset)
        return comments

    def update(self, comment_id: int, author_id: int, content: str) -> CommentSchema:
        content = _clean_content(content)
        self._get_own(comment_id, author_id)
        return self.comment_repo.update(comment_id, content=content)

    def delete(self, comment_id: int, author_id: int) -> None:
        self._get_own(comment_id, author_id)
        self.comment_repo.delete(comment_id)

    def count_for_posting(self, posting_id: int) -> int:
        return self.comment_repo.count_for_posting(posting_id)
