"""
Favorites Repository

All methods return Pydantic schemas, never SQLAlchemy models.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_

from bookswap.models.favorite import FavoritePosting
from bookswap.models.posting import Posting
from bookswap.schemas.favorites import (
    FavoriteSchema,
    FavoritePostingInfo,
)
from bookswap.repositories.base import BaseRepository


class FavoritesRepository(BaseRepository[FavoritePosting, FavoriteSchema]):
    """
    Repository for favorite postings.

    Database (SQLAlchemy models) → Repository (converts to schemas) → Service/Router
    """

    def __init__(self, db: Session):
        super().__init__(
            model_class=FavoritePosting,
            schema_class=FavoriteSchema,
            db=db
        )

    def get_user_favorites(
        self,
        user_id: int,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[FavoritePostingInfo]:
        """
        Get all favorites for a user with posting information.

        Returns: List of FavoritePostingInfo (Pydantic schema)
        """
        self._ensure_clean_session()

        query = (
            self.db.query(
                FavoritePosting.posting_id,
                FavoritePosting.created_at,
                Posting.title,
                Posting.price,
                Posting.status,
                Posting.image_url,
            )
            .join(Posting, FavoritePosting.posting_id == Posting.id)
            .filter(FavoritePosting.user_id == user_id)
            .order_by(FavoritePosting.created_at.desc(), FavoritePosting.posting_id.desc())
        )

        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)

        return [
            FavoritePostingInfo(
                posting_id=row.posting_id,
                title=row.title,
                price=row.price,
                status=row.status,
                image_url=row.image_url,
                added_at=row.created_at,
            )
            for row in query.all()
        ]

    def add_favorite(self, user_id: int, posting_id: int) -> Optional[FavoriteSchema]:
        """
        Save a posting for the user.

        Returns: FavoriteSchema (Pydantic schema) if successful
        """
        self._ensure_clean_session()

        if self.is_favorited(user_id, posting_id):
            return self.get_favorite(user_id, posting_id)

        return self.create(user_id=user_id, posting_id=posting_id, commit=True)

    def remove_favorite(self, user_id: int, posting_id: int) -> bool:
        """
        Remove a posting from the user's favorites.

        Returns: True if removed, False if not found
        """
        self._ensure_clean_session()

        favorite = (
            self.db.query(FavoritePosting)
            .filter(
                and_(
                    FavoritePosting.user_id == user_id,
                    FavoritePosting.posting_id == posting_id
                )
            )
            .first()
        )

        if not favorite:
            return False

        try:
            self.db.delete(favorite)
            self.db.commit()
            return True
        except Exception:
            self.db.rollback()
            raise

    def is_favorited(self, user_id: int, posting_id: int) -> bool:
        return self.exists({"user_id": user_id, "posting_id": posting_id})

    def get_favorite(self, user_id: int, posting_id: int) -> Optional[FavoriteSchema]:
        self._ensure_clean_session()

        favorite = (
            self.db.query(FavoritePosting)
            .filter(
                and_(
                    FavoritePosting.user_id == user_id,
                    FavoritePosting.posting_id == posting_id
                )
            )
            .first()
        )

        return self._to_schema(favorite)

    def get_favorites_count(self, user_id: int) -> int:
        return self.count({"user_id": user_id})

    def get_posting_favorite_count(self, posting_id: int) -> int:
        return self.count({"posting_id": posting_id})
