"""
Favorites Service

Business logic layer for saved postings.
Validates postings and manages favorites operations.
"""

from typing import Optional
from sqlalchemy.orm import Session
import logging

from bookswap.repositories.favorites_repository import FavoritesRepository
from bookswap.repositories.posting_repository import PostingRepository
from bookswap.schemas.favorites import (
    FavoritePostingInfo,
    UserFavoritesResponse,
    FavoriteCheckResponse,
)
from bookswap.core.exceptions import (
    NotFoundError,
    ConflictError,
)

logger = logging.getLogger(__name__)


class FavoritesService:
    """
    Service layer for favorites management.

    Handles:
    - Posting existence validation
    - Duplicate favorite prevention
    """

    def __init__(self, db: Session):
        self.db = db
        self.favorites_repo = FavoritesRepository(db)
        self.posting_repo = PostingRepository(db)

    def _validate_posting_exists(self, posting_id: int) -> None:
        """
        Raises:
            NotFoundError: If posting doesn't exist
        """
        if not self.posting_repo.exists({"id": posting_id}):
            raise NotFoundError(
                f"Posting {posting_id} not found",
                details={"posting_id": posting_id}
            )

    def get_user_favorites(
        self,
        user_id: int,
        limit: Optional[int] = 100,
        offset: Optional[int] = 0
    ) -> UserFavoritesResponse:
        """
        Get all favorites for a user with pagination.

        Args:
            user_id: User ID
            limit: Maximum number of results (default: 100, max: 500)
            offset: Number of results to skip (default: 0)

        Returns:
            UserFavoritesResponse with list of favorites and total count
        """
        # Enforce reasonable limits
        if limit and limit > 500:
            limit = 500

        favorites = self.favorites_repo.get_user_favorites(
            user_id=user_id,
            limit=limit,
            offset=offset
        )

        total_count = self.favorites_repo.get_favorites_count(user_id)

        return UserFavoritesResponse(
            user_id=user_id,
            favorites=favorites,
            total_count=total_count
        )

    def add_favorite(self, user_id: int, posting_id: int) -> FavoritePostingInfo:
        """
        Save a posting to the user's favorites.

        Raises:
            NotFoundError: If posting doesn't exist
            ConflictError: If posting is already favorited
        """
        self._validate_posting_exists(posting_id)

        if self.favorites_repo.is_favorited(user_id, posting_id):
            raise ConflictError(
                "Posting is already in your favorites",
                details={"posting_id": posting_id}
            )

        favorite = self.favorites_repo.add_favorite(user_id, posting_id)
        posting = self.posting_repo.get_by_id(posting_id)

        logger.info(f"User {user_id} added favorite: posting {posting_id}")
        return FavoritePostingInfo(
            posting_id=posting_id,
            title=posting.title,
            price=posting.price,
            status=posting.status.value,
            image_url=posting.image_url,
            added_at=favorite.created_at
        )

    def remove_favorite(self, user_id: int, posting_id: int) -> bool:
        """
        Remove a posting from the user's favorites.

        Raises:
            NotFoundError: If posting is not in favorites
        """
        if not self.favorites_repo.remove_favorite(user_id, posting_id):
            raise NotFoundError(
                "Posting is not in your favorites",
                details={"posting_id": posting_id}
            )

        logger.info(f"User {user_id} removed favorite: posting {posting_id}")
        return True

    def check_favorite(self, user_id: int, posting_id: int) -> FavoriteCheckResponse:
        is_favorited = self.favorites_repo.is_favorited(user_id, posting_id)

        return FavoriteCheckResponse(
            posting_id=posting_id,
            is_favorited=is_favorited
        )

    def count_for_posting(self, posting_id: int) -> int:
        return self.favorites_repo.get_posting_favorite_count(posting_id)
