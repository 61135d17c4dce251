"""
Favorites Router

API endpoints for saved postings.
"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Query, status
import logging

from bookswap.services.favorites_service import FavoritesService
from bookswap.core.auth_middleware import get_current_active_user
from bookswap.schemas.user import User as UserSchema
from bookswap.schemas.auth import BaseResponse
from bookswap.schemas.favorites import AddFavoriteRequest
from bookswap.schemas.pagination import PaginationMeta
from bookswap.deps import get_favorites_service


router = APIRouter(prefix="/favorites", tags=["favorites"])
logger = logging.getLogger(__name__)


@router.get("", response_model=BaseResponse)
def get_my_favorites(
    current_user: UserSchema = Depends(get_current_active_user),
    favorites_service: FavoritesService = Depends(get_favorites_service),
    limit: Optional[int] = Query(
        100, ge=1, le=500, description="Maximum number of results"
    ),
    offset: Optional[int] = Query(0, ge=0, description="Number of results to skip"),
) -> Any:
    """
    Get current user's saved postings.

    Returns paginated list of favorites with posting summaries.
    """
    favorites_response = favorites_service.get_user_favorites(
        user_id=current_user.id, limit=limit, offset=offset
    )

    # Type-safe handling of Optional[int]
    limit_val = limit or 100
    offset_val = offset or 0

    return BaseResponse(
        success=True,
        data=favorites_response.model_dump(mode="json"),
        meta=PaginationMeta.build(
            limit_val, offset_val, favorites_response.total_count
        ).model_dump(),
    )


@router.post("", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def add_favorite(
    request: AddFavoriteRequest,
    current_user: UserSchema = Depends(get_current_active_user),
    favorites_service: FavoritesService = Depends(get_favorites_service),
) -> Any:
    """
    Save a posting to favorites.

    Returns 404 if the posting does not exist and 409 if it is already saved.
    """
    favorite_info = favorites_service.add_favorite(
        user_id=current_user.id, posting_id=request.posting_id
    )

    return BaseResponse(
        success=True,
        data=favorite_info.model_dump(mode="json"),
        meta={"message": "Successfully added posting to favorites"},
    )


@router.delete("/{posting_id}", response_model=BaseResponse)
def remove_favorite(
    posting_id: int,
    current_user: UserSchema = Depends(get_current_active_user),
    favorites_service: FavoritesService = Depends(get_favorites_service),
) -> Any:
    """
    Remove a posting from favorites.
    """
    favorites_service.remove_favorite(user_id=current_user.id, posting_id=posting_id)

    return BaseResponse(
        success=True,
        data={"posting_id": posting_id},
        meta={"message": "Successfully removed posting from favorites"},
    )


@router.get("/check/{posting_id}", response_model=BaseResponse)
def check_favorite(
    posting_id: int,
    current_user: UserSchema = Depends(get_current_active_user),
    favorites_service: FavoritesService = Depends(get_favorites_service),
) -> Any:
    """
    Check if a posting is in user's favorites.
    """
    check_response = favorites_service.check_favorite(
        user_id=current_user.id, posting_id=posting_id
    )

    return BaseResponse(success=True, data=check_response.model_dump())
