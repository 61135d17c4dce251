from typing import Any
from fastapi import APIRouter, Depends, Query, status

from bookswap.core.auth_middleware import get_current_active_user
from bookswap.deps import get_comment_service
from bookswap.schemas.auth import BaseResponse
from bookswap.schemas.comment import CommentCreate, CommentUpdate
from bookswap.schemas.user import User as UserSchema
from bookswap.services.comment_service import CommentService

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=BaseResponse)
def list_comments(
    posting_id: int = Query(..., alias="postingId"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    comment_service: CommentService = Depends(get_comment_service),
) -> Any:
    """게시물 댓글 목록 (오래된 순)"""
    comments = comment_service.list_for_posting(posting_id, limit=limit, offset=offset)
    return BaseResponse(
        success=True,
        data={
            "comments": [c.model_dump(mode="json") for c in comments],
            "total_count": comment_service.count_for_posting(posting_id),
        },
    )


@router.post("", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    request: CommentCreate,
    current_user: UserSchema = Depends(get_current_active_user),
    comment_service: CommentService = Depends(get_comment_service),
) -> Any:
    comment = comment_service.create(current_user.id, request.posting_id, request.content)
    return BaseResponse(success=True, data={"comment": comment.model_dump(mode="json")})


@router.put("/{comment_id}", response_model=BaseResponse)
def update_comment(
    comment_id: int,
    request: CommentUpdate,
    current_user: UserSchema = Depends(get_current_active_user),
    comment_service: CommentService = Depends(get_comment_service),
) -> Any:
    comment = comment_service.update(comment_id, current_user.id, request.content)
    return BaseResponse(success=True, data={"comment": comment.model_dump(mode="json")})


@router.delete("/{comment_id}", response_model=BaseResponse)
def delete_comment(
    comment_id: int,
    current_user: UserSchema = Depends(get_current_active_user),
    comment_service: CommentService = Depends(get_comment_service),
) -> Any:
    comment_service.delete(comment_id, current_user.id)
    return BaseResponse(success=True, data={"deleted": True})
