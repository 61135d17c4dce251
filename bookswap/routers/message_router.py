"""
Message Router

Direct messages. Clients poll these endpoints; there is no push channel.
"""

from typing import Any
from fastapi import APIRouter, Depends, Query, status

from bookswap.core.auth_middleware import get_current_active_user
from bookswap.deps import get_message_service
from bookswap.schemas.auth import BaseResponse
from bookswap.schemas.message import MarkConversationReadRequest, MessageCreate
from bookswap.schemas.pagination import PaginationLimits, PaginationMeta
from bookswap.schemas.user import User as UserSchema
from bookswap.services.message_service import MessageService

router = APIRouter(prefix="/messages", tags=["messages"])

_LIMITS = PaginationLimits.MESSAGES


@router.get("", response_model=BaseResponse)
def list_my_messages(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(_LIMITS["default"], ge=_LIMITS["min"], le=_LIMITS["max"]),
    offset: int = Query(0, ge=0),
    current_user: UserSchema = Depends(get_current_active_user),
    message_service: MessageService = Depends(get_message_service),
) -> Any:
    messages, total_count = message_service.list_messages(
        current_user.id, unread_only=unread_only, limit=limit, offset=offset
    )
    return BaseResponse(
        success=True,
        data={"messages": [m.model_dump(mode="json") for m in messages]},
        meta=PaginationMeta.build(limit, offset, total_count).model_dump(),
    )


@router.post("", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def send_message(
    request: MessageCreate,
    current_user: UserSchema = Depends(get_current_active_user),
    message_service: MessageService = Depends(get_message_service),
) -> Any:
    message = message_service.send(current_user.id, request.receiver_id, request.content)
    return BaseResponse(success=True, data={"message": message.model_dump(mode="json")})


@router.get("/conversations", response_model=BaseResponse)
def list_conversations(
    current_user: UserSchema = Depends(get_current_active_user),
    message_service: MessageService = Depends(get_message_service),
) -> Any:
    """대화 상대별 마지막 메시지와 안 읽은 메시지 수"""
    result = message_service.conversations(current_user.id)
    return BaseResponse(success=True, data=result.model_dump(mode="json"))


@router.get("/conversation/{user_id}", response_model=BaseResponse)
def get_conversation(
    user_id: int,
    limit: int = Query(100, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: UserSchema = Depends(get_current_active_user),
    message_service: MessageService = Depends(get_message_service),
) -> Any:
    messages, total_count = message_service.conversation(
        current_user.id, user_id, limit=limit, offset=offset
    )
    return BaseResponse(
        success=True,
        data={"messages": [m.model_dump(mode="json") for m in messages]},
        meta=PaginationMeta.build(limit, offset, total_count).model_dump(),
    )


@router.post("/conversation/read", response_model=BaseResponse)
def mark_conversation_read(
    request: MarkConversationReadRequest,
    current_user: UserSchema = Depends(get_current_active_user),
    message_service: MessageService = Depends(get_message_service),
) -> Any:
    updated = message_service.mark_conversation_read(current_user.id, request.partner_id)
    return BaseResponse(success=True, data={"updated": updated})


@router.get("/unread", response_model=BaseResponse)
def unread_count(
    current_user: UserSchema = Depends(get_current_active_user),
    message_service: MessageService = Depends(get_message_service),
) -> Any:
    return BaseResponse(
        success=True, data={"unread_count": message_service.unread_count(current_user.id)}
    )


@router.put("/{message_id}/read", response_model=BaseResponse)
def mark_read(
    message_id: int,
    current_user: UserSchema = Depends(get_current_active_user),
    message_service: MessageService = Depends(get_message_service),
) -> Any:
    message = message_service.mark_read(message_id, current_user.id)
    return BaseResponse(success=True, data={"message": message.model_dump(mode="json")})
