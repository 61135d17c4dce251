"""
Message Service

Direct messages between two users. Clients poll; nothing is pushed.
"""

import logging
from typing import Tuple, List

from sqlalchemy.orm import Session

from bookswap.core.exceptions import (
    AuthorizationError,
    BusinessLogicError,
    NotFoundError,
    ValidationError,
)
from bookswap.repositories.message_repository import MessageRepository
from bookswap.repositories.user_repository import UserRepository
from bookswap.schemas.message import (
    ConversationListResponse,
    ConversationSummary,
    MessageSchema,
)

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, db: Session):
        self.db = db
        self.message_repo = MessageRepository(db)
        self.user_repo = UserRepository(db)

    def send(self, sender_id: int, receiver_id: int, content: str) -> MessageSchema:
        content = (content or "").strip()
        if not content:
            raise ValidationError("Message cannot be empty")
        if sender_id == receiver_id:
            raise BusinessLogicError(
                error_code="MESSAGE_SELF",
                message="You cannot send a message to yourself",
            )
        if not self.user_repo.exists({"id": receiver_id}):
            raise NotFoundError("Receiver not found", details={"receiver_id": receiver_id})

        message = self.message_repo.create(
            sender_id=sender_id, receiver_id=receiver_id, content=content, is_read=False
        )
        logger.info(f"User {sender_id} sent message {message.id} to {receiver_id}")
        return message

    def list_messages(
        self, user_id: int, unread_only: bool = False, limit: int = 50, offset: int = 0
    ) -> Tuple[List[MessageSchema], int]:
        return self.message_repo.list_received_or_sent(
            user_id, unread_only=unread_only, limit=limit, offset=offset
        )

    def conversation(
        self, user_id: int, partner_id: int, limit: int = 100, offset: int = 0
    ) -> Tuple[List[MessageSchema], int]:
        if not self.user_repo.exists({"id": partner_id}):
            raise NotFoundError("User not found", details={"user_id": partner_id})
        return self.message_repo.conversation(user_id, partner_id, limit=limit, offset=offset)

    def mark_read(self, message_id: int, user_id: int) -> MessageSchema:
        """수신자만 읽음 처리할 수 있음"""
        message = self.message_repo.get_by_id(message_id)
        if message is None:
            raise NotFoundError("Message not found", details={"message_id": message_id})
        if message.receiver_id != user_id:
            raise AuthorizationError("Only the receiver can mark a message as read")
        self.message_repo.mark_read(message_id, user_id)
        return self.message_repo.get_by_id(message_id)

    def mark_conversation_read(self, user_id: int, partner_id: int) -> int:
        return self.message_repo.mark_conversation_read(receiver_id=user_id, sender_id=partner_id)

    def unread_count(self, user_id: int) -> int:
        return self.message_repo.unread_count(user_id)

    def conversations(self, user_id: int) -> ConversationListResponse:
        latest = self.message_repo.latest_per_partner(user_id)
        unread = self.message_repo.unread_counts_by_sender(user_id)

        summaries = []
        for message in latest:
            partner_id = message.receiver_id if message.sender_id == user_id else message.sender_id
            partner = self.user_repo.get_by_id(partner_id)
            summaries.append(
                ConversationSummary(
                    partner_id=partner_id,
                    partner_username=partner.username if partner else None,
                    last_message=message,
                    unread_count=unread.get(partner_id, 0),
                )
            )
        return ConversationListResponse(conversations=summaries)
