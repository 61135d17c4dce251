from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.orm import Session

from bookswap.models.message import Message
from bookswap.repositories.base import BaseRepository
from bookswap.schemas.message import MessageSchema


class MessageRepository(BaseRepository[Message, MessageSchema]):
    def __init__(self, db: Session):
        super().__init__(Message, MessageSchema, db)

    def list_received_or_sent(
        self, user_id: int, unread_only: bool = False, limit: int = 50, offset: int = 0
    ) -> Tuple[List[MessageSchema], int]:
        """내가 보내거나 받은 메시지 (최신순)"""
        self._ensure_clean_session()
        if unread_only:
            query = self.db.query(Message).filter(
                Message.receiver_id == user_id, Message.is_read.is_(False)
            )
        else:
            query = self.db.query(Message).filter(
                or_(Message.sender_id == user_id, Message.receiver_id == user_id)
            )
        query = query.order_by(Message.created_at.desc(), Message.id.desc())
        return self._paginate(query, limit, offset)

    def conversation(
        self, user_id: int, partner_id: int, limit: int = 100, offset: int = 0
    ) -> Tuple[List[MessageSchema], int]:
        """두 사용자 사이의 대화 (오래된 순)"""
        self._ensure_clean_session()
        query = (
            self.db.query(Message)
            .filter(
                or_(
                    and_(Message.sender_id == user_id, Message.receiver_id == partner_id),
                    and_(Message.sender_id == partner_id, Message.receiver_id == user_id),
                )
            )
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return self._paginate(query, limit, offset)

    def mark_read(self, message_id: int, receiver_id: int) -> bool:
        result = self.db.execute(
            update(Message)
            .where(Message.id == message_id, Message.receiver_id == receiver_id)
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        self.db.commit()
        return result.rowcount == 1

    def mark_conversation_read(self, receiver_id: int, sender_id: int) -> int:
        result = self.db.execute(
            update(Message)
            .where(
                Message.receiver_id == receiver_id,
                Message.sender_id == sender_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        self.db.commit()
        return result.rowcount

    def unread_count(self, user_id: int, sender_id: Optional[int] = None) -> int:
        query = self.db.query(Message).filter(
            Message.receiver_id == user_id, Message.is_read.is_(False)
        )
        if sender_id is not None:
            query = query.filter(Message.sender_id == sender_id)
        return query.count()

    def latest_per_partner(self, user_id: int) -> List[MessageSchema]:
        """대화 상대별 마지막 메시지 (최신 대화 순)"""
        partner = func.coalesce(
            func.nullif(Message.sender_id, user_id), Message.receiver_id
        )
        latest_ids = (
            select(func.max(Message.id))
            .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .group_by(partner)
        )
        instances = (
            self.db.query(Message)
            .filter(Message.id.in_(latest_ids))
            .order_by(Message.id.desc())
            .all()
        )
        return self._to_schemas(instances)

    def unread_counts_by_sender(self, user_id: int) -> Dict[int, int]:
        rows = (
            self.db.query(Message.sender_id, func.count(Message.id))
            .filter(Message.receiver_id == user_id, Message.is_read.is_(False))
            .group_by(Message.sender_id)
            .all()
        )
        return {sender_id: int(count) for sender_id, count in rows}
