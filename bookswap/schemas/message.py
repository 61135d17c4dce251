from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class MessageSchema(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    content: str
    is_read: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageCreate(BaseModel):
    receiver_id: int = Field(..., alias="receiverId")
    content: str = Field(..., max_length=2000)

    class Config:
        populate_by_name = True


class ConversationSummary(BaseModel):
    """Latest message exchanged with one partner"""
    partner_id: int
    partner_username: Optional[str] = None
    last_message: MessageSchema
    unread_count: int = 0


class ConversationListResponse(BaseModel):
    conversations: List[ConversationSummary]


class MarkConversationReadRequest(BaseModel):
    partner_id: int = Field(..., alias="partnerId")

    class Config:
        populate_by_name = True
