from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from app.core.enums import MessageChannel, UserRole
from app.schemas.user import UserOut, UserSnapshot


class MessageCreate(BaseModel):
    content: str = Field(..., max_length=10000)


class MessageOut(BaseModel):
    id: int
    content: str
    channel: MessageChannel
    sender_id: int
    receiver_id: Optional[int] = None
    group_id: Optional[int] = None
    created_at: datetime
    sender: UserSnapshot


class DirectMessageOut(MessageOut):
    recipient: UserSnapshot


class DirectThreadOut(BaseModel):
    other_user: UserOut
    messages: List[MessageOut]
    current_user_id: int


class LastMessage(BaseModel):
    content: str
    created_at: datetime


class ConversationOut(BaseModel):
    user: UserSnapshot
    last_message: Optional[LastMessage] = None


class CurrentUser(BaseModel):
    id: int
    role: UserRole
