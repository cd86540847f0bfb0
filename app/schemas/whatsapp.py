from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import datetime
from app.core.enums import UserRole, WhatsAppFailure


class WhatsAppSendIn(BaseModel):
    message: str = Field(..., max_length=4096)
    group_id: Optional[int] = None
    direct_user_id: Optional[int] = None
    message_type: str = "text"

    @model_validator(mode="after")
    def one_target(self):
        if (self.group_id is None) == (self.direct_user_id is None):
            raise ValueError("Exactly one of group_id or direct_user_id must be provided")
        return self


class RecipientLink(BaseModel):
    user_id: int
    name: str
    role: UserRole
    phone: Optional[str] = None
    phone_display: Optional[str] = None
    whatsapp_url: Optional[str] = None
    status: str
    error: Optional[WhatsAppFailure] = None


class WhatsAppDelivery(BaseModel):
    ready: int = 0
    failed: int = 0
    recipients: List[RecipientLink] = Field(default_factory=list)


class WhatsAppSendOut(BaseModel):
    message: str
    delivery: WhatsAppDelivery
    group_id: Optional[int] = None
    direct_user_id: Optional[int] = None
    message_type: str
    sender_role: UserRole
    timestamp: datetime


class WhatsAppStatusOut(BaseModel):
    status: str
    integration: str
    capabilities: List[str]
