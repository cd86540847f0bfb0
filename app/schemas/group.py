from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from app.core.enums import UserRole
from app.schemas.message import CurrentUser, MessageOut
from app.schemas.user import UserSnapshot


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    member_ids: List[int] = Field(default_factory=list)


class MemberAdd(BaseModel):
    user_id: int


class MemberOut(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    joined_at: datetime


class GroupOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_by: Optional[int] = None
    creator: Optional[UserSnapshot] = None
    created_at: datetime
    updated_at: datetime
    member_count: int = 0
    message_count: int = 0
    members: List[MemberOut] = Field(default_factory=list)


class GroupThreadOut(BaseModel):
    group: GroupOut
    messages: List[MessageOut]
    current_user: CurrentUser
