from pydantic import BaseModel, Field
from typing import List
from app.schemas.user import UserOut


class AdminLoginIn(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminOut(BaseModel):
    id: int
    username: str
    role: str


class DashboardStats(BaseModel):
    total_users: int
    total_agents: int
    pending_agents: int
    total_groups: int
    total_messages: int
    total_notes: int


class UserStatusUpdate(BaseModel):
    is_active: bool


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str


class Pagination(BaseModel):
    page: int
    limit: int
    has_more: bool


class AdminUserList(BaseModel):
    users: List[UserOut]
    pagination: Pagination


class DeletedUserOut(BaseModel):
    id: int
    name: str
    email: str
