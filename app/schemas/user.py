from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from app.core.enums import UserRole


class UserSnapshot(BaseModel):
    id: int
    name: str
    role: UserRole


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime
