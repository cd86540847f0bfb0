from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from app.core.enums import UserRole
from app.schemas.user import UserOut


class RegisterIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)
    password: str = Field(..., min_length=6, max_length=128)
    role: UserRole = UserRole.USER

    @field_validator("role")
    @classmethod
    def account_role(cls, v):
        if v not in (UserRole.USER, UserRole.AGENT):
            raise ValueError("role must be USER or AGENT")
        return v


class RegisterOut(BaseModel):
    message: str
    user: UserOut


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
