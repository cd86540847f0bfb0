from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas.auth import RegisterIn, RegisterOut, TokenOut
from app.db.session import get_db
from app.core.enums import UserRole
from app.core.response_builders import build_user_response
from app.services import accounts

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterIn, db: AsyncSession = Depends(get_db)):
    user = await accounts.register(db, payload)

    if user.role == UserRole.AGENT:
        message = "Agent account request submitted. Please contact admin for approval."
    else:
        message = "User account created successfully"
    return {"message": message, "user": build_user_response(user)}


@router.post("/login", response_model=TokenOut)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    # OAuth2 form field "username" carries the email address
    user, token = await accounts.authenticate(db, form_data.username, form_data.password)
    return {"access_token": token, "user": build_user_response(user)}
