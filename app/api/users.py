from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.security import get_current_user
from app.schemas.user import UserOut
from app.schemas.message import ConversationOut
from app.services import accounts, conversations

router = APIRouter(tags=["users"])


@router.get("/users", response_model=List[UserOut])
async def list_users(db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    return await accounts.list_directory(db, current_user)


@router.get("/conversations", response_model=List[ConversationOut])
async def list_conversations(db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    return await conversations.list_conversations(db, current_user)
