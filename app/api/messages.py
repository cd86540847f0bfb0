from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.security import get_current_user
from app.core.rate_limit import check_rate_limit
from app.schemas.message import DirectMessageOut, DirectThreadOut, MessageCreate, MessageOut
from app.services import messages

router = APIRouter(tags=["messages"])


@router.get("/direct-messages/{user_id}", response_model=DirectThreadOut)
async def get_direct_messages(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    return await messages.get_direct_thread(db, current_user, user_id)


@router.post("/direct-messages/{user_id}", response_model=DirectMessageOut)
async def send_direct_message(
    user_id: int,
    payload: MessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(current_user.id)
    return await messages.send_direct(db, current_user, user_id, payload.content)


@router.get("/messages/{message_id}", response_model=MessageOut)
async def get_message(
    message_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    return await messages.get_message(db, current_user, message_id)
