from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.security import get_current_user
from app.core.rate_limit import check_rate_limit
from app.schemas.group import GroupCreate, GroupOut, GroupThreadOut, MemberAdd
from app.schemas.message import MessageCreate, MessageOut
from app.services import groups, messages

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("/", response_model=List[GroupOut])
async def list_groups(db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    return await groups.list_groups(db, current_user)


@router.post("/", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
async def create_group(
    payload: GroupCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(current_user.id)
    return await groups.create_group(db, current_user, payload)


@router.post("/{group_id}/members", response_model=GroupOut)
async def add_member(
    group_id: int,
    payload: MemberAdd,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(current_user.id)
    return await groups.add_member(db, current_user, group_id, payload.user_id)


@router.get("/{group_id}/messages", response_model=GroupThreadOut)
async def get_group_messages(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    return await messages.get_group_thread(db, current_user, group_id)


@router.post("/{group_id}/messages", response_model=MessageOut)
async def send_group_message(
    group_id: int,
    payload: MessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(current_user.id)
    return await messages.send_group(db, current_user, group_id, payload.content)
