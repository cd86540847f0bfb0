from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.security import get_current_user
from app.core.rate_limit import check_rate_limit
from app.schemas.whatsapp import WhatsAppSendIn, WhatsAppSendOut, WhatsAppStatusOut
from app.services import whatsapp

router = APIRouter(prefix="/whatsapp", tags=["whatsapp"])


@router.post("/send", response_model=WhatsAppSendOut)
async def send(
    payload: WhatsAppSendIn,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(current_user.id)
    return await whatsapp.send_links(db, current_user, payload)


@router.get("/status", response_model=WhatsAppStatusOut)
async def status(current_user=Depends(get_current_user)):
    return whatsapp.integration_status()
