from typing import Optional
from fastapi import APIRouter, Cookie, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.admin_session import AdminSessionData, admin_sessions
from app.core.config import settings
from app.core.enums import UserRole
from app.core.security import require_admin
from app.schemas.admin import (
    AdminLoginIn,
    AdminOut,
    AdminUserList,
    DashboardStats,
    DeletedUserOut,
    PasswordChange,
    UserStatusUpdate,
)
from app.schemas.user import UserOut
from app.services import admin as admin_service

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/auth", response_model=AdminOut)
async def login(payload: AdminLoginIn, response: Response, db: AsyncSession = Depends(get_db)):
    account, session_id = await admin_service.admin_login(db, payload.username, payload.password)
    response.set_cookie(
        settings.ADMIN_SESSION_COOKIE,
        session_id,
        httponly=True,
        secure=not settings.DEBUG,
        samesite="lax",
        max_age=settings.ADMIN_SESSION_TTL,
    )
    return AdminOut(id=account.id, username=account.username, role=str(UserRole.ADMIN))


@router.get("/auth", response_model=AdminOut)
async def current_admin(admin: AdminSessionData = Depends(require_admin)):
    return AdminOut(id=admin.id, username=admin.username, role=admin.role)


@router.delete("/auth")
async def logout(
    response: Response,
    admin_session: Optional[str] = Cookie(None, alias=settings.ADMIN_SESSION_COOKIE),
):
    await admin_sessions.delete(admin_session)
    response.delete_cookie(settings.ADMIN_SESSION_COOKIE)
    return {"success": True}


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard(db: AsyncSession = Depends(get_db), admin: AdminSessionData = Depends(require_admin)):
    return await admin_service.dashboard_stats(db)


@router.get("/users", response_model=AdminUserList)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    role: Optional[UserRole] = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: AdminSessionData = Depends(require_admin)
):
    return await admin_service.list_users(db, page, limit, role)


@router.patch("/users/{user_id}", response_model=UserOut)
async def update_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: AdminSessionData = Depends(require_admin)
):
    return await admin_service.set_user_status(db, admin, user_id, payload.is_active)


@router.delete("/users/{user_id}", response_model=DeletedUserOut)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: AdminSessionData = Depends(require_admin)
):
    return await admin_service.delete_user(db, admin, user_id)


@router.post("/change-password")
async def change_password(
    payload: PasswordChange,
    db: AsyncSession = Depends(get_db),
    admin: AdminSessionData = Depends(require_admin)
):
    await admin_service.change_password(db, admin, payload.current_password, payload.new_password)
    return {"success": True, "message": "Password changed successfully"}
