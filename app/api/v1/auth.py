from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.core import security
from app.models.admin import Admin
from app.schemas.admin import (
    RegisterIn, LoginIn, LoginOut, AdminOut, TwoFAChallengeOut, TwoFAStatusOut, MessageOut
)
from app.services import admin_auth, mailer
from app.api.deps import get_bearer_token, get_current_admin, require_admin

router = APIRouter(prefix="/admin", tags=["admin"])

@router.post("/register", response_model=AdminOut, status_code=201)
async def register(payload: RegisterIn, background_tasks: BackgroundTasks, db: AsyncSession = Depends(get_db)):
    admin = await admin_auth.register(db, payload)
    if settings.NOTIFY_ADMIN_ACTIONS:
        background_tasks.add_task(mailer.send_admin_registered, admin.email, admin.name, admin.created_at)
    return admin

@router.post("/login", response_model=LoginOut | TwoFAChallengeOut)
async def login(
    payload: LoginIn,
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    result = await admin_auth.login(db, payload.email, payload.password, payload.otp_code)

    # 2FA activo y sin código: se envía el OTP y se corta acá, sin token
    if isinstance(result, admin_auth.OtpChallenge):
        background_tasks.add_task(mailer.send_login_otp, result.email, result.admin.name, result.code)
        return TwoFAChallengeOut(email=result.email)

    admin = result.admin
    if settings.NOTIFY_ADMIN_ACTIONS:
        background_tasks.add_task(
            mailer.send_admin_login,
            admin.email,
            admin.name,
            security.utcnow(),
            request.client.host if request.client else None,
            request.headers.get("user-agent"),
        )
    return LoginOut(token=result.token, admin=AdminOut.model_validate(admin))

@router.post("/logout", response_model=MessageOut)
async def logout(token: str | None = Depends(get_bearer_token), db: AsyncSession = Depends(get_db)):
    await admin_auth.logout(db, token)
    return MessageOut(message="Logged out")

@router.get("/me", response_model=AdminOut)
async def me(current_admin: Admin = Depends(get_current_admin)):
    return current_admin

# ---------- 2FA (OTP por email) ----------
@router.post("/2fa/enable", response_model=TwoFAStatusOut)
async def twofa_enable(current_admin: Admin = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    admin = await admin_auth.set_two_factor(db, current_admin, True)
    return TwoFAStatusOut(two_factor_enabled=admin.two_factor_enabled, email=admin.email)

@router.post("/2fa/disable", response_model=TwoFAStatusOut)
async def twofa_disable(current_admin: Admin = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    admin = await admin_auth.set_two_factor(db, current_admin, False)
    return TwoFAStatusOut(two_factor_enabled=admin.two_factor_enabled, email=admin.email)

@router.get("/2fa/status", response_model=TwoFAStatusOut)
async def twofa_status(current_admin: Admin = Depends(require_admin)):
    return TwoFAStatusOut(two_factor_enabled=current_admin.two_factor_enabled, email=current_admin.email)
