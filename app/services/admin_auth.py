"""
Ciclo de vida de autenticación del admin.

    credenciales -> (2FA activo? desafío OTP -> OTP verificado) -> sesión emitida

Las sesiones viven en `admin_sessions` (sólo se guarda el sha256 del bearer).
Con SINGLE_SESSION_PER_ADMIN un login nuevo revoca las sesiones anteriores.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import security
from app.core.config import settings
from app.core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from app.models.admin import Admin, AdminSession
from app.schemas.admin import RegisterIn

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_OTP = "Invalid OTP"
EXPIRED_OTP = "OTP expired"


@dataclass
class SessionIssued:
    token: str
    admin: Admin


@dataclass
class OtpChallenge:
    admin: Admin
    code: str   # sólo para el email, nunca se serializa

    @property
    def email(self) -> str:
        return self.admin.email


async def get_admin_by_email(db: AsyncSession, email: str) -> Admin | None:
    res = await db.execute(select(Admin).where(Admin.email == email.lower()))
    return res.scalar_one_or_none()


async def register(db: AsyncSession, payload: RegisterIn) -> Admin:
    if payload.password != payload.password_confirmation:
        raise ValidationError({"password": ["The password confirmation does not match."]})

    email = payload.email.lower()
    if await get_admin_by_email(db, email):
        raise ConflictError("Email already in use")

    admin = Admin(
        name=payload.name,
        email=email,
        hashed_password=security.hash_password(payload.password),
        two_factor_enabled=False,
        created_at=security.utcnow(),
    )
    db.add(admin)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already in use")
    await db.refresh(admin)
    logger.info("Registered admin %s", admin.id)
    return admin


async def login(db: AsyncSession, email: str, password: str,
                otp_code: str | None = None) -> SessionIssued | OtpChallenge:
    admin = await get_admin_by_email(db, email)
    if not admin or not security.verify_password(password, admin.hashed_password):
        raise AuthenticationError(INVALID_CREDENTIALS)

    if admin.two_factor_enabled:
        if otp_code is None:
            return await issue_otp(db, admin)
        await consume_otp(db, admin, otp_code)

    token = await issue_session(db, admin)
    logger.info("Admin %s logged in", admin.id)
    return SessionIssued(token=token, admin=admin)


async def issue_otp(db: AsyncSession, admin: Admin) -> OtpChallenge:
    code = security.generate_otp()
    admin.set_otp(security.hash_otp(code), security.otp_expiry(security.utcnow()))
    await db.commit()
    logger.info("OTP challenge issued for admin %s", admin.id)
    return OtpChallenge(admin=admin, code=code)


async def consume_otp(db: AsyncSession, admin: Admin, otp_code: str) -> None:
    # igualdad primero, vencimiento después: un código correcto pero tardío es "expired"
    if not security.verify_otp(otp_code, admin.otp_code_hash):
        logger.warning("Invalid OTP for admin %s", admin.id)
        raise AuthenticationError(INVALID_OTP)

    expires_at = security.as_utc(admin.otp_expires_at)
    if expires_at is None or security.utcnow() > expires_at:
        logger.warning("Expired OTP for admin %s", admin.id)
        raise AuthenticationError(EXPIRED_OTP)

    admin.clear_otp()
    await db.commit()


async def issue_session(db: AsyncSession, admin: Admin) -> str:
    if settings.SINGLE_SESSION_PER_ADMIN:
        await db.execute(delete(AdminSession).where(AdminSession.admin_id == admin.id))

    token = security.generate_session_token()
    issued_at = security.utcnow()
    db.add(AdminSession(
        admin_id=admin.id,
        token_hash=security.hash_session_token(token),
        issued_at=issued_at,
        expires_at=security.session_expiry(issued_at),
    ))
    await db.commit()
    return token


async def _get_session(db: AsyncSession, token: str) -> AdminSession | None:
    res = await db.execute(
        select(AdminSession).where(AdminSession.token_hash == security.hash_session_token(token))
    )
    return res.scalar_one_or_none()


async def resolve(db: AsyncSession, token: str | None) -> Admin:
    if not token:
        raise AuthenticationError("Not authenticated")

    session = await _get_session(db, token)
    if session is not None:
        expires_at = security.as_utc(session.expires_at)
        if expires_at is not None and security.utcnow() > expires_at:
            await db.delete(session)
            await db.commit()
            session = None

    if session is None:
        raise NotFoundError("Admin not found")

    admin = await db.get(Admin, session.admin_id)
    if admin is None:
        raise NotFoundError("Admin not found")
    return admin


async def logout(db: AsyncSession, token: str | None) -> None:
    """Idempotente: token ausente, desconocido o ya revocado no es error."""
    if not token:
        return
    res = await db.execute(
        delete(AdminSession).where(AdminSession.token_hash == security.hash_session_token(token))
    )
    await db.commit()
    if res.rowcount:
        logger.info("Session revoked")


async def set_two_factor(db: AsyncSession, admin: Admin, enabled: bool) -> Admin:
    admin.two_factor_enabled = enabled
    admin.clear_otp()
    await db.commit()
    await db.refresh(admin)
    logger.info("Admin %s two-factor %s", admin.id, "enabled" if enabled else "disabled")
    return admin
