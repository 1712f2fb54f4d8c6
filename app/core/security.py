import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext

from app.core.config import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

OTP_DIGITS = 6

def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)

def as_utc(value: datetime | None) -> datetime | None:
    # SQLite devuelve datetimes naive aunque la columna sea timezone=True
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

# --- sesiones ---

def generate_session_token() -> str:
    # 32 bytes = 256 bits
    return secrets.token_urlsafe(32)

def hash_session_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

def session_expiry(issued_at: datetime) -> datetime | None:
    ttl = settings.session_ttl_minutes
    if ttl is None:
        return None
    return issued_at + timedelta(minutes=ttl)

# --- OTP por email ---

def generate_otp() -> str:
    return f"{secrets.randbelow(10 ** OTP_DIGITS):0{OTP_DIGITS}d}"

def hash_otp(code: str) -> str:
    return hmac.new(settings.SECRET_KEY.encode("utf-8"), code.encode("utf-8"), hashlib.sha256).hexdigest()

def verify_otp(code: str, code_hash: str | None) -> bool:
    if not code_hash:
        return False
    return hmac.compare_digest(hash_otp(code), code_hash)

def otp_expiry(issued_at: datetime) -> datetime:
    return issued_at + timedelta(minutes=settings.OTP_TTL_MINUTES)
