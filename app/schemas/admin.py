from datetime import datetime
from typing import Literal
from pydantic import BaseModel, EmailStr, Field

class RegisterIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    password_confirmation: str

class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    otp_code: str | None = Field(None, min_length=6, max_length=6)   # requerido sólo si 2FA activo

class AdminOut(BaseModel):
    id: str
    name: str
    email: EmailStr
    two_factor_enabled: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True

class LoginOut(BaseModel):
    token: str
    token_type: str = "bearer"
    admin: AdminOut

class TwoFAChallengeOut(BaseModel):
    requires_2fa: Literal[True] = True
    email: EmailStr
    message: str = "An OTP code has been sent to your email"

class TwoFAStatusOut(BaseModel):
    two_factor_enabled: bool
    email: EmailStr

class MessageOut(BaseModel):
    message: str
