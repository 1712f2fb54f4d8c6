import uuid
from datetime import datetime
from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.core.db import Base
from app.core.security import utcnow

class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # 2FA por email: el código se guarda hasheado, nunca en claro
    two_factor_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    otp_code_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    otp_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    sessions = relationship(
        "AdminSession",
        back_populates="admin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # los dos campos OTP se escriben y se limpian siempre juntos
    def set_otp(self, code_hash: str, expires_at: datetime) -> None:
        self.otp_code_hash = code_hash
        self.otp_expires_at = expires_at

    def clear_otp(self) -> None:
        self.otp_code_hash = None
        self.otp_expires_at = None


class AdminSession(Base):
    __tablename__ = "admin_sessions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    admin_id: Mapped[str] = mapped_column(ForeignKey("admins.id", ondelete="CASCADE"), index=True)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)   # sha256 del bearer
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    admin = relationship("Admin", back_populates="sessions")
