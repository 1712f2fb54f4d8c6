# app/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore")

    APP_NAME: str = "Member Admin API"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:8081", "http://127.0.0.1:8081"]

    SECRET_KEY: str = Field(...)   # firma los hash de OTP

    # si viene DATABASE_URL se usa tal cual (tests: sqlite+aiosqlite)
    DATABASE_URL: str | None = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_NAME: str = "member_admin"

    # --- sesiones ---
    SESSION_TTL_MINUTES: int = 60 * 24 * 7   # 0 = sin vencimiento
    SINGLE_SESSION_PER_ADMIN: bool = True

    # --- OTP por email ---
    OTP_TTL_MINUTES: int = 5

    # --- SMTP ---
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_STARTTLS: bool = True
    SMTP_TIMEOUT: float = 10.0
    MAIL_FROM: str = "no-reply@member-admin.local"
    MAIL_FROM_NAME: str = "Admin Team"
    NOTIFY_ADMIN_ACTIONS: bool = True

    # --- Cloudinary ---
    CLOUDINARY_CLOUD_NAME: str | None = None
    CLOUDINARY_API_KEY: str | None = None
    CLOUDINARY_API_SECRET: str | None = None
    MAX_UPLOAD_MB: int = 2
    MEDIA_FOLDER_MEMBERS: str = "member-admin/members"

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4")

    @property
    def session_ttl_minutes(self) -> int | None:
        return self.SESSION_TTL_MINUTES or None

settings = Settings()  # type: ignore[call-arg]
