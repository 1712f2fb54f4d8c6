"""
Notificaciones por email (texto plano).

Se envían fuera del request via BackgroundTasks: un fallo de SMTP se loguea
y nunca afecta la operación que lo disparó.
"""
import logging
import os
from datetime import datetime
from email.message import EmailMessage
from email.utils import formataddr

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from app.core.config import settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates", "email")

env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


def render(template_name: str, context: dict) -> str:
    return env.get_template(template_name).render(**context)


async def send_email(to_email: str, subject: str, template_name: str, context: dict) -> bool:
    if not settings.SMTP_HOST:
        logger.warning("SMTP not configured, skipping '%s' email to %s", subject, to_email)
        return False
    try:
        message = EmailMessage()
        message["From"] = formataddr((settings.MAIL_FROM_NAME, settings.MAIL_FROM))
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(render(template_name, context))

        await aiosmtplib.send(
            message,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            start_tls=settings.SMTP_STARTTLS,
            timeout=settings.SMTP_TIMEOUT,
        )
    except Exception:
        logger.exception("Failed to send '%s' email to %s", subject, to_email)
        return False
    logger.info("Sent '%s' email to %s", subject, to_email)
    return True


# --- admin ---

async def send_login_otp(to_email: str, name: str, code: str) -> bool:
    return await send_email(
        to_email,
        subject="Your login OTP code",
        template_name="login_otp.txt",
        context={"name": name, "code": code, "ttl_minutes": settings.OTP_TTL_MINUTES},
    )

async def send_admin_registered(to_email: str, name: str, created_at: datetime) -> bool:
    return await send_email(
        to_email,
        subject="Welcome to the Admin Panel",
        template_name="admin_registered.txt",
        context={"name": name, "email": to_email, "created_at": created_at},
    )

async def send_admin_login(to_email: str, name: str, login_time: datetime,
                           ip_address: str | None, user_agent: str | None) -> bool:
    return await send_email(
        to_email,
        subject="New login to your admin account",
        template_name="admin_login.txt",
        context={
            "name": name,
            "login_time": login_time,
            "ip_address": ip_address or "unknown",
            "user_agent": user_agent or "unknown",
        },
    )

# --- members ---

async def send_member_created(to_email: str, username: str) -> bool:
    return await send_email(
        to_email,
        subject="Your account has been created",
        template_name="member_created.txt",
        context={"username": username, "email": to_email},
    )

async def send_member_updated(to_email: str, username: str, changes: list[str]) -> bool:
    return await send_email(
        to_email,
        subject="Your account has been updated",
        template_name="member_updated.txt",
        context={"username": username, "changes": changes},
    )

async def send_member_deleted(to_email: str, username: str) -> bool:
    return await send_email(
        to_email,
        subject="Your account has been deleted",
        template_name="member_deleted.txt",
        context={"username": username},
    )
