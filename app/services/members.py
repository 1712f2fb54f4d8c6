import csv
import io
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import security
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.member import Member
from app.schemas.member import MemberCreate, MemberUpdate

logger = logging.getLogger(__name__)

CSV_HEADER = ["ID", "Username", "Email", "Image"]
EMAIL_IN_USE = "Email already in use"


@dataclass
class MemberChange:
    member: Member
    changes: list[str] = field(default_factory=list)   # texto para el email de aviso


async def _email_taken(db: AsyncSession, email: str, exclude_id: str | None = None) -> bool:
    q = select(Member.id).where(Member.email == email)
    if exclude_id:
        q = q.where(Member.id != exclude_id)
    res = await db.execute(q)
    return res.first() is not None


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError:
        # carrera contra otro alta/edición con el mismo email
        await db.rollback()
        raise ConflictError(EMAIL_IN_USE)


async def list_members(db: AsyncSession, limit: int | None = None, offset: int = 0) -> list[Member]:
    q = select(Member).order_by(Member.created_at, Member.id).offset(offset)
    if limit is not None:
        q = q.limit(limit)
    res = await db.execute(q)
    return list(res.scalars().all())


async def get_member_or_404(db: AsyncSession, id: str) -> Member:
    m = await db.get(Member, id)
    if not m:
        raise NotFoundError("Member not found")
    return m


async def create_member(db: AsyncSession, payload: MemberCreate) -> Member:
    email = payload.email.lower()
    if await _email_taken(db, email):
        raise ConflictError(EMAIL_IN_USE)

    m = Member(
        username=payload.username,
        email=email,
        hashed_password=security.hash_password(payload.password),
        image=payload.image,
        created_at=security.utcnow(),
    )
    db.add(m)
    await _commit(db)
    await db.refresh(m)
    logger.info("Created member %s", m.id)
    return m


async def update_member(db: AsyncSession, id: str, patch: MemberUpdate) -> MemberChange:
    m = await get_member_or_404(db, id)
    data = patch.model_dump(exclude_unset=True)

    errors = {k: [f"The {k} field may not be null."] for k in ("username", "email") if k in data and data[k] is None}
    if errors:
        raise ValidationError(errors)

    if data.get("password") is None:
        data.pop("password", None)
    if "email" in data:
        data["email"] = data["email"].lower()
        if data["email"] != m.email and await _email_taken(db, data["email"], exclude_id=m.id):
            raise ConflictError(EMAIL_IN_USE)

    result = MemberChange(member=m)
    if "username" in data:
        m.username = data["username"]
        result.changes.append(f"Username: {m.username}")
    if "email" in data:
        m.email = data["email"]
        result.changes.append(f"Email: {m.email}")
    if "password" in data:
        m.hashed_password = security.hash_password(data["password"])
        result.changes.append("Password: changed")
    if "image" in data:
        # reemplazo completo; el asset anterior queda huérfano
        m.image = data["image"]
        m.image_public_id = None
        result.changes.append("Image: updated")

    await _commit(db)
    await db.refresh(m)
    logger.info("Updated member %s (%s)", m.id, ", ".join(sorted(data)) or "no fields")
    return result


async def delete_member(db: AsyncSession, id: str) -> Member:
    m = await get_member_or_404(db, id)
    await db.delete(m)
    await db.commit()
    logger.info("Deleted member %s", id)
    return m


async def set_member_image(db: AsyncSession, m: Member, url: str, public_id: str) -> Member:
    m.image = url
    m.image_public_id = public_id
    await db.commit()
    await db.refresh(m)
    return m


def iter_csv(members: Iterable[Member]) -> Iterator[str]:
    buf = io.StringIO()
    writer = csv.writer(buf)

    def flush() -> str:
        data = buf.getvalue()
        buf.seek(0)
        buf.truncate(0)
        return data

    writer.writerow(CSV_HEADER)
    yield flush()
    for m in members:
        writer.writerow([m.id, m.username, m.email, m.image or ""])
        yield flush()
