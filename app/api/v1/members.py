import logging
from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.config import settings
from app.core.cdn import destroy, upload_image_avatar
from app.api.deps import require_admin
from app.schemas.admin import MessageOut
from app.schemas.member import MemberCreate, MemberUpdate, MemberOut, ImageUploadOut
from app.services import members as svc, mailer

MAX_BYTES = settings.MAX_UPLOAD_MB * 1024 * 1024

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/members", tags=["members"], dependencies=[Depends(require_admin)])

async def _read_and_validate_image(file: UploadFile) -> bytes:
    if file.content_type not in {"image/png", "image/jpeg"}:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only PNG or JPG images are allowed",
        )
    b = await file.read()
    if len(b) > MAX_BYTES:
        raise HTTPException(status_code=413, detail=f"Max {settings.MAX_UPLOAD_MB} MB")
    return b

@router.get("", response_model=list[MemberOut])
async def list_members(
    limit: int | None = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await svc.list_members(db, limit=limit, offset=offset)

@router.post("", response_model=MemberOut, status_code=201)
async def create_member(payload: MemberCreate, background_tasks: BackgroundTasks, db: AsyncSession = Depends(get_db)):
    m = await svc.create_member(db, payload)
    background_tasks.add_task(mailer.send_member_created, m.email, m.username)
    return m

# antes de /{id} para que "export" no se tome como id
@router.get("/export/csv")
async def export_csv(db: AsyncSession = Depends(get_db)):
    rows = await svc.list_members(db)
    logger.info("Exporting %d members to CSV", len(rows))
    filename = f"members_export_{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}.csv"
    return StreamingResponse(
        svc.iter_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@router.get("/{id}", response_model=MemberOut)
async def get_member(id: str, db: AsyncSession = Depends(get_db)):
    return await svc.get_member_or_404(db, id)

@router.put("/{id}", response_model=MemberOut)
async def update_member(id: str, patch: MemberUpdate, background_tasks: BackgroundTasks, db: AsyncSession = Depends(get_db)):
    result = await svc.update_member(db, id, patch)
    m = result.member
    background_tasks.add_task(mailer.send_member_updated, m.email, m.username, result.changes)
    return m

@router.delete("/{id}", response_model=MessageOut)
async def delete_member(id: str, background_tasks: BackgroundTasks, db: AsyncSession = Depends(get_db)):
    m = await svc.get_member_or_404(db, id)
    email, username = m.email, m.username
    await svc.delete_member(db, id)
    background_tasks.add_task(mailer.send_member_deleted, email, username)
    return MessageOut(message="Member deleted")

@router.post("/{id}/image", response_model=ImageUploadOut)
async def upload_member_image(id: str, file: UploadFile, db: AsyncSession = Depends(get_db)):
    m = await svc.get_member_or_404(db, id)
    bits = await _read_and_validate_image(file)
    url, public_id = upload_image_avatar(bits, settings.MEDIA_FOLDER_MEMBERS)

    if m.image_public_id:
        destroy(m.image_public_id)

    await svc.set_member_image(db, m, url, public_id)
    return ImageUploadOut(url=url, public_id=public_id)
