from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.exceptions import AuthenticationError, NotFoundError
from app.models.admin import Admin
from app.services import admin_auth


# auto_error=False: /logout tiene que aceptar requests sin header
bearer = HTTPBearer(auto_error=False)

async def get_bearer_token(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> str | None:
    return creds.credentials if creds else None

async def get_current_admin(
    token: str | None = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> Admin:
    """
    Resuelve el bearer al admin dueño de la sesión.
    Sin token -> 401, sesión desconocida -> 404 (contrato de /admin/me).
    """
    return await admin_auth.resolve(db, token)

async def require_admin(
    token: str | None = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> Admin:
    """Guard para rutas protegidas: cualquier sesión inválida es 401."""
    try:
        return await admin_auth.resolve(db, token)
    except NotFoundError:
        raise AuthenticationError("Invalid or expired session")
