from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_session
from app.core.security import decode_access_token
from app.models.admin import Admin
from app.services.auth_service import get_admin_by_id

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_admin(
    session: AsyncSession = Depends(get_session),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Admin:
    """Resolve the bearer token to the admin it was issued for."""
    if not credentials or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Not authorized, no token")
    admin_id = decode_access_token(credentials.credentials)
    if not admin_id:
        raise _unauthorized("Not authorized, token failed")
    try:
        aid = int(admin_id)
    except ValueError:
        raise _unauthorized("Not authorized, token failed")
    admin = await get_admin_by_id(session, aid)
    if not admin:
        raise _unauthorized("Not authorized, admin not found")
    return admin
