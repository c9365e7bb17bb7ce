import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.auth.models import User
from app.auth.schemas import CurrentUser
from app.auth.security import decode_access_token
from app.db.session import get_db

logger = logging.getLogger(__name__)

# Tokens are issued by the identity service; this backend only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve the authenticated user, their role name and permissions from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    user_id = payload.get("user_id") or payload.get("sub")
    agency_id = payload.get("agency_id")
    if not user_id or not agency_id:
        raise credentials_exception

    stmt = (
        select(User)
        .options(selectinload(User.role))
        .where(User.id == str(user_id), User.agency_id == str(agency_id))
    )
    user = (await db.execute(stmt)).scalar_one_or_none()
    if not user or not user.is_active:
        logger.warning("Rejected token for unknown or inactive user %s", user_id)
        raise credentials_exception

    # Stored role is authoritative; the token's role claim is never trusted
    role_name = user.role.name if user.role else ""
    permissions = list(user.role.permissions or []) if user.role else []

    return CurrentUser(
        id=user.id,
        agency_id=user.agency_id,
        role=role_name,
        employee_id=user.employee_id,
        permissions=permissions,
    )
