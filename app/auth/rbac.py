import logging

from fastapi import Depends, HTTPException, status

from app.auth.dependencies import get_current_user
from app.auth.roles import classify_role
from app.auth.schemas import CurrentUser

logger = logging.getLogger(__name__)


def check_permission(action: str):
    """
    Dependency factory to enforce a specific permission.

    Admin, HR and supervisor roles pass unconditionally; finer-grained
    authority over individual records is decided by the service layer.

    Example:
        Depends(check_permission("approve_leave"))
    """

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> None:
        role = classify_role(current_user.role)
        if role.is_admin or role.is_hr or role.is_supervisor:
            return
        if action not in (current_user.permissions or []):
            logger.warning(
                "Permission %s denied for user %s (role %r)",
                action,
                current_user.id,
                current_user.role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to access this resource",
            )

    return _checker
