"""
Role availability for absence-skip routing.

A role is available when at least one active user holding it is present
today. Users without an employee record (high-level accounts) are always
counted as present; employee-linked users are absent while an
AGENCY_APPROVED leave covers today.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import Role, User
from app.core.enums import LeaveStatus
from app.core.models import LeaveRequest

logger = logging.getLogger(__name__)


async def _has_active_leave(db: AsyncSession, employee_id: str, today: date) -> bool:
    r = await db.execute(
        select(LeaveRequest.id).where(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status == LeaveStatus.AGENCY_APPROVED.value,
            LeaveRequest.start_date <= today,
            LeaveRequest.end_date >= today,
        ).limit(1)
    )
    return r.scalar_one_or_none() is not None


async def is_role_available(
    db: AsyncSession,
    agency_id: str,
    role_name_part: str,
    today: Optional[date] = None,
) -> bool:
    """Return True if any active user whose role name contains role_name_part is present today."""
    if today is None:
        today = date.today()

    r = await db.execute(
        select(User.id, User.employee_id)
        .join(Role, User.role_id == Role.id)
        .where(
            User.agency_id == agency_id,
            User.is_active.is_(True),
            Role.name.ilike(f"%{role_name_part}%"),
        )
    )
    users = r.all()
    if not users:
        logger.debug("No active '%s' users in agency %s", role_name_part, agency_id)
        return False

    for _user_id, employee_id in users:
        if not employee_id:
            return True
        if not await _has_active_leave(db, employee_id, today):
            return True

    logger.info("All '%s' users in agency %s are on leave today", role_name_part, agency_id)
    return False
