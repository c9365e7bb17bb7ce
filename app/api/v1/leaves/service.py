"""Leave create, role-scoped listing, and approve/reject routing with audit."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, false, func, not_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.auth.models import Role, User
from app.auth.roles import DEFAULT_ROLE_NAME, HR_TOKEN, SUPERVISOR_TOKEN, RoleClass, classify_role
from app.core.enums import LeaveAuditAction, LeaveStatus, LeaveType
from app.core.exceptions import NotFoundError, ServiceError
from app.core.models import Employee, LeaveAuditLog, LeaveRequest

from .formatting import applicant_role_name, format_leave_request
from .resolver import is_role_available
from .schemas import LeaveApproval, LeaveCreate, LeaveRequestResponse
from .workflow import SystemAutoApproval, plan_approval

logger = logging.getLogger(__name__)


def _leave_load_options():
    return (
        selectinload(LeaveRequest.employee).options(
            selectinload(Employee.designation),
            selectinload(Employee.user).selectinload(User.role),
        ),
    )


async def _get_leave(
    db: AsyncSession,
    agency_id: str,
    leave_id: str,
    for_update: bool = False,
) -> Optional[LeaveRequest]:
    q = (
        select(LeaveRequest)
        .where(LeaveRequest.id == leave_id, LeaveRequest.agency_id == agency_id)
        .options(*_leave_load_options())
        .execution_options(populate_existing=True)
    )
    if for_update:
        q = q.with_for_update(of=LeaveRequest)
    return (await db.execute(q)).scalar_one_or_none()


def _log_leave_audit(
    db: AsyncSession,
    leave_request_id: str,
    action: LeaveAuditAction,
    performed_by: Optional[str],
    performed_by_role: Optional[str],
    from_status: Optional[LeaveStatus] = None,
    to_status: Optional[LeaveStatus] = None,
    remarks: Optional[str] = None,
) -> None:
    db.add(
        LeaveAuditLog(
            leave_request_id=leave_request_id,
            action=action.value,
            from_status=from_status.value if from_status else None,
            to_status=to_status.value if to_status else None,
            performed_by=performed_by,
            performed_by_role=performed_by_role,
            remarks=remarks,
        )
    )


async def create_leave_request(
    db: AsyncSession,
    payload: LeaveCreate,
    agency_id: str,
    performed_by: Optional[str] = None,
    performed_by_role: Optional[str] = None,
) -> LeaveRequestResponse:
    """Create a leave for an employee of agency_id. Emergency leave is approved immediately by the system."""
    employee = await db.get(Employee, payload.employee_id)
    if not employee or employee.agency_id != agency_id:
        logger.warning("Leave requested for employee %s outside agency %s", payload.employee_id, agency_id)
        raise NotFoundError("Employee not found in your agency context")

    is_emergency = payload.leave_type == LeaveType.EMERGENCY
    req = LeaveRequest(
        agency_id=employee.agency_id,
        employee_id=employee.id,
        leave_type=payload.leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        status=(LeaveStatus.AGENCY_APPROVED if is_emergency else LeaveStatus.PENDING).value,
    )
    if is_emergency:
        # Supervisor and HR stamps stay empty; they are collected later as post-acceptance signatures
        req.agency_approved_at = datetime.utcnow()
        req.agency_approved_by = SystemAutoApproval().to_column()
    db.add(req)
    await db.flush()

    initial_status = LeaveStatus(req.status)
    _log_leave_audit(db, req.id, LeaveAuditAction.APPLIED, performed_by, performed_by_role,
                     to_status=initial_status)
    if is_emergency:
        _log_leave_audit(db, req.id, LeaveAuditAction.AUTO_APPROVED_EMERGENCY,
                         SystemAutoApproval().to_column(), None,
                         to_status=initial_status)
    await db.commit()

    logger.info("Leave %s created for employee %s (%s, %s)", req.id, employee.id, req.leave_type, req.status)
    created = await _get_leave(db, agency_id, req.id)
    return format_leave_request(created)


def _role_name_contains(token: str):
    # Employees without a login or role are classified as Staff
    return func.coalesce(Role.name, DEFAULT_ROLE_NAME).ilike(f"%{token}%")


async def get_leave_requests(
    db: AsyncSession,
    agency_id: Optional[str],
    actor_role: Optional[str],
    actor_user_id: Optional[str],
) -> List[LeaveRequestResponse]:
    """Leaves the actor may see: admins see the whole agency, others their own plus their approval queue."""
    if not agency_id or not actor_role:
        return []

    actor = classify_role(actor_role)
    q = (
        select(LeaveRequest)
        .join(Employee, LeaveRequest.employee_id == Employee.id)
        .outerjoin(User, User.employee_id == Employee.id)
        .outerjoin(Role, User.role_id == Role.id)
        .where(LeaveRequest.agency_id == agency_id)
        .options(*_leave_load_options())
        .order_by(LeaveRequest.created_at.desc())
    )

    if not actor.is_admin:
        applicant_not_admin_or_hr = and_(not_(_role_name_contains("admin")), not_(_role_name_contains("hr")))
        applicant_frontline = and_(applicant_not_admin_or_hr, not_(_role_name_contains("supervisor")))
        emergency_auto_approved = and_(
            LeaveRequest.status == LeaveStatus.AGENCY_APPROVED.value,
            LeaveRequest.leave_type == LeaveType.EMERGENCY.value,
        )
        pending = LeaveRequest.status == LeaveStatus.PENDING.value

        # Without a user id the actor owns nothing and has no approval history
        is_actor = User.id == actor_user_id if actor_user_id else false()
        conditions = [is_actor]

        if actor.is_hr:
            conditions.append(LeaveRequest.status == LeaveStatus.SUPERVISOR_APPROVED.value)
            # HR is next in line for staff leave only when no supervisor is present
            if not await is_role_available(db, agency_id, SUPERVISOR_TOKEN):
                conditions.append(and_(pending, applicant_not_admin_or_hr))
            conditions.append(and_(pending, _role_name_contains("supervisor")))
            conditions.append(and_(
                emergency_auto_approved,
                LeaveRequest.hr_approved_at.is_(None),
                applicant_not_admin_or_hr,
            ))
            if actor_user_id:
                conditions.append(LeaveRequest.hr_approved_by == actor_user_id)

        if actor.is_supervisor:
            conditions.append(and_(
                pending,
                applicant_frontline,
                or_(User.id.is_(None), not_(is_actor)),
            ))
            conditions.append(and_(
                emergency_auto_approved,
                LeaveRequest.supervisor_approved_at.is_(None),
                applicant_frontline,
            ))
            if actor_user_id:
                conditions.append(LeaveRequest.supervisor_approved_by == actor_user_id)

        q = q.where(or_(*conditions))

    result = await db.execute(q)
    rows = result.scalars().unique().all()
    return [format_leave_request(r) for r in rows]


async def approve_leave(
    db: AsyncSession,
    agency_id: str,
    leave_id: str,
    approval: LeaveApproval,
    actor_role: str,
    actor_user_id: str,
) -> LeaveRequestResponse:
    """Apply an approval or rejection by the actor; the resulting status is computed, not taken from the caller."""
    leave = await _get_leave(db, agency_id, leave_id, for_update=True)
    if not leave:
        logger.warning("Leave %s not found in agency %s", leave_id, agency_id)
        raise NotFoundError("Leave request not found")

    actor = classify_role(actor_role)
    applicant = classify_role(applicant_role_name(leave))

    hr_available = None
    if approval.status != LeaveStatus.REJECTED and actor.primary == RoleClass.SUPERVISOR:
        hr_available = await is_role_available(db, leave.agency_id, HR_TOKEN)

    try:
        transition = plan_approval(
            leave,
            approval.status,
            actor=actor,
            actor_user_id=actor_user_id,
            applicant=applicant,
            hr_available=hr_available,
            rejection_reason=approval.rejection_reason,
        )
    except ServiceError as e:
        logger.warning(
            "Leave %s: %r (%s) refused on applicant role %r: %s",
            leave_id, actor_role, actor_user_id, applicant.name, e.message,
        )
        raise

    transition.apply(leave)
    _log_leave_audit(
        db,
        leave.id,
        transition.action,
        actor_user_id,
        actor_role,
        from_status=transition.from_status,
        to_status=transition.to_status,
        remarks=approval.rejection_reason,
    )
    await db.commit()

    logger.info(
        "Leave %s %s by %s: %s -> %s",
        leave.id, transition.action.value, actor_user_id,
        transition.from_status.value, transition.to_status.value,
    )
    updated = await _get_leave(db, agency_id, leave_id)
    return format_leave_request(updated)
