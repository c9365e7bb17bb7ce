"""
Leave approval state machine.

plan_approval() computes every column change for one approve/reject call
without touching the database; the service applies the result and commits
it in a single transaction.

    PENDING -> SUPERVISOR_APPROVED -> AGENCY_APPROVED
    any non-rejected state -> REJECTED (terminal)

Emergency leaves start AGENCY_APPROVED; later supervisor/HR approvals on
them only add post-acceptance signatures.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Union

from app.auth.roles import RoleClass, RoleClassification
from app.core.enums import LEAVE_STATUS_RANK, LeaveAuditAction, LeaveStatus, LeaveType
from app.core.exceptions import ForbiddenError, InvalidTransitionError
from app.core.models.leave_request import SYSTEM_AUTO_EMERGENCY, LeaveRequest


# ----- Approver identity -----
@dataclass(frozen=True)
class UserApproval:
    user_id: str

    def to_column(self) -> str:
        return self.user_id


@dataclass(frozen=True)
class SystemAutoApproval:
    def to_column(self) -> str:
        return SYSTEM_AUTO_EMERGENCY


ApprovedBy = Union[UserApproval, SystemAutoApproval]


def parse_approved_by(raw: Optional[str]) -> Optional[ApprovedBy]:
    if not raw:
        return None
    if raw == SYSTEM_AUTO_EMERGENCY:
        return SystemAutoApproval()
    return UserApproval(raw)


# ----- Transition plan -----
@dataclass
class LeaveTransition:
    changes: Dict[str, Any]
    action: LeaveAuditAction
    from_status: LeaveStatus
    to_status: LeaveStatus = field(init=False)

    def __post_init__(self) -> None:
        self.to_status = LeaveStatus(self.changes.get("status", self.from_status))

    def apply(self, leave: LeaveRequest) -> None:
        for column, value in self.changes.items():
            setattr(leave, column, value.value if isinstance(value, LeaveStatus) else value)


def _stamp(changes: Dict[str, Any], stage: str, approver: ApprovedBy, now: datetime) -> None:
    changes[f"{stage}_approved_at"] = now
    changes[f"{stage}_approved_by"] = approver.to_column()


def plan_approval(
    leave: LeaveRequest,
    target_status: LeaveStatus,
    actor: RoleClassification,
    actor_user_id: str,
    applicant: RoleClassification,
    hr_available: Optional[bool] = None,
    rejection_reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LeaveTransition:
    """
    Decide the column changes for an approve/reject call.

    hr_available is only consulted for a supervisor approving a
    non-emergency leave; pass None otherwise.
    Raises ForbiddenError when the actor has no authority over the
    applicant and InvalidTransitionError when the leave is already rejected.
    """
    if now is None:
        now = datetime.utcnow()
    current = LeaveStatus(leave.status)
    if current == LeaveStatus.REJECTED:
        raise InvalidTransitionError("Leave request has already been rejected")

    if target_status == LeaveStatus.REJECTED:
        return LeaveTransition(
            changes={"status": LeaveStatus.REJECTED, "rejection_reason": rejection_reason},
            action=LeaveAuditAction.REJECTED,
            from_status=current,
        )

    approver = UserApproval(actor_user_id)
    # Emergency leave is already final: HR and supervisors only add their signature
    signature_only = leave.leave_type == LeaveType.EMERGENCY.value
    changes: Dict[str, Any] = {}

    if actor.primary == RoleClass.ADMIN:
        changes["status"] = LeaveStatus.AGENCY_APPROVED
        _stamp(changes, "agency", approver, now)
        if not leave.supervisor_approved_by:
            _stamp(changes, "supervisor", approver, now)
        if not leave.hr_approved_by:
            _stamp(changes, "hr", approver, now)
        action = LeaveAuditAction.AGENCY_APPROVED

    elif actor.primary == RoleClass.HR:
        if applicant.is_admin or applicant.is_hr:
            raise ForbiddenError("HR leaves can only be approved by an Agency Admin")
        _stamp(changes, "hr", approver, now)
        if signature_only:
            action = LeaveAuditAction.HR_SIGNED
        else:
            changes["status"] = LeaveStatus.AGENCY_APPROVED
            _stamp(changes, "agency", approver, now)
            if not leave.supervisor_approved_by:
                _stamp(changes, "supervisor", approver, now)
            action = LeaveAuditAction.AGENCY_APPROVED

    elif actor.primary == RoleClass.SUPERVISOR:
        if not applicant.is_frontline:
            raise ForbiddenError("Supervisors can only approve leaves for frontline staff")
        _stamp(changes, "supervisor", approver, now)
        if signature_only:
            action = LeaveAuditAction.SUPERVISOR_SIGNED
        elif hr_available is False:
            # No HR present: the supervisor is the final authority
            changes["status"] = LeaveStatus.AGENCY_APPROVED
            _stamp(changes, "agency", approver, now)
            if not leave.hr_approved_by:
                _stamp(changes, "hr", approver, now)
            action = LeaveAuditAction.AGENCY_APPROVED
        else:
            changes["status"] = LeaveStatus.SUPERVISOR_APPROVED
            action = LeaveAuditAction.SUPERVISOR_APPROVED

    else:
        raise ForbiddenError("You are not authorized to perform this action")

    # Status never moves backward along the chain
    new_status = changes.get("status")
    if new_status is not None and LEAVE_STATUS_RANK[new_status] < LEAVE_STATUS_RANK[current]:
        del changes["status"]
        action = LeaveAuditAction.SUPERVISOR_SIGNED

    return LeaveTransition(changes=changes, action=action, from_status=current)
