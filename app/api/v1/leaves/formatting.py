from typing import Optional

from app.auth.roles import DEFAULT_ROLE_NAME, RoleClassification, classify_role
from app.core.enums import LeaveStatus, LeaveType
from app.core.models import LeaveRequest

from .schemas import DesignationSummary, EmployeeSummary, LeaveRequestResponse
from .workflow import SystemAutoApproval, parse_approved_by


def applicant_role_name(leave: LeaveRequest) -> str:
    """Role name of the leave's employee; employees without a login or role count as Staff."""
    user = leave.employee.user if leave.employee else None
    if user is not None and user.role is not None:
        return user.role.name
    return DEFAULT_ROLE_NAME


def pending_with(
    status: LeaveStatus,
    leave_type: LeaveType,
    applicant: RoleClassification,
    supervisor_approved_by: Optional[str] = None,
    hr_approved_by: Optional[str] = None,
    agency_approved_by: Optional[str] = None,
) -> str:
    """Who the leave is waiting on. Post-Acceptance labels are informational only."""
    if status == LeaveStatus.PENDING:
        if applicant.is_hr:
            return "Agency Admin"
        if applicant.is_supervisor:
            return "HR"
        return "Supervisor"
    if status == LeaveStatus.SUPERVISOR_APPROVED:
        return "HR"
    if status == LeaveStatus.HR_APPROVED:
        return "Agency Admin"
    if status == LeaveStatus.AGENCY_APPROVED and leave_type == LeaveType.EMERGENCY:
        if not supervisor_approved_by and applicant.is_frontline:
            return "Supervisor (Post-Acceptance)"
        if not hr_approved_by and not (applicant.is_hr or applicant.is_admin):
            return "HR (Post-Acceptance)"
        if isinstance(parse_approved_by(agency_approved_by), SystemAutoApproval):
            return "Agency Admin (Post-Acceptance)"
    return ""


def format_leave_request(leave: LeaveRequest) -> LeaveRequestResponse:
    """Build the API view. Needs employee, employee.designation and employee.user.role loaded."""
    role_name = applicant_role_name(leave)
    employee = leave.employee
    return LeaveRequestResponse(
        id=leave.id,
        employee_id=leave.employee_id,
        leave_type=leave.leave_type,
        start_date=leave.start_date,
        end_date=leave.end_date,
        reason=leave.reason,
        status=leave.status,
        applied_at=leave.applied_at,
        supervisor_approved_at=leave.supervisor_approved_at,
        supervisor_approved_by=leave.supervisor_approved_by,
        hr_approved_at=leave.hr_approved_at,
        hr_approved_by=leave.hr_approved_by,
        agency_approved_at=leave.agency_approved_at,
        agency_approved_by=leave.agency_approved_by,
        rejection_reason=leave.rejection_reason,
        pending_with=pending_with(
            LeaveStatus(leave.status),
            LeaveType(leave.leave_type),
            classify_role(role_name),
            supervisor_approved_by=leave.supervisor_approved_by,
            hr_approved_by=leave.hr_approved_by,
            agency_approved_by=leave.agency_approved_by,
        ),
        employee=EmployeeSummary(
            id=employee.id,
            name=employee.full_name,
            email=employee.email or "",
            role=role_name,
            designation=DesignationSummary(
                name=employee.designation.name if employee.designation else "",
            ),
        ),
    )
