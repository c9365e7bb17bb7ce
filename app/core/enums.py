from enum import Enum


class LeaveType(str, Enum):
    SICK = "SICK"
    CASUAL = "CASUAL"
    ANNUAL = "ANNUAL"
    EMERGENCY = "EMERGENCY"


class LeaveStatus(str, Enum):
    PENDING = "PENDING"
    SUPERVISOR_APPROVED = "SUPERVISOR_APPROVED"
    # Kept for compatibility with stored data; no approval path produces it.
    HR_APPROVED = "HR_APPROVED"
    AGENCY_APPROVED = "AGENCY_APPROVED"
    REJECTED = "REJECTED"


# Forward order of the approval chain. REJECTED sits outside it.
LEAVE_STATUS_RANK = {
    LeaveStatus.PENDING: 0,
    LeaveStatus.SUPERVISOR_APPROVED: 1,
    LeaveStatus.HR_APPROVED: 2,
    LeaveStatus.AGENCY_APPROVED: 3,
}


class LeaveAuditAction(str, Enum):
    APPLIED = "APPLIED"
    AUTO_APPROVED_EMERGENCY = "AUTO_APPROVED_EMERGENCY"
    SUPERVISOR_APPROVED = "SUPERVISOR_APPROVED"
    AGENCY_APPROVED = "AGENCY_APPROVED"
    SUPERVISOR_SIGNED = "SUPERVISOR_SIGNED"
    HR_SIGNED = "HR_SIGNED"
    REJECTED = "REJECTED"
