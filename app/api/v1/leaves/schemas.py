from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.enums import LeaveStatus, LeaveType


# ----- Create Leave -----
class LeaveCreate(BaseModel):
    """Apply for leave for an employee of the caller's agency."""

    employee_id: str = Field(..., min_length=1)
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=1, max_length=2000)

    @field_validator("leave_type", mode="before")
    @classmethod
    def normalize_leave_type(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def validate_dates(self) -> "LeaveCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


# ----- Approve / Reject -----
class LeaveApproval(BaseModel):
    """REJECTED rejects; any other status is an approval trigger and the resulting status is computed."""

    status: LeaveStatus
    rejection_reason: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def require_reason_on_reject(self) -> "LeaveApproval":
        if self.status == LeaveStatus.REJECTED and not (self.rejection_reason and self.rejection_reason.strip()):
            raise ValueError("rejection_reason is required when rejecting a leave")
        return self


# ----- Leave Request Response -----
class DesignationSummary(BaseModel):
    name: str = ""


class EmployeeSummary(BaseModel):
    id: str
    name: str
    email: str = ""
    role: str
    designation: DesignationSummary


class LeaveRequestResponse(BaseModel):
    id: str
    employee_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    applied_at: datetime
    supervisor_approved_at: Optional[datetime] = None
    supervisor_approved_by: Optional[str] = None
    hr_approved_at: Optional[datetime] = None
    hr_approved_by: Optional[str] = None
    agency_approved_at: Optional[datetime] = None
    agency_approved_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    # Derived at read time, never stored
    pending_with: str = ""
    employee: EmployeeSummary
