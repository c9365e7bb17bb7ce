from app.auth.models import Role, User
from app.core.models.agency import Agency
from app.core.models.employee import Designation, Employee
from app.core.models.leave_request import SYSTEM_AUTO_EMERGENCY, LeaveRequest
from app.core.models.leave_audit_log import LeaveAuditLog

__all__ = [
    "Agency",
    "Designation",
    "Employee",
    "LeaveRequest",
    "LeaveAuditLog",
    "Role",
    "User",
    "SYSTEM_AUTO_EMERGENCY",
]
