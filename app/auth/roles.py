"""
Role classification from free-text role names.

Role names are entered by agency admins ("Agency Admin", "HR Manager",
"Night Shift Supervisor", "Guard"), so authority is derived by
case-insensitive substring match on the tokens "admin", "hr" and
"supervisor". Matches are not exclusive: "HR Supervisor" is both HR and
supervisor, and callers check each flag independently.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

ADMIN_TOKEN = "admin"
HR_TOKEN = "hr"
SUPERVISOR_TOKEN = "supervisor"

# Applicants without a linked user/role are treated as this role name
DEFAULT_ROLE_NAME = "Staff"


class RoleClass(str, Enum):
    ADMIN = "ADMIN"
    HR = "HR"
    SUPERVISOR = "SUPERVISOR"
    STAFF = "STAFF"


@dataclass(frozen=True)
class RoleClassification:
    name: str
    is_admin: bool
    is_hr: bool
    is_supervisor: bool

    @property
    def is_frontline(self) -> bool:
        return not (self.is_admin or self.is_hr or self.is_supervisor)

    @property
    def primary(self) -> RoleClass:
        """Highest-precedence class: admin > HR > supervisor > staff."""
        if self.is_admin:
            return RoleClass.ADMIN
        if self.is_hr:
            return RoleClass.HR
        if self.is_supervisor:
            return RoleClass.SUPERVISOR
        return RoleClass.STAFF


def classify_role(role_name: Optional[str]) -> RoleClassification:
    name = role_name or DEFAULT_ROLE_NAME
    lowered = name.lower()
    return RoleClassification(
        name=name,
        is_admin=ADMIN_TOKEN in lowered,
        is_hr=HR_TOKEN in lowered,
        is_supervisor=SUPERVISOR_TOKEN in lowered,
    )
