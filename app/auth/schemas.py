from typing import List, Optional

from pydantic import BaseModel, Field


class CurrentUser(BaseModel):
    """Lightweight representation of the authenticated principal for RBAC checks.
    role is the free-text role name; employee_id is None for accounts without an employee record.
    """

    id: str
    agency_id: str
    role: str
    employee_id: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)
