from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import check_permission
from app.auth.schemas import CurrentUser
from app.core.enums import LeaveStatus, LeaveType
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import LeaveApproval, LeaveCreate, LeaveRequestResponse
from . import service

router = APIRouter(prefix="/api/v1/leaves", tags=["leaves"])


@router.get("/types", response_model=List[str])
async def list_leave_types() -> List[str]:
    """Leave types for the apply form dropdown."""
    return [t.value for t in LeaveType]


@router.get("/statuses", response_model=List[str])
async def list_leave_statuses() -> List[str]:
    return [s.value for s in LeaveStatus]


@router.post(
    "",
    response_model=LeaveRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_leave_request(
    payload: LeaveCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> LeaveRequestResponse:
    """Apply for leave on behalf of an employee of the current agency. EMERGENCY leave is approved immediately."""
    try:
        return await service.create_leave_request(
            db,
            payload,
            current_user.agency_id,
            performed_by=current_user.id,
            performed_by_role=current_user.role,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[LeaveRequestResponse])
async def list_leave_requests(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[LeaveRequestResponse]:
    """Own leaves plus the current user's approval queue; admins see every leave in the agency."""
    return await service.get_leave_requests(
        db,
        current_user.agency_id,
        current_user.role,
        current_user.id,
    )


@router.put(
    "/{leave_id}/approve",
    response_model=LeaveRequestResponse,
    dependencies=[Depends(check_permission("approve_leave"))],
)
async def approve_leave(
    leave_id: str,
    payload: LeaveApproval,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> LeaveRequestResponse:
    """Approve (any non-REJECTED status) or reject (REJECTED + rejection_reason) a leave request."""
    try:
        return await service.approve_leave(
            db,
            current_user.agency_id,
            leave_id,
            payload,
            current_user.role,
            current_user.id,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
