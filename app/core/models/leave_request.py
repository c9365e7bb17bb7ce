"""Leave requests routed through supervisor -> HR -> agency admin approval."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.core.enums import LeaveStatus
from app.db.session import Base


# Stored in agency_approved_by when an emergency leave is approved at creation.
SYSTEM_AUTO_EMERGENCY = "SYSTEM_AUTO_EMERGENCY"


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    agency_id = Column(String(36), ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id = Column(String(36), ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type = Column(String(20), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(String(30), nullable=False, default=LeaveStatus.PENDING.value, index=True)

    # *_by columns hold a user id, or SYSTEM_AUTO_EMERGENCY for agency_approved_by
    supervisor_approved_at = Column(DateTime(timezone=True), nullable=True)
    supervisor_approved_by = Column(String(36), nullable=True)
    hr_approved_at = Column(DateTime(timezone=True), nullable=True)
    hr_approved_by = Column(String(36), nullable=True)
    agency_approved_at = Column(DateTime(timezone=True), nullable=True)
    agency_approved_by = Column(String(36), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    applied_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    agency = relationship("Agency", backref="leave_requests", foreign_keys=[agency_id])
    employee = relationship("Employee", backref="leave_requests", foreign_keys=[employee_id])
