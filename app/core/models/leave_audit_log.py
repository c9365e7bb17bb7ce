"""Audit log for leave lifecycle: applied, signed, approved, rejected."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.db.session import Base


class LeaveAuditLog(Base):
    __tablename__ = "leave_audit_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    leave_request_id = Column(
        String(36),
        ForeignKey("leave_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action = Column(String(50), nullable=False)
    from_status = Column(String(30), nullable=True)
    to_status = Column(String(30), nullable=True)
    # User id or SYSTEM_AUTO_EMERGENCY
    performed_by = Column(String(36), nullable=True)
    performed_by_role = Column(String(100), nullable=True)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    leave_request = relationship("LeaveRequest", backref="audit_logs", foreign_keys=[leave_request_id])
