"""Agency personnel. An employee may or may not have a login (User) linked to it."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.session import Base


class Designation(Base):
    """Agency-scoped job title (e.g. Security Guard, Site Supervisor)."""

    __tablename__ = "designations"
    __table_args__ = (
        UniqueConstraint("agency_id", "name", name="uq_designation_agency_name"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    agency_id = Column(String(36), ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class Employee(Base):
    __tablename__ = "employees"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    agency_id = Column(String(36), ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    designation_id = Column(String(36), ForeignKey("designations.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    agency = relationship("Agency", back_populates="employees")
    designation = relationship("Designation", foreign_keys=[designation_id])
    # Login account linked through users.employee_id; None for personnel without one
    user = relationship("User", back_populates="employee", uselist=False)
