import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.session import Base


class User(Base):
    """Login account within an agency. High-level accounts may have no employee record."""

    __tablename__ = "users"
    __table_args__ = (
        # Email must be unique per agency
        UniqueConstraint("agency_id", "email", name="uq_user_agency_email"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    agency_id = Column(String(36), ForeignKey("agencies.id"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    role_id = Column(String(36), ForeignKey("roles.id"), nullable=True)
    employee_id = Column(String(36), ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    agency = relationship("Agency", back_populates="users")
    role = relationship("Role", foreign_keys=[role_id])
    employee = relationship("Employee", back_populates="user", foreign_keys=[employee_id])


class Role(Base):
    """Agency-scoped role. The free-text name drives admin/HR/supervisor classification."""

    __tablename__ = "roles"
    __table_args__ = (
        # Role name must be unique within an agency
        UniqueConstraint("agency_id", "name", name="uq_role_agency_name"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    agency_id = Column(String(36), ForeignKey("agencies.id"), nullable=False)
    name = Column(String(100), nullable=False)
    # Example: ["apply_leave", "view_leaves", "approve_leave"]
    permissions = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
