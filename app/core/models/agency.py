import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from app.db.session import Base


class Agency(Base):
    """
    Agency (tenant) in the multi-tenant platform.

    - id: internal primary key used for every tenant-scoped FK.
    - slug: public identifier used in URLs; never used as a foreign key.
    """

    __tablename__ = "agencies"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="ACTIVE")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    users = relationship("User", back_populates="agency", cascade="all, delete-orphan")
    employees = relationship("Employee", back_populates="agency", cascade="all, delete-orphan")
