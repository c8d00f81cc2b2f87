import uuid

from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class User(Base):
    """Account that owns reports and vitals and can receive shared reports."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)  # Stored lower-cased
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    reports = relationship(
        "Report", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )
    vitals = relationship(
        "Vital", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    shares_created = relationship(
        "SharedAccess",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
