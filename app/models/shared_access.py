"""Share grants: delegated access to one report for one recipient email."""

import enum
import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class AccessType(str, enum.Enum):
    """Access level granted to a share recipient."""
    READ = "read"
    WRITE = "write"


class SharedAccess(Base):
    """Grant of read or write access on a report to a recipient email.

    The recipient is identified by email rather than user id, so a report can
    be shared before the recipient registers.
    """

    __tablename__ = "shared_access"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    report_id = Column(
        Uuid(as_uuid=True), ForeignKey("reports.id", ondelete="CASCADE"), nullable=False
    )
    owner_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    shared_with_email = Column(String(255), nullable=False)  # Stored lower-cased
    access_type = Column(Enum(AccessType), nullable=False, default=AccessType.READ)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    report = relationship("Report", back_populates="shares")
    owner = relationship("User", back_populates="shares_created")

    __table_args__ = (
        UniqueConstraint(
            "report_id", "shared_with_email", name="uq_shared_access_report_email"
        ),
        Index("idx_shared_access_owner_id", "owner_id"),
        Index("idx_shared_access_email", "shared_with_email"),
    )
