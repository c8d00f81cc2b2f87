import uuid

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class Report(Base):
    """Uploaded medical report: file reference plus descriptive metadata."""

    __tablename__ = "reports"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type = Column(String(100), nullable=False)  # Free-text category, e.g. "Blood Test"
    title = Column(String(255), nullable=False)

    # Storage
    file_path = Column(String(255), nullable=False)  # Generated name inside the upload dir
    original_filename = Column(String(255))  # Display only, never used to locate the file
    content_type = Column(String(100))
    file_size = Column(Integer)

    date = Column(Date, nullable=False)  # When the test/visit happened, not upload time
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    owner = relationship("User", back_populates="reports")
    shares = relationship(
        "SharedAccess",
        back_populates="report",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    # No delete cascade: the database clears vitals.report_id
    vitals = relationship("Vital", back_populates="report", passive_deletes=True)

    __table_args__ = (
        Index("idx_reports_user_id", "user_id"),
        Index("idx_reports_user_date", "user_id", "date"),
    )
