import uuid

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, String, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base


class Vital(Base):
    """Single timestamped vital-sign reading."""

    __tablename__ = "vitals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type = Column(String(50), nullable=False)  # Key of VITAL_TYPES
    value = Column(Float, nullable=False)
    unit = Column(String(20), nullable=False)  # Always derived from type
    recorded_at = Column(DateTime(timezone=True), nullable=False)
    report_id = Column(
        Uuid(as_uuid=True), ForeignKey("reports.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="vitals")
    report = relationship("Report", back_populates="vitals")

    __table_args__ = (
        Index("idx_vitals_user_recorded_at", "user_id", "recorded_at"),
        Index("idx_vitals_user_type", "user_id", "type"),
    )
