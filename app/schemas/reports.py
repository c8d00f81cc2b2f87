"""Report models."""
from datetime import date as date_type, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.shared_access import AccessType


class ReportMetadata(BaseModel):
    """Descriptive fields submitted alongside an uploaded report file."""

    type: str = Field(min_length=1, max_length=100)
    title: str = Field(min_length=1, max_length=255)
    date: date_type
    notes: Optional[str] = None


class ReportFilters(BaseModel):
    type: Optional[str] = None
    start_date: Optional[date_type] = None
    end_date: Optional[date_type] = None
    search: Optional[str] = None


class ReportOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    type: str
    title: str
    date: date_type
    notes: Optional[str] = None
    original_filename: Optional[str] = None
    content_type: Optional[str] = None
    file_size: Optional[int] = None
    created_at: Optional[datetime] = None


class ReportDetailOut(ReportOut):
    access_role: str  # "owner" or "viewer"


class SharedReportOut(ReportOut):
    """Report shared with the caller, with owner details for display."""

    owner_name: str
    owner_email: str
    access_type: AccessType
